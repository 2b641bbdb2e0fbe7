from ._main import build_arg_parser
from .errors import (
    CourseNotFound,
    LoadError,
    NoQuestionsAvailable,
    PersistError,
    QuestionsCorrupted,
    SourceUnavailable,
    StoreError,
)
from .models import (
    Course,
    Identity,
    ProgressCommit,
    Question,
    build_commit,
    filter_questions,
    parse_question,
    score_percentage,
)
from .progress import (
    AccountCommitter,
    CommitOutcome,
    GuestCommitter,
    select_committer,
)
from .scheduler import ManualScheduler
from .session import OptionView, QuizPhase, QuizSession
from .source import (
    GuestCatalogSource,
    LoadedQuiz,
    StoreQuestionSource,
    resolve_quiz,
    select_source,
)
from .store import CourseStore

__all__ = [
    "build_arg_parser",
    "CourseNotFound",
    "LoadError",
    "NoQuestionsAvailable",
    "PersistError",
    "QuestionsCorrupted",
    "SourceUnavailable",
    "StoreError",
    "Course",
    "Identity",
    "ProgressCommit",
    "Question",
    "build_commit",
    "filter_questions",
    "parse_question",
    "score_percentage",
    "AccountCommitter",
    "CommitOutcome",
    "GuestCommitter",
    "select_committer",
    "ManualScheduler",
    "OptionView",
    "QuizPhase",
    "QuizSession",
    "GuestCatalogSource",
    "LoadedQuiz",
    "StoreQuestionSource",
    "resolve_quiz",
    "select_source",
    "CourseStore",
]
