"""Builders and fakes for quiz session tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from course_quiz.quiz.errors import PersistError
from course_quiz.quiz.models import Course, ProgressCommit, Question
from course_quiz.quiz.progress import CommitOutcome
from course_quiz.quiz.scheduler import ManualScheduler
from course_quiz.quiz.session import QuizSession


def question_record(
    prompt: str = "Pick one",
    *,
    correct: Any = 0,
    options: Optional[Sequence[Any]] = None,
    explanation: Any = "Because.",
    **extra: Any,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "question": prompt,
        "options": list(options) if options is not None else [
            "alpha",
            "beta",
            "gamma",
            "delta",
        ],
        "correct_answer": correct,
        "explanation": explanation,
    }
    record.update(extra)
    return record


@dataclass
class RecordingCommitter:
    commits: list[tuple[Course, ProgressCommit]] = field(default_factory=list)

    def commit(self, course: Course, result: ProgressCommit) -> CommitOutcome:
        self.commits.append((course, result))
        return CommitOutcome("skipped", result)


@dataclass
class RecordingSink:
    """In-memory progress sink with switchable failures."""

    fail_progress: bool = False
    fail_points: bool = False
    progress_calls: list[tuple[str, int]] = field(default_factory=list)
    points_calls: list[tuple[str, int, datetime]] = field(
        default_factory=list
    )

    def update_course_progress(self, course_id: str, progress: int) -> None:
        self.progress_calls.append((course_id, progress))
        if self.fail_progress:
            raise PersistError("progress write failed")

    def add_user_points(
        self, user_id: str, points_delta: int, activity_timestamp: datetime
    ) -> None:
        self.points_calls.append((user_id, points_delta, activity_timestamp))
        if self.fail_points:
            raise PersistError("points write failed")


class QuizFactory:
    def course(self, **overrides: Any) -> Course:
        values: dict[str, Any] = {
            "id": "course-1",
            "user_id": "user-1",
            "title": "Sample Course",
            "progress": 0,
        }
        values.update(overrides)
        return Course(**values)

    def questions(self, *answers: int) -> list[Question]:
        return [
            Question(
                id=str(position + 1),
                prompt=f"Question {position + 1}?",
                options=("alpha", "beta", "gamma", "delta"),
                correct_answer=answer,
                explanation=f"Explanation {position + 1}",
            )
            for position, answer in enumerate(answers)
        ]

    def session(
        self,
        *answers: int,
        course: Optional[Course] = None,
        committer: Any = None,
        scheduler: Optional[ManualScheduler] = None,
        reveal_seconds: float = 2.0,
        points_per_correct: int = 10,
    ) -> tuple[QuizSession, ManualScheduler, Any]:
        scheduler = scheduler or ManualScheduler()
        committer = committer or RecordingCommitter()
        session = QuizSession(
            course or self.course(),
            self.questions(*(answers or (0,))),
            scheduler=scheduler,
            committer=committer,
            reveal_seconds=reveal_seconds,
            points_per_correct=points_per_correct,
        )
        return session, scheduler, committer
