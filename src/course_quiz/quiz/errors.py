"""Exception types raised by the quiz loader, store and commit seams."""

from __future__ import annotations


class QuizError(RuntimeError):
    """Base class for quiz runtime failures."""


class LoadError(QuizError):
    """A quiz could not be loaded; the whole load may be retried."""

    kind = "load_failed"
    default_message = "Failed to load quiz"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class CourseNotFound(LoadError):
    kind = "course_not_found"
    default_message = "Course not found"


class NoQuestionsAvailable(LoadError):
    kind = "no_questions_available"
    default_message = (
        "No quiz questions available for this course yet. Please try "
        "re-uploading the course to generate questions."
    )


class QuestionsCorrupted(LoadError):
    kind = "questions_corrupted"
    default_message = (
        "Quiz questions are corrupted. Please try re-uploading the course."
    )


class SourceUnavailable(LoadError):
    kind = "source_unavailable"
    default_message = "Failed to load quiz questions"


class StoreError(QuizError):
    """Raised when the JSON course store cannot be read or written."""


class PersistError(QuizError):
    """A progress or points update did not reach the store."""
