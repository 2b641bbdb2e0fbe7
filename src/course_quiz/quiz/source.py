"""Resolve a course id into a course summary and its validated questions.

Two interchangeable sources exist: :class:`GuestCatalogSource` answers from
the bundled demo catalog and :class:`StoreQuestionSource` queries the JSON
course store on behalf of a signed-in user. :func:`select_source` picks one
for the caller's identity at call time.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from . import catalog
from .errors import (
    CourseNotFound,
    NoQuestionsAvailable,
    QuestionsCorrupted,
    SourceUnavailable,
    StoreError,
)
from .models import Course, Identity, Question, filter_questions
from .store import CourseStore

__all__ = [
    "LoadedQuiz",
    "QuestionSource",
    "GuestCatalogSource",
    "StoreQuestionSource",
    "select_source",
    "resolve_quiz",
    "validate_question_records",
]

logger = logging.getLogger("course_quiz.source")


@dataclass(frozen=True)
class LoadedQuiz:
    """A course and the ordered questions that seed a quiz session."""

    course: Course
    questions: tuple[Question, ...]


class QuestionSource(Protocol):
    def resolve(self, course_id: str, identity: Identity) -> LoadedQuiz:
        """Return the quiz for ``course_id`` or raise a ``LoadError``."""


def validate_question_records(raw: Sequence[Any]) -> tuple[Question, ...]:
    """Filter ``raw`` down to valid questions, classifying empty results."""

    if not raw:
        raise NoQuestionsAvailable()
    questions = filter_questions(raw)
    if not questions:
        raise QuestionsCorrupted()
    dropped = len(raw) - len(questions)
    if dropped:
        logger.warning(
            "Discarded invalid question records",
            extra={"dropped": dropped, "kept": len(questions)},
        )
    return tuple(questions)


class GuestCatalogSource:
    """Serve the bundled demo courses without touching storage."""

    def resolve(self, course_id: str, identity: Identity) -> LoadedQuiz:
        record = catalog.demo_course_record(course_id)
        if record is None:
            raise CourseNotFound()
        questions = validate_question_records(
            catalog.demo_question_records(course_id)
        )
        return LoadedQuiz(Course.from_record(record), questions)


class StoreQuestionSource:
    """Load a signed-in user's course and questions from the course store."""

    def __init__(self, store: CourseStore) -> None:
        self._store = store

    def resolve(self, course_id: str, identity: Identity) -> LoadedQuiz:
        if identity.is_guest:
            raise CourseNotFound()
        user_id = str(identity.user_id)
        try:
            record = self._store.fetch_course(course_id, user_id)
        except StoreError as exc:
            logger.error(
                "Course lookup failed",
                extra={"course_id": course_id, "error": str(exc)},
            )
            raise SourceUnavailable("Failed to load course") from exc
        if record is None:
            raise CourseNotFound()
        try:
            raw = self._store.fetch_questions(course_id)
        except StoreError as exc:
            logger.error(
                "Question lookup failed",
                extra={"course_id": course_id, "error": str(exc)},
            )
            raise SourceUnavailable() from exc
        return LoadedQuiz(
            Course.from_record(record), validate_question_records(raw)
        )


def select_source(
    identity: Identity, store: CourseStore | None = None
) -> QuestionSource:
    if identity.is_guest:
        return GuestCatalogSource()
    if store is None:
        raise SourceUnavailable("Course store is not configured")
    return StoreQuestionSource(store)


def resolve_quiz(
    course_id: str,
    *,
    identity: Identity,
    store: CourseStore | None = None,
) -> LoadedQuiz:
    """Load the quiz for ``course_id`` using the source for ``identity``.

    Each call performs one full lookup; retrying is left to the caller.
    """

    source = select_source(identity, store)
    loaded = source.resolve(course_id, identity)
    logger.info(
        "Loaded quiz",
        extra={
            "course_id": course_id,
            "guest": identity.is_guest,
            "questions": len(loaded.questions),
        },
    )
    return loaded
