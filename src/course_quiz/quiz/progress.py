"""One-time progress commit run when a quiz attempt completes.

Guests only hear what they would have earned. Signed-in users get a
best-effort dual write: the course progress update and the points update are
attempted independently, neither is rolled back when the other fails, and
nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Literal, Protocol

from .errors import PersistError
from .models import Course, Identity, ProgressCommit
from .notify import Notifier

__all__ = [
    "CommitOutcome",
    "ProgressSink",
    "ProgressCommitter",
    "GuestCommitter",
    "AccountCommitter",
    "select_committer",
]

CommitStatus = Literal["skipped", "saved", "failed"]
Clock = Callable[[], datetime]

logger = logging.getLogger("course_quiz.progress")


@dataclass(frozen=True)
class CommitOutcome:
    status: CommitStatus
    commit: ProgressCommit
    errors: tuple[str, ...] = field(default_factory=tuple)


class ProgressSink(Protocol):
    def update_course_progress(self, course_id: str, progress: int) -> None:
        """Store ``progress`` for the course; raise ``PersistError``."""

    def add_user_points(
        self, user_id: str, points_delta: int, activity_timestamp: datetime
    ) -> None:
        """Add points and stamp activity; raise ``PersistError``."""


class ProgressCommitter(Protocol):
    def commit(self, course: Course, result: ProgressCommit) -> CommitOutcome:
        ...


class GuestCommitter:
    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    def commit(self, course: Course, result: ProgressCommit) -> CommitOutcome:
        self._notifier.notify(
            "info",
            "Quiz completed! You would have earned "
            f"{result.points_earned} points with an account.",
        )
        logger.info(
            "Guest quiz completed",
            extra={
                "course_id": course.id,
                "score": result.score_percentage,
            },
        )
        return CommitOutcome("skipped", result)


class AccountCommitter:
    def __init__(
        self,
        sink: ProgressSink,
        notifier: Notifier,
        *,
        user_id: str,
        clock: Clock | None = None,
    ) -> None:
        self._sink = sink
        self._notifier = notifier
        self._user_id = user_id
        self._clock = clock or _utcnow

    def commit(self, course: Course, result: ProgressCommit) -> CommitOutcome:
        errors: list[str] = []
        progress = max(course.progress, result.score_percentage)
        try:
            self._sink.update_course_progress(course.id, progress)
        except PersistError as exc:
            errors.append(str(exc))
            logger.error(
                "Error updating course progress",
                extra={"course_id": course.id, "error": str(exc)},
            )
        try:
            self._sink.add_user_points(
                self._user_id, result.points_earned, self._clock()
            )
        except PersistError as exc:
            errors.append(str(exc))
            logger.error(
                "Error updating user points",
                extra={"user_id": self._user_id, "error": str(exc)},
            )

        if errors:
            self._notifier.notify("error", "Failed to save progress")
            return CommitOutcome("failed", result, tuple(errors))

        self._notifier.notify(
            "success",
            f"Quiz completed! You earned {result.points_earned} points.",
        )
        logger.info(
            "Saved quiz progress",
            extra={
                "course_id": course.id,
                "progress": progress,
                "points": result.points_earned,
            },
        )
        return CommitOutcome("saved", result)


def select_committer(
    identity: Identity, sink: ProgressSink | None, notifier: Notifier
) -> ProgressCommitter:
    if identity.is_guest:
        return GuestCommitter(notifier)
    if sink is None:
        raise ValueError("Signed-in quizzes need a progress sink.")
    return AccountCommitter(sink, notifier, user_id=str(identity.user_id))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
