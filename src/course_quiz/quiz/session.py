"""Quiz session state machine.

A :class:`QuizSession` walks a fixed list of questions through three states:

``in_progress``
    The current question accepts :meth:`QuizSession.select_answer`.
``showing_result``
    The answer is locked and the correct option plus explanation are shown
    until the reveal interval elapses.
``completed``
    Every question has a recorded answer; the progress commit has run.

The reveal interval is a task on the injected scheduler. Restart and close
cancel it and bump a generation counter that the task checks before applying,
so a late timer can never mutate a reset or torn-down session.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .models import (
    OPTION_COUNT,
    Course,
    ProgressCommit,
    Question,
    build_commit,
    count_correct,
    score_band,
    score_percentage,
)
from .progress import CommitOutcome, ProgressCommitter
from .scheduler import ScheduledTask, Scheduler

__all__ = [
    "DEFAULT_REVEAL_SECONDS",
    "OptionView",
    "QuizPhase",
    "QuizSession",
    "QuizSnapshot",
]

DEFAULT_REVEAL_SECONDS = 2.0

logger = logging.getLogger("course_quiz.session")


class QuizPhase(Enum):
    IN_PROGRESS = "in_progress"
    SHOWING_RESULT = "showing_result"
    COMPLETED = "completed"


@dataclass(frozen=True)
class OptionView:
    """Display state for one answer option of the current question."""

    index: int
    text: str
    selected: bool
    locked: bool
    # Only meaningful once the answer is revealed.
    correct: bool | None


@dataclass(frozen=True)
class QuizSnapshot:
    phase: QuizPhase
    index: int
    selected: int | None
    answers: tuple[int, ...]


class QuizSession:
    """Mutable state for one attempt at a course quiz."""

    def __init__(
        self,
        course: Course,
        questions: Sequence[Question],
        *,
        scheduler: Scheduler,
        committer: ProgressCommitter,
        reveal_seconds: float = DEFAULT_REVEAL_SECONDS,
        points_per_correct: int = 10,
    ) -> None:
        if not questions:
            raise ValueError("A quiz session needs at least one question.")
        if reveal_seconds <= 0:
            raise ValueError("reveal_seconds must be positive.")
        self.course = course
        self.questions: tuple[Question, ...] = tuple(questions)
        self.reveal_seconds = reveal_seconds
        self.points_per_correct = points_per_correct
        self._scheduler = scheduler
        self._committer = committer
        self._lock = threading.RLock()
        self._generation = 0
        self._pending: ScheduledTask | None = None
        self._closed = False
        self._phase = QuizPhase.IN_PROGRESS
        self._index = 0
        self._selected: int | None = None
        self._answers: list[int] = []
        self.last_commit: ProgressCommit | None = None
        self.commit_outcome: CommitOutcome | None = None
        self.commits_issued = 0

    # State -------------------------------------------------------------------

    @property
    def phase(self) -> QuizPhase:
        return self._phase

    @property
    def index(self) -> int:
        return self._index

    @property
    def selected(self) -> int | None:
        return self._selected

    @property
    def answers(self) -> tuple[int, ...]:
        return tuple(self._answers)

    @property
    def completed(self) -> bool:
        return self._phase is QuizPhase.COMPLETED

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question:
        return self.questions[self._index]

    @property
    def has_pending_advance(self) -> bool:
        return self._pending is not None

    def snapshot(self) -> QuizSnapshot:
        with self._lock:
            return QuizSnapshot(
                phase=self._phase,
                index=self._index,
                selected=self._selected,
                answers=tuple(self._answers),
            )

    # Transitions -------------------------------------------------------------

    def select_answer(self, option: int) -> bool:
        """Select ``option`` for the current question.

        Returns ``False`` when the answer is locked or ``option`` is outside
        ``[0, 4)``; the previous selection is kept in that case.
        """

        with self._lock:
            if self._closed or self._phase is not QuizPhase.IN_PROGRESS:
                return False
            if isinstance(option, bool) or not isinstance(option, int):
                return False
            if not 0 <= option < OPTION_COUNT:
                return False
            self._selected = option
            return True

    def advance(self) -> bool:
        """Lock in the selection and schedule the move to the next step.

        Rejected (returning ``False`` with no state change) unless the
        session is in progress and an answer is selected.
        """

        with self._lock:
            if self._closed or self._phase is not QuizPhase.IN_PROGRESS:
                return False
            if self._selected is None:
                return False
            logger.debug(
                "Answer locked",
                extra={
                    "course_id": self.course.id,
                    "index": self._index,
                    "correct": self.current.is_correct(self._selected),
                },
            )
            self._answers.append(self._selected)
            self._phase = QuizPhase.SHOWING_RESULT
            generation = self._generation
            try:
                task = self._scheduler.call_later(
                    self.reveal_seconds,
                    lambda: self._finish_reveal(generation),
                )
            except Exception:
                # Nothing was scheduled, so undo the lock-in.
                if self._phase is QuizPhase.SHOWING_RESULT:
                    self._generation += 1
                    self._answers.pop()
                    self._phase = QuizPhase.IN_PROGRESS
                raise
            if self._phase is QuizPhase.SHOWING_RESULT:
                self._pending = task
            return True

    def restart(self) -> None:
        """Start the same questions over from the first one."""

        with self._lock:
            self._cancel_pending()
            self._phase = QuizPhase.IN_PROGRESS
            self._index = 0
            self._selected = None
            self._answers = []
            logger.debug("Quiz restarted", extra={"course_id": self.course.id})

    def close(self) -> None:
        """Tear the session down; a pending reveal will not fire."""

        with self._lock:
            self._cancel_pending()
            self._closed = True

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _finish_reveal(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._closed:
                return
            if self._phase is not QuizPhase.SHOWING_RESULT:
                return
            self._pending = None
            if self._index + 1 < self.question_count:
                self._index += 1
                self._selected = None
                self._phase = QuizPhase.IN_PROGRESS
                return
            self._phase = QuizPhase.COMPLETED
            self._commit()

    def _commit(self) -> None:
        result = build_commit(
            self.questions,
            self._answers,
            points_per_correct=self.points_per_correct,
        )
        self.last_commit = result
        self.commits_issued += 1
        logger.info(
            "Quiz completed",
            extra={
                "course_id": self.course.id,
                "correct": result.correct_count,
                "total": result.question_count,
                "score": result.score_percentage,
            },
        )
        self.commit_outcome = self._committer.commit(self.course, result)

    # Scoring and display helpers ---------------------------------------------

    def correct_count(self) -> int:
        return count_correct(self.questions, self._answers)

    def score_percentage(self) -> int:
        return score_percentage(self.correct_count(), self.question_count)

    def score_band(self) -> str:
        return score_band(self.score_percentage())

    def option_views(self) -> list[OptionView]:
        with self._lock:
            question = self.current
            revealed = self._phase is QuizPhase.SHOWING_RESULT
            chosen = self._answers[-1] if revealed else self._selected
            return [
                OptionView(
                    index=position,
                    text=text,
                    selected=chosen == position,
                    locked=revealed,
                    correct=(
                        position == question.correct_answer
                        if revealed
                        else None
                    ),
                )
                for position, text in enumerate(question.options)
            ]

    def explanation(self) -> str | None:
        """The current explanation while the answer is revealed."""

        if self._phase is QuizPhase.SHOWING_RESULT:
            return self.current.explanation
        return None

    def last_answer_correct(self) -> bool | None:
        if self._phase is not QuizPhase.SHOWING_RESULT:
            return None
        return self.current.is_correct(self._answers[-1])

    def progress_label(self) -> str:
        return f"Question {self._index + 1} of {self.question_count}"

    def progress_fraction(self) -> float:
        return (self._index + 1) / self.question_count

    def advance_label(self) -> str:
        if self._index == self.question_count - 1:
            return "Finish Quiz"
        return "Next Question"
