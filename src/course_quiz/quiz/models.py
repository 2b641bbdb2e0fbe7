"""Course and question records plus the validation and scoring rules.

Raw question records arrive as mappings (from the bundled demo catalog or the
JSON store) using the column names ``question``, ``options``,
``correct_answer`` and ``explanation``. Only records that satisfy the question
invariant become :class:`Question` instances; everything else is dropped
without repair.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

OPTION_COUNT = 4
DEFAULT_EXPLANATION = "No explanation available."
POINTS_PER_CORRECT = 10


@dataclass(frozen=True)
class Question:
    """A validated multiple-choice question with exactly four options."""

    id: str
    prompt: str
    options: tuple[str, ...]
    correct_answer: int
    explanation: str = DEFAULT_EXPLANATION

    def is_correct(self, option: int | None) -> bool:
        return option is not None and option == self.correct_answer

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.prompt,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Course:
    """Summary of the course a quiz belongs to."""

    id: str
    user_id: str
    title: str
    description: str = ""
    file_url: str | None = None
    file_type: str | None = None
    progress: int = 0
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Course":
        try:
            progress = int(record.get("progress") or 0)
        except (TypeError, ValueError):
            progress = 0
        return cls(
            id=str(record["id"]),
            user_id=str(record.get("user_id", "")),
            title=str(record.get("title", "")),
            description=str(record.get("description") or ""),
            file_url=_optional_str(record.get("file_url")),
            file_type=_optional_str(record.get("file_type")),
            progress=max(0, min(100, progress)),
            created_at=_optional_str(record.get("created_at")),
            updated_at=_optional_str(record.get("updated_at")),
        )


@dataclass(frozen=True)
class Identity:
    """Who is taking the quiz; no user id means guest/demo mode."""

    user_id: str | None = None

    @property
    def is_guest(self) -> bool:
        return not self.user_id

    @classmethod
    def guest(cls) -> "Identity":
        return cls(None)


@dataclass(frozen=True)
class ProgressCommit:
    """Score-derived values produced once per completed attempt."""

    correct_count: int
    question_count: int
    score_percentage: int
    points_earned: int


def parse_question(
    record: Mapping[str, Any], *, fallback_id: str | None = None
) -> Question | None:
    """Return a :class:`Question` for ``record`` or ``None`` when invalid.

    A record is valid when it has a non-empty prompt, exactly four options
    and an integer ``correct_answer`` in ``[0, 4)``.
    """

    if not isinstance(record, Mapping):
        return None
    prompt = record.get("question")
    if not isinstance(prompt, str) or not prompt.strip():
        return None
    options = record.get("options")
    if isinstance(options, (str, bytes)) or not isinstance(options, Sequence):
        return None
    if len(options) != OPTION_COUNT:
        return None
    if not all(isinstance(option, str) for option in options):
        return None
    answer = record.get("correct_answer")
    if isinstance(answer, bool) or not isinstance(answer, int):
        return None
    if not 0 <= answer < OPTION_COUNT:
        return None
    explanation = record.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        explanation = DEFAULT_EXPLANATION
    identifier = record.get("id")
    if identifier is None or str(identifier) == "":
        identifier = fallback_id or uuid.uuid4().hex
    return Question(
        id=str(identifier),
        prompt=prompt,
        options=tuple(options),
        correct_answer=answer,
        explanation=explanation,
    )


def filter_questions(records: Iterable[Any]) -> list[Question]:
    """Keep the valid records in their original order.

    Question ids are unique in the result: a repeated id gets a ``-N``
    suffix. Already-parsed :class:`Question` objects pass through unchanged
    otherwise, so filtering a filtered list returns an equal list.
    """

    valid: list[Question] = []
    seen: set[str] = set()
    for position, record in enumerate(records):
        if isinstance(record, Question):
            question: Question | None = record
        else:
            question = parse_question(record, fallback_id=str(position + 1))
        if question is None:
            continue
        if question.id in seen:
            question = replace(question, id=_unique_id(question.id, seen))
        seen.add(question.id)
        valid.append(question)
    return valid


def _unique_id(base: str, taken: set[str]) -> str:
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


def count_correct(
    questions: Sequence[Question], answers: Sequence[int]
) -> int:
    return sum(
        1
        for question, answer in zip(questions, answers)
        if question.is_correct(answer)
    )


def score_percentage(correct_count: int, question_count: int) -> int:
    """Round ``100 * correct / total`` half-up to a whole percentage."""

    if question_count <= 0:
        raise ValueError("question_count must be positive")
    return (200 * correct_count + question_count) // (2 * question_count)


def build_commit(
    questions: Sequence[Question],
    answers: Sequence[int],
    *,
    points_per_correct: int = POINTS_PER_CORRECT,
) -> ProgressCommit:
    correct = count_correct(questions, answers)
    total = len(questions)
    return ProgressCommit(
        correct_count=correct,
        question_count=total,
        score_percentage=score_percentage(correct, total),
        points_earned=correct * points_per_correct,
    )


def score_band(percentage: int) -> str:
    """Bucket a percentage into ``good``, ``fair`` or ``poor``."""

    if percentage >= 80:
        return "good"
    if percentage >= 60:
        return "fair"
    return "poor"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
