"""Bundled demo courses served to guest users."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

GUEST_USER_ID = "guest-user"

_DEMO_COURSES: tuple[Mapping[str, Any], ...] = (
    {
        "id": "guest-course-1",
        "title": "Introduction to the Force",
        "description": (
            "Learn the fundamentals of Force sensitivity and basic Jedi "
            "principles."
        ),
        "file_url": "https://example.com/force-intro.pdf",
        "file_type": "application/pdf",
        "progress": 75,
        "age_days": 7,
    },
    {
        "id": "guest-course-2",
        "title": "Lightsaber Combat Basics",
        "description": (
            "Master the seven forms of lightsaber combat and defensive "
            "techniques."
        ),
        "file_url": "https://example.com/lightsaber-combat.pptx",
        "file_type": (
            "application/vnd.openxmlformats-officedocument."
            "presentationml.presentation"
        ),
        "progress": 45,
        "age_days": 3,
    },
    {
        "id": "guest-course-3",
        "title": "Meditation and Mindfulness",
        "description": (
            "Develop your connection to the Force through meditation "
            "practices."
        ),
        "file_url": "https://example.com/meditation.pdf",
        "file_type": "application/pdf",
        "progress": 20,
        "age_days": 1,
    },
)

_DEMO_QUESTIONS: Mapping[str, tuple[Mapping[str, Any], ...]] = {
    "guest-course-1": (
        {
            "id": "1",
            "question": "What is the Force according to Jedi teachings?",
            "options": [
                "An energy field created by all living things",
                "A supernatural power only some possess",
                "A technology developed by ancient civilizations",
                "A form of advanced telepathy",
            ],
            "correct_answer": 0,
            "explanation": (
                "The Force is an energy field created by all living things "
                "that surrounds us, penetrates us, and binds the galaxy "
                "together."
            ),
        },
        {
            "id": "2",
            "question": "What is the first step in becoming Force-sensitive?",
            "options": [
                "Learning lightsaber combat",
                "Meditation and mindfulness practice",
                "Studying ancient Jedi texts",
                "Building a lightsaber",
            ],
            "correct_answer": 1,
            "explanation": (
                "Meditation and mindfulness are fundamental to developing "
                "Force sensitivity and awareness."
            ),
        },
        {
            "id": "3",
            "question": (
                "What distinguishes the light side from the dark side of the "
                "Force?"
            ),
            "options": [
                "Power level and strength",
                "Emotional control and selflessness vs. passion and "
                "selfishness",
                "Age and experience",
                "Natural talent and ability",
            ],
            "correct_answer": 1,
            "explanation": (
                "The light side emphasizes emotional control, selflessness, "
                "and peace, while the dark side is driven by passion, anger, "
                "and selfishness."
            ),
        },
    ),
    "guest-course-2": (
        {
            "id": "1",
            "question": "How many forms of lightsaber combat are there?",
            "options": [
                "Five forms",
                "Seven forms",
                "Ten forms",
                "Three forms",
            ],
            "correct_answer": 1,
            "explanation": (
                "There are seven traditional forms of lightsaber combat, "
                "each with its own philosophy and techniques."
            ),
        },
        {
            "id": "2",
            "question": "What is Form I (Shii-Cho) known for?",
            "options": [
                "Aggressive offense",
                "Basic fundamentals and foundation",
                "Defensive mastery",
                "Dual-blade techniques",
            ],
            "correct_answer": 1,
            "explanation": (
                "Form I (Shii-Cho) is the foundation form that teaches basic "
                "lightsaber fundamentals and is learned by all Jedi."
            ),
        },
    ),
    "guest-course-3": (
        {
            "id": "1",
            "question": "What is the primary purpose of Jedi meditation?",
            "options": [
                "To increase physical strength",
                "To connect with the Force and find inner peace",
                "To communicate with other Jedi",
                "To predict the future",
            ],
            "correct_answer": 1,
            "explanation": (
                "Jedi meditation helps connect with the Force, find inner "
                "peace, and maintain emotional balance."
            ),
        },
        {
            "id": "2",
            "question": "How often should a Jedi practice meditation?",
            "options": [
                "Only when facing difficult decisions",
                "Daily, as a regular practice",
                "Once a week",
                "Only during formal training",
            ],
            "correct_answer": 1,
            "explanation": (
                "Daily meditation is essential for maintaining Force "
                "connection and emotional balance."
            ),
        },
    ),
}


def demo_course_ids() -> tuple[str, ...]:
    return tuple(str(entry["id"]) for entry in _DEMO_COURSES)


def demo_course_record(
    course_id: str, *, now: datetime | None = None
) -> dict[str, Any] | None:
    """Return the demo course row for ``course_id`` or ``None``.

    Timestamps are relative to ``now`` the same way the demo data always
    looks freshly created.
    """

    current = now or datetime.now(timezone.utc)
    for entry in _DEMO_COURSES:
        if entry["id"] != course_id:
            continue
        record = {
            key: value for key, value in entry.items() if key != "age_days"
        }
        created = current - timedelta(days=int(entry["age_days"]))
        record["user_id"] = GUEST_USER_ID
        record["created_at"] = created.isoformat()
        record["updated_at"] = current.isoformat()
        return record
    return None


def demo_question_records(course_id: str) -> list[dict[str, Any]]:
    return [dict(item) for item in _DEMO_QUESTIONS.get(course_id, ())]


def demo_course_records(*, now: datetime | None = None) -> list[dict[str, Any]]:
    records = (
        demo_course_record(course_id, now=now)
        for course_id in demo_course_ids()
    )
    return [record for record in records if record is not None]
