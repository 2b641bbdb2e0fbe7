"""Shared testing fixtures for the course_quiz test suite."""

from .quiz import QuizFactory, RecordingCommitter, RecordingSink  # noqa: F401

__all__ = [
    "QuizFactory",
    "RecordingCommitter",
    "RecordingSink",
]
