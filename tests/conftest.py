from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
SRC = str(ROOT / "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from fixtures import QuizFactory, RecordingSink  # noqa: E402


@pytest.fixture
def data_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the course-quiz data directory at a per-test tmp folder."""

    home = tmp_path / "quiz-data"
    monkeypatch.setenv("COURSE_QUIZ_DATA_HOME", str(home))
    monkeypatch.delenv("COURSE_QUIZ_CONFIG", raising=False)
    monkeypatch.delenv("COURSE_QUIZ_USER_ID", raising=False)
    return home


@pytest.fixture
def quiz_factory() -> QuizFactory:
    return QuizFactory()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def _reset_course_quiz_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("course_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
