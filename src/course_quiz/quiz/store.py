"""JSON-file course store backing authenticated quizzes.

The store keeps three tables in a single ``store.json`` document inside the
workspace ``store/`` directory:

``courses``
    Course rows keyed by ``id`` and owned by ``user_id``.
``quiz_questions``
    Question rows keyed by ``course_id`` with a ``created_at`` timestamp.
``profiles``
    Per-user ``total_points`` and ``last_activity``.

Writers serialise through an exclusive lock file and replace the document
atomically, so a crashed write never leaves a half-written store behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, MutableMapping

from .errors import PersistError, StoreError

__all__ = [
    "CourseStore",
    "STORE_FILENAME",
]

STORE_FILENAME = "store.json"
_LOCK_FILENAME = ".store.lock"
_LOCK_TIMEOUT_SECONDS = 5.0
_TABLES = ("courses", "quiz_questions", "profiles")

logger = logging.getLogger("course_quiz.store")


class CourseStore:
    """Query and update the course, question and profile tables."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    @property
    def path(self) -> Path:
        return self._root / STORE_FILENAME

    # Queries -----------------------------------------------------------------

    def fetch_course(
        self, course_id: str, user_id: str
    ) -> dict[str, Any] | None:
        """Return the course row when it exists and belongs to ``user_id``."""

        for row in self._read()["courses"]:
            if row.get("id") == course_id and row.get("user_id") == user_id:
                return dict(row)
        return None

    def fetch_questions(self, course_id: str) -> list[dict[str, Any]]:
        """Return the course's question rows, oldest ``created_at`` first."""

        rows = [
            dict(row)
            for row in self._read()["quiz_questions"]
            if row.get("course_id") == course_id
        ]
        # sorted() is stable, so rows sharing a timestamp keep store order.
        return sorted(rows, key=lambda row: str(row.get("created_at") or ""))

    def list_courses(self, user_id: str) -> list[dict[str, Any]]:
        return [
            dict(row)
            for row in self._read()["courses"]
            if row.get("user_id") == user_id
        ]

    def get_profile(self, user_id: str) -> dict[str, Any] | None:
        for row in self._read()["profiles"]:
            if row.get("id") == user_id:
                return dict(row)
        return None

    # Mutations ---------------------------------------------------------------

    def import_course(
        self,
        user_id: str,
        course: Mapping[str, Any],
        questions: Sequence[Mapping[str, Any]],
        *,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Insert or replace a course and its questions for ``user_id``.

        Question rows are stamped with strictly increasing ``created_at``
        values so the stored order is the order they are asked in.
        """

        progress = _progress_value(course.get("progress"))
        stamp = now or datetime.now(timezone.utc)
        course_id = str(course.get("id") or uuid.uuid4().hex)
        row: dict[str, Any] = {
            "id": course_id,
            "user_id": user_id,
            "title": str(course.get("title") or course_id),
            "description": str(course.get("description") or ""),
            "file_url": course.get("file_url"),
            "file_type": course.get("file_type"),
            "progress": progress,
            "created_at": stamp.isoformat(),
            "updated_at": stamp.isoformat(),
        }
        question_rows = []
        for offset, question in enumerate(questions):
            entry = dict(question)
            entry.setdefault("id", uuid.uuid4().hex)
            entry["course_id"] = course_id
            entry["created_at"] = (
                stamp + timedelta(microseconds=offset)
            ).isoformat()
            question_rows.append(entry)

        def _apply(tables: MutableMapping[str, list]) -> None:
            owner = next(
                (r for r in tables["courses"] if r.get("id") == course_id),
                None,
            )
            if owner is not None and owner.get("user_id") != user_id:
                raise StoreError(
                    f"Course '{course_id}' belongs to another user."
                )
            tables["courses"] = [
                r for r in tables["courses"] if r.get("id") != course_id
            ] + [row]
            tables["quiz_questions"] = [
                r
                for r in tables["quiz_questions"]
                if r.get("course_id") != course_id
            ] + question_rows

        self._update(_apply)
        logger.info(
            "Imported course",
            extra={"course_id": course_id, "questions": len(question_rows)},
        )
        return dict(row)

    def update_course_progress(self, course_id: str, progress: int) -> None:
        """Raise the stored progress for ``course_id``; it never decreases."""

        def _apply(tables: MutableMapping[str, list]) -> None:
            for row in tables["courses"]:
                if row.get("id") == course_id:
                    current = _stored_progress(row.get("progress"))
                    row["progress"] = min(100, max(current, int(progress)))
                    row["updated_at"] = _timestamp()
                    return
            raise StoreError(f"Course not found: {course_id}")

        try:
            self._update(_apply)
        except StoreError as exc:
            raise PersistError(
                f"Failed to update course progress: {exc}"
            ) from exc

    def add_user_points(
        self, user_id: str, points_delta: int, activity_timestamp: datetime
    ) -> None:
        """Increment ``total_points`` and stamp ``last_activity``."""

        def _apply(tables: MutableMapping[str, list]) -> None:
            for row in tables["profiles"]:
                if row.get("id") == user_id:
                    break
            else:
                row = {"id": user_id, "total_points": 0}
                tables["profiles"].append(row)
            row["total_points"] = int(row.get("total_points") or 0) + int(
                points_delta
            )
            row["last_activity"] = activity_timestamp.isoformat()

        try:
            self._update(_apply)
        except StoreError as exc:
            raise PersistError(f"Failed to update user points: {exc}") from exc

    # Internals ---------------------------------------------------------------

    def _read(self) -> MutableMapping[str, list]:
        target = self.path
        if not target.exists():
            return _empty_tables()
        try:
            payload = json.loads(target.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StoreError(f"Failed to read store file: {target}") from exc
        except json.JSONDecodeError as exc:
            raise StoreError(f"Failed to parse store file: {target}") from exc
        if not isinstance(payload, Mapping):
            raise StoreError(f"Store file must contain an object: {target}")
        tables = _empty_tables()
        for name in _TABLES:
            rows = payload.get(name, [])
            if not isinstance(rows, list):
                raise StoreError(f"Store table '{name}' must be a list.")
            tables[name] = [row for row in rows if isinstance(row, Mapping)]
        return tables

    def _update(
        self, mutate: Callable[[MutableMapping[str, list]], None]
    ) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(
                f"Failed to prepare store directory: {self._root}"
            ) from exc
        with _StoreLock(self._root / _LOCK_FILENAME):
            tables = self._read()
            mutate(tables)
            try:
                _atomic_write_json(self.path, tables)
            except OSError as exc:
                raise StoreError(
                    f"Failed to write store file: {self.path}"
                ) from exc


class _StoreLock:
    """Filesystem lock using exclusive file creation."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def __enter__(self) -> "_StoreLock":
        deadline = time.time() + _LOCK_TIMEOUT_SECONDS
        while True:
            try:
                fd = os.open(
                    self._path,
                    os.O_CREAT | os.O_EXCL | os.O_WRONLY,
                )
                os.close(fd)
                return self
            except FileExistsError:
                if time.time() > deadline:
                    raise StoreError(
                        f"Timed out waiting for store lock: {self._path}"
                    )
                time.sleep(0.05)

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self._path.unlink(missing_ok=True)


def _progress_value(value: Any) -> int:
    """Validate an imported progress value and clamp it to 0..100."""

    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise StoreError(
            f"Course progress must be an integer, got {value!r}."
        )
    return max(0, min(100, value))


def _stored_progress(value: Any) -> int:
    try:
        current = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, current))


def _empty_tables() -> MutableMapping[str, list]:
    return {name: [] for name in _TABLES}


def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
    )
    try:
        json.dump(payload, handle, indent=2, sort_keys=True)
        handle.flush()
        os.fsync(handle.fileno())
    finally:
        handle.close()
    os.replace(handle.name, path)
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
