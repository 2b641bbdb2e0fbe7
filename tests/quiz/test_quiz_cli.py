from __future__ import annotations

import json

import pytest

from course_quiz.quiz import _main
from course_quiz.quiz.store import CourseStore

from fixtures.quiz import question_record


def _feed(monkeypatch, commands):
    iterator = iter(commands)
    monkeypatch.setattr(_main, "_prompt", lambda console: next(iterator))


def _write_bundle(tmp_path, questions):
    path = tmp_path / "bundle.json"
    path.write_text(
        json.dumps(
            {
                "course": {"id": "bio-101", "title": "Biology", "progress": 0},
                "questions": questions,
            }
        ),
        encoding="utf-8",
    )
    return path


def test_courses_list_guest(data_home, capsys):
    code = _main.main(["courses", "list", "--guest"])

    out = capsys.readouterr().out
    assert code == 0
    assert "guest-course-1" in out
    assert "Introduction to the Force" in out
    assert "75%" in out


def test_courses_list_user_without_courses(data_home, capsys):
    code = _main.main(["courses", "list", "--user", "nobody"])

    assert code == 1
    assert "No courses found." in capsys.readouterr().out


def test_courses_import_then_list(tmp_path, data_home, capsys):
    bundle = _write_bundle(
        tmp_path,
        [question_record("one"), question_record("bad", correct=7)],
    )

    code = _main.main(["courses", "import", str(bundle), "--user", "u1"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Imported course 'bio-101' with 2 question(s) (1 usable)." in out

    code = _main.main(["courses", "list", "--user", "u1"])
    assert code == 0
    assert "Biology" in capsys.readouterr().out


def test_courses_import_rejects_bad_bundle(tmp_path, data_home, capsys):
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps({"questions": []}), encoding="utf-8")

    code = _main.main(["courses", "import", str(path), "--user", "u1"])

    assert code == 2
    assert "course" in capsys.readouterr().err


def test_start_guest_console_run(data_home, monkeypatch, capsys):
    _feed(monkeypatch, ["b", "n", "b", "n", "q"])

    code = _main.main(
        ["start", "guest-course-2", "--guest", "--reveal-seconds", "0.01"]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Quiz Complete!" in out
    assert "100%" in out
    assert "You would have earned 20 points with an account." in out
    assert (data_home / "logs" / "course_quiz.log").exists()


def test_start_user_saves_progress(tmp_path, data_home, monkeypatch, capsys):
    bundle = _write_bundle(
        tmp_path,
        [question_record("one", correct=0), question_record("two", correct=1)],
    )
    assert _main.main(["courses", "import", str(bundle), "--user", "u1"]) == 0
    monkeypatch.setenv(_main.USER_ENV, "u1")
    _feed(monkeypatch, ["a", "n", "c", "n", "q"])

    code = _main.main(["start", "bio-101", "--reveal-seconds", "0.01"])

    out = capsys.readouterr().out
    assert code == 0
    assert "You earned 10 points." in out
    store = CourseStore(data_home / "store")
    assert store.fetch_course("bio-101", "u1")["progress"] == 50
    assert store.get_profile("u1")["total_points"] == 10


def test_start_unknown_course_declined_retry(data_home, monkeypatch, capsys):
    monkeypatch.setattr(_main.Confirm, "ask", lambda *a, **k: False)

    code = _main.main(["start", "nope", "--guest"])

    assert code == 1
    assert "Course not found" in capsys.readouterr().out


def test_start_rejects_non_positive_reveal(data_home, capsys):
    code = _main.main(
        ["start", "guest-course-1", "--guest", "--reveal-seconds", "0"]
    )

    assert code == 2
    assert "--reveal-seconds" in capsys.readouterr().err


def test_config_commands(tmp_path, data_home, capsys):
    target = tmp_path / "cfg" / "course_quiz.toml"

    assert _main.main(["config", "init", "--path", str(target)]) == 0
    assert target.exists()
    assert _main.main(["config", "init", "--path", str(target)]) == 2
    assert _main.main(["config", "validate", "--path", str(target)]) == 0
    assert _main.main(["config", "path"]) == 0

    out = capsys.readouterr().out
    assert "Configuration OK" in out
    assert str(data_home / "config" / "course_quiz.toml") in out


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        _main.main([])


def test_courses_import_rejects_bad_progress(tmp_path, data_home, capsys):
    path = tmp_path / "bundle.json"
    path.write_text(
        json.dumps({"course": {"id": "c1", "progress": "high"}}),
        encoding="utf-8",
    )

    code = _main.main(["courses", "import", str(path), "--user", "u1"])

    assert code == 2
    assert "progress must be an integer" in capsys.readouterr().err
