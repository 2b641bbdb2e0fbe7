from __future__ import annotations

from course_quiz.workspace import cli


def test_init_creates_data_directory(tmp_path, capsys, monkeypatch):
    target = tmp_path / "workspace"
    monkeypatch.setenv("COURSE_QUIZ_DATA_HOME", str(target))

    code = cli.main([])

    captured = capsys.readouterr()
    assert code == 0
    assert "Data directory ready" in captured.out
    assert "(created)" in captured.out
    assert target.is_dir()


def test_init_reports_existing_directories(tmp_path, capsys):
    target = tmp_path / "again"
    cli.main(["--path", str(target), "--quiet"])

    code = cli.main(["--path", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert "(created)" not in captured.out
    assert str(target / "store") in captured.out


def test_init_quiet_mode(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("COURSE_QUIZ_DATA_HOME", str(tmp_path / "quiet"))

    code = cli.main(["--quiet"])

    captured = capsys.readouterr()
    assert code == 0
    assert captured.out == ""


def test_init_rejects_file_path(tmp_path, capsys):
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")

    code = cli.main(["--path", str(target)])

    assert code == 1
    assert "not a directory" in capsys.readouterr().err
