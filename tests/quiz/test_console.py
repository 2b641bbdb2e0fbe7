from __future__ import annotations

from rich.console import Console

from course_quiz.quiz.errors import CourseNotFound, SourceUnavailable
from course_quiz.quiz.models import Identity
from course_quiz.quiz.notify import CollectingNotifier
from course_quiz.quiz.progress import GuestCommitter
from course_quiz.quiz.scheduler import ManualScheduler
from course_quiz.quiz.session import QuizSession
from course_quiz.quiz.source import resolve_quiz
from course_quiz.quiz.view.console import (
    GUEST_HINT,
    ConsoleCommand,
    RichNotifier,
    load_with_retry,
    parse_console_command,
    render_question,
    run_quiz_session,
)


def make_provider(commands: list[str]):
    return iter(commands).__next__


def _console() -> Console:
    return Console(record=True, width=100, force_terminal=True)


def test_parse_console_command_variants():
    assert parse_console_command("a") == ConsoleCommand("select", 0)
    assert parse_console_command(" D ") == ConsoleCommand("select", 3)
    assert parse_console_command("2") == ConsoleCommand("select", 1)
    assert parse_console_command("Next") == ConsoleCommand("next")
    assert parse_console_command("finish") == ConsoleCommand("next")
    assert parse_console_command("r") == ConsoleCommand("restart")
    assert parse_console_command("quit") == ConsoleCommand("quit")
    assert parse_console_command("e") is None
    assert parse_console_command("5") is None
    assert parse_console_command("") is None
    assert parse_console_command(None) is None


def test_run_quiz_session_guest_walkthrough():
    console = _console()
    notifier = CollectingNotifier()
    loaded = resolve_quiz("guest-course-1", identity=Identity.guest())
    scheduler = ManualScheduler()
    session = QuizSession(
        loaded.course,
        loaded.questions,
        scheduler=scheduler,
        committer=GuestCommitter(notifier),
    )
    slept = []

    result = run_quiz_session(
        session,
        scheduler,
        console,
        make_provider(["a", "n", "b", "n", "a", "n", "q"]),
        guest=True,
        sleep=slept.append,
    )

    assert result.exit_action == "completed"
    assert result.correct_count == 2
    assert result.score_percentage == 67
    assert slept == [2.0, 2.0, 2.0]
    assert [item.message for item in notifier.items] == [
        "Quiz completed! You would have earned 20 points with an account."
    ]
    rendered = console.export_text()
    assert "Question 1 of 3" in rendered
    assert "[Demo]" in rendered
    assert "Correct!" in rendered
    assert "Incorrect" in rendered
    assert "Quiz Complete!" in rendered
    assert "You got 2 out of 3 questions correct" in rendered
    assert GUEST_HINT in rendered


def test_run_quiz_session_requires_selection(quiz_factory):
    console = _console()
    session, scheduler, _ = quiz_factory.session(0)

    result = run_quiz_session(
        session,
        scheduler,
        console,
        make_provider(["n", "zzz", "q"]),
        sleep=lambda _: None,
    )

    rendered = console.export_text()
    assert "Select an answer first." in rendered
    assert "Unrecognized command. Try again." in rendered
    assert result.exit_action == "quit"
    assert session.answers == ()


def test_run_quiz_session_handles_exhausted_input(quiz_factory):
    console = _console()
    session, scheduler, committer = quiz_factory.session(0)

    result = run_quiz_session(
        session,
        scheduler,
        console,
        make_provider(["a"]),
        sleep=lambda _: None,
    )

    assert result.exit_action == "quit"
    assert "Session interrupted." in console.export_text()
    assert committer.commits == []


def test_run_quiz_session_restart_after_completion(quiz_factory):
    console = _console()
    session, scheduler, committer = quiz_factory.session(1)

    result = run_quiz_session(
        session,
        scheduler,
        console,
        make_provider(["b", "n", "a", "r", "c", "n", "q"]),
        sleep=lambda _: None,
    )

    rendered = console.export_text()
    assert "Quiz finished. Restart or quit." in rendered
    assert result.exit_action == "completed"
    assert len(committer.commits) == 2
    assert committer.commits[0][1].score_percentage == 100
    assert committer.commits[1][1].score_percentage == 0


def test_render_question_shows_markers_during_reveal(quiz_factory):
    console = _console()
    session, _, _ = quiz_factory.session(0, 1)
    session.select_answer(2)
    session.advance()

    render_question(console, session)

    rendered = console.export_text()
    assert "✓" in rendered
    assert "✗" in rendered
    assert "Explanation 1" in rendered


def test_rich_notifier_prints_message():
    console = _console()

    RichNotifier(console).notify("error", "Failed to save progress")

    assert "Failed to save progress" in console.export_text()


def test_load_with_retry_succeeds_after_retry():
    console = _console()
    notifier = CollectingNotifier()
    attempts = []

    def _load():
        attempts.append(1)
        if len(attempts) == 1:
            raise SourceUnavailable()
        return resolve_quiz("guest-course-2", identity=Identity.guest())

    loaded = load_with_retry(_load, console, notifier, confirm=lambda: True)

    assert loaded is not None
    assert len(attempts) == 2
    assert "Failed to load quiz questions" in console.export_text()
    assert [(n.level, n.message) for n in notifier.items] == [
        ("success", "Quiz loaded")
    ]


def test_load_with_retry_reports_failed_retry_and_gives_up():
    console = _console()
    notifier = CollectingNotifier()
    answers = iter([True, False])

    def _load():
        raise CourseNotFound()

    loaded = load_with_retry(
        _load, console, notifier, confirm=lambda: next(answers)
    )

    assert loaded is None
    assert [(n.level, n.message) for n in notifier.items] == [
        ("error", "Retry failed")
    ]
    assert "Unable to load quiz" in console.export_text()
