"""Rich-powered console front-end for a :class:`QuizSession`.

The loop reads one command per prompt, renders the current question, and
sleeps through the reveal interval itself before driving the session's
:class:`ManualScheduler`, so the whole run stays on one thread.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..errors import LoadError
from ..notify import NotificationLevel, Notifier
from ..scheduler import ManualScheduler
from ..session import QuizPhase, QuizSession
from ..source import LoadedQuiz

InputProvider = Callable[[], str]
Sleeper = Callable[[float], None]
ExitAction = Literal["completed", "quit"]

OPTION_KEYS = ("A", "B", "C", "D")
GUEST_HINT = "Create an account to save your progress and earn points!"

_BAND_STYLES = {"good": "bold green", "fair": "bold yellow", "poor": "bold red"}
_TOAST_STYLES = {"info": "cyan", "success": "green", "error": "red"}


@dataclass(frozen=True)
class ConsoleCommand:
    type: Literal["select", "next", "restart", "quit"]
    option: int | None = None


@dataclass(frozen=True)
class ConsoleRunResult:
    exit_action: ExitAction
    correct_count: int
    score_percentage: int


class RichNotifier:
    """Print notifications as small coloured panels."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def notify(self, level: NotificationLevel, message: str) -> None:
        style = _TOAST_STYLES.get(level, "cyan")
        self._console.print(
            Panel(Text(message), border_style=style, expand=False)
        )


def parse_console_command(raw: str | None) -> ConsoleCommand | None:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next", "finish"}:
        return ConsoleCommand("next")
    if lowered in {"r", "restart"}:
        return ConsoleCommand("restart")
    if lowered in {"q", "quit", "exit"}:
        return ConsoleCommand("quit")
    key = text[0].upper()
    if key in OPTION_KEYS and len(text) == 1:
        return ConsoleCommand("select", OPTION_KEYS.index(key))
    if text.isdigit() and 1 <= int(text) <= len(OPTION_KEYS):
        return ConsoleCommand("select", int(text) - 1)
    return None


def run_quiz_session(
    session: QuizSession,
    scheduler: ManualScheduler,
    console: Console,
    input_provider: InputProvider,
    *,
    guest: bool = False,
    sleep: Sleeper = time.sleep,
) -> ConsoleRunResult:
    """Run ``session`` interactively until the user quits."""

    exit_action: ExitAction = "quit"
    try:
        while True:
            if session.phase is QuizPhase.COMPLETED:
                render_result(console, session, guest=guest)
            else:
                render_question(console, session, guest=guest)
            try:
                raw = input_provider()
            except (EOFError, KeyboardInterrupt, StopIteration):
                console.print("\n[bold yellow]Session interrupted.[/]")
                break
            command = parse_console_command(raw)
            if command is None:
                console.print("[red]Unrecognized command. Try again.[/]")
                continue
            if command.type == "quit":
                break
            if command.type == "restart":
                session.restart()
                continue
            if session.phase is QuizPhase.COMPLETED:
                console.print("[red]Quiz finished. Restart or quit.[/]")
                continue
            if command.type == "select" and command.option is not None:
                session.select_answer(command.option)
                continue
            if not session.advance():
                console.print("[red]Select an answer first.[/]")
                continue
            render_question(console, session, guest=guest)
            sleep(session.reveal_seconds)
            scheduler.advance(session.reveal_seconds)
    finally:
        if session.phase is QuizPhase.COMPLETED:
            exit_action = "completed"
        session.close()

    return ConsoleRunResult(
        exit_action=exit_action,
        correct_count=session.correct_count(),
        score_percentage=session.score_percentage(),
    )


def render_question(
    console: Console, session: QuizSession, *, guest: bool = False
) -> None:
    question = session.current
    header = Text.assemble(
        (session.progress_label(), "bold cyan"),
        (f"  {session.course.title}", "dim"),
    )
    if guest:
        header.append("  [Demo]", style="magenta")
    console.print()
    console.rule(header)
    console.print(_progress_bar(session.progress_fraction()))
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    for view in session.option_views():
        marker = " "
        style = ""
        if view.correct:
            marker, style = "✓", "bold green"
        elif view.locked and view.selected:
            marker, style = "✗", "bold red"
        elif view.locked:
            style = "dim"
        elif view.selected:
            marker, style = "•", "bold cyan"
        row = Text(marker + " ")
        row.append(view.text, style=style)
        table.add_row(OPTION_KEYS[view.index], row)
    console.print(table)

    explanation = session.explanation()
    if explanation is not None:
        correct = session.last_answer_correct()
        console.print(
            Panel(
                Text(explanation),
                title="Correct!" if correct else "Incorrect",
                border_style="green" if correct else "red",
            )
        )
        return
    console.print(
        Text(
            f"Commands: A-D to choose, n ({session.advance_label()}), "
            "r (restart), q (quit)",
            style="dim",
        )
    )


def render_result(
    console: Console, session: QuizSession, *, guest: bool = False
) -> None:
    percentage = session.score_percentage()
    console.print()
    console.rule(Text("Quiz Complete!", style="bold magenta"))
    console.print(
        Text(f"{percentage}%", style=_BAND_STYLES[session.score_band()])
    )
    console.print(
        f"You got {session.correct_count()} out of "
        f"{session.question_count} questions correct"
    )
    if guest:
        console.print(Text(GUEST_HINT, style="magenta"))
    console.print(Text("Commands: r (retake quiz), q (quit)", style="dim"))


def load_with_retry(
    load: Callable[[], LoadedQuiz],
    console: Console,
    notifier: Notifier,
    confirm: Callable[[], bool],
) -> LoadedQuiz | None:
    """Load a quiz, offering the user a retry after each failure.

    Every retry is one fresh load; nothing is retried without the user
    asking for it.
    """

    retrying = False
    while True:
        try:
            loaded = load()
        except LoadError as exc:
            console.print(
                Panel(
                    str(exc),
                    title="Unable to load quiz",
                    border_style="red",
                )
            )
            if retrying:
                notifier.notify("error", "Retry failed")
            if not confirm():
                return None
            retrying = True
            continue
        if retrying:
            notifier.notify("success", "Quiz loaded")
        return loaded


def _progress_bar(fraction: float, width: int = 30) -> Text:
    filled = int(round(fraction * width))
    bar = Text("█" * filled, style="cyan")
    bar.append("░" * (width - filled), style="dim")
    return bar
