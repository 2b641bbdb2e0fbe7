"""Textual front-end that drives a :class:`QuizSession` with app timers."""

from __future__ import annotations

from typing import Callable, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.timer import Timer
from textual.widgets import Button, Static

from ..notify import NotificationLevel
from ..scheduler import ScheduledTask
from ..session import QuizPhase, QuizSession
from .console import GUEST_HINT, OPTION_KEYS

_SEVERITY = {"info": "information", "success": "information", "error": "error"}


class _TimerTask:
    def __init__(self, timer: Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class AppBridge:
    """Scheduler and notifier backed by a running :class:`QuizApp`.

    The session is built before the app exists, so the bridge is created
    first and bound once the app is constructed.
    """

    def __init__(self) -> None:
        self._app: Optional["QuizApp"] = None
        self.pending_notifications: list[tuple[NotificationLevel, str]] = []

    def bind(self, app: "QuizApp") -> None:
        self._app = app

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> ScheduledTask:
        if self._app is None:
            raise RuntimeError("AppBridge is not bound to a QuizApp.")
        app = self._app

        def _fire() -> None:
            callback()
            app.refresh_view()

        return _TimerTask(app.set_timer(delay, _fire))

    def notify(self, level: NotificationLevel, message: str) -> None:
        if self._app is None or not self._app.view_ready:
            self.pending_notifications.append((level, message))
            return
        self._app.notify(message, severity=_SEVERITY.get(level, "information"))


class QuizApp(App):
    CSS = """
#options Button.selected { background: $accent; color: black; }
#options Button.correct { background: $success; }
#options Button.wrong { background: $error; }
#result { padding: 1 2; }
"""
    BINDINGS = [
        ("a", "select(0)", "Select A"),
        ("b", "select(1)", "Select B"),
        ("c", "select(2)", "Select C"),
        ("d", "select(3)", "Select D"),
        ("n", "advance", "Next"),
        Binding("enter", "advance", "Next", priority=True),
        ("r", "restart", "Restart"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        session: QuizSession,
        bridge: AppBridge,
        *,
        guest: bool = False,
    ) -> None:
        super().__init__()
        self.session = session
        self.guest = guest
        self._bridge = bridge
        self.view_ready = False
        bridge.bind(self)

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            yield Static(self.header_text(), id="header", markup=False)
            yield Static("", id="prompt", markup=False)
            with Vertical(id="options"):
                for position, key in enumerate(OPTION_KEYS):
                    yield Button(key, id=f"choice-{position}")
            yield Static("", id="feedback", markup=False)
            yield Button(self.session.advance_label(), id="next")
        yield Static("", id="result", markup=False)
        yield Button("Retake Quiz", id="restart")

    def on_mount(self) -> None:
        self.view_ready = True
        for level, message in self._bridge.pending_notifications:
            self.notify(message, severity=_SEVERITY.get(level, "information"))
        self._bridge.pending_notifications.clear()
        self.refresh_view()

    def on_unmount(self) -> None:
        self.session.close()

    # Pure helpers (testable without running the app)

    def header_text(self) -> str:
        label = self.session.progress_label()
        if self.guest:
            label += "  (Demo)"
        return f"{self.session.course.title}\n{label}"

    def feedback_text(self) -> str:
        explanation = self.session.explanation()
        if explanation is None:
            return ""
        verdict = "Correct!" if self.session.last_answer_correct() else (
            "Incorrect."
        )
        return f"{verdict} {explanation}"

    def result_text(self) -> str:
        session = self.session
        lines = [
            f"{session.score_percentage()}%",
            "You got {0} out of {1} questions correct".format(
                session.correct_count(), session.question_count
            ),
        ]
        if self.guest:
            lines.append(GUEST_HINT)
        return "\n".join(lines)

    def select_answer(self, option: int) -> bool:
        accepted = self.session.select_answer(option)
        self.refresh_view()
        return accepted

    def advance(self) -> bool:
        accepted = self.session.advance()
        self.refresh_view()
        return accepted

    def restart(self) -> None:
        self.session.restart()
        self.refresh_view()

    def action_select(self, option: int) -> None:
        self.select_answer(option)

    def action_advance(self) -> None:
        self.advance()

    def action_restart(self) -> None:
        self.restart()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("choice-"):
            self.select_answer(int(bid.rsplit("-", 1)[-1]))
        elif bid == "next":
            self.advance()
        elif bid == "restart":
            self.restart()

    def refresh_view(self) -> None:
        if not self.view_ready:
            return
        session = self.session
        completed = session.phase is QuizPhase.COMPLETED
        self.query_one("#stage", Container).display = not completed
        self.query_one("#result", Static).display = completed
        self.query_one("#restart", Button).display = completed
        if completed:
            self.query_one("#result", Static).update(self.result_text())
            return

        self.query_one("#header", Static).update(self.header_text())
        self.query_one("#prompt", Static).update(session.current.prompt)
        for view in session.option_views():
            button = self.query_one(f"#choice-{view.index}", Button)
            button.label = Text(f"{OPTION_KEYS[view.index]}) {view.text}")
            button.disabled = view.locked
            button.set_class(view.selected and not view.locked, "selected")
            button.set_class(bool(view.correct), "correct")
            button.set_class(
                view.locked and view.selected and not view.correct, "wrong"
            )
        self.query_one("#feedback", Static).update(self.feedback_text())
        next_button = self.query_one("#next", Button)
        next_button.label = session.advance_label()
        next_button.disabled = (
            session.phase is not QuizPhase.IN_PROGRESS
            or session.selected is None
        )
