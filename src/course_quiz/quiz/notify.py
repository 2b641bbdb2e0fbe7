"""Fire-and-forget user notifications (toasts) emitted by the quiz core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

NotificationLevel = Literal["info", "success", "error"]

__all__ = [
    "Notification",
    "NotificationLevel",
    "Notifier",
    "CollectingNotifier",
]


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier(Protocol):
    def notify(self, level: NotificationLevel, message: str) -> None: ...


class CollectingNotifier:
    """Keep notifications in memory for front-ends that render them later."""

    def __init__(self) -> None:
        self.items: list[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> None:
        self.items.append(Notification(level, message))

