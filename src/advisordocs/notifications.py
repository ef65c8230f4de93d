"""User-facing notification messages emitted by the document store."""

from __future__ import annotations

from typing import Callable, Literal

from pydantic import BaseModel


class Notification(BaseModel):
    """A short informational message, shown as a toast or console line."""

    title: str
    description: str
    level: Literal["info", "warning"] = "info"


Notifier = Callable[[Notification], None]


def discard(_: Notification) -> None:
    """Notifier that drops every message."""


class NotificationLog:
    """Notifier that keeps every message it receives, in order."""

    def __init__(self) -> None:
        self.messages: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.messages.append(notification)

    @property
    def titles(self) -> list[str]:
        return [message.title for message in self.messages]


__all__ = ["Notification", "Notifier", "NotificationLog", "discard"]
