"""Status notifications shown to the user while watching."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from rich.console import Console

from sitepulse_core.reload.models import NotificationKind

logger = logging.getLogger(__name__)

_MESSAGES = {
    NotificationKind.offline: "Server status is not online",
    NotificationKind.reload_imminent: "Page is about to reload",
}


def notification_text(kind: NotificationKind) -> str:
    return _MESSAGES[kind]


@runtime_checkable
class Notifier(Protocol):
    """Displays a notification. Calls are additive; nothing is ever retracted."""

    def notify(self, kind: NotificationKind) -> None: ...


class ConsoleNotifier:
    """Prints notifications to a rich console."""

    _STYLES = {
        NotificationKind.offline: "bold white on red",
        NotificationKind.reload_imminent: "bold black on yellow",
    }

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, kind: NotificationKind) -> None:
        self._console.print(f" {notification_text(kind)} ", style=self._STYLES[kind])


class LoggingNotifier:
    """Sends notifications to the log instead of a display."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def notify(self, kind: NotificationKind) -> None:
        if kind is NotificationKind.offline:
            self._log.warning(notification_text(kind))
        else:
            self._log.info(notification_text(kind))
