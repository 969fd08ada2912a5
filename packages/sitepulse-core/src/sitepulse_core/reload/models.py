"""State, notification kinds and errors for the live-reload watcher."""

from __future__ import annotations

from enum import Enum


class WatcherState(str, Enum):
    """Reload watcher states.

    ``offline`` is never the machine state itself; it is only reported by
    ``ReloadWatcher.display_state`` while the last probe failed.
    """

    watching = "watching"
    warning = "warning"
    reloading = "reloading"
    offline = "offline"


class NotificationKind(str, Enum):
    offline = "offline"
    reload_imminent = "reload_imminent"


class ProbeError(Exception):
    """The ping endpoint could not be reached or answered with a non-2xx status."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Probe of {url} failed: {reason}")
