"""Live reload: the polling watcher, its probe and the ping endpoint it polls."""

from sitepulse_core.reload.models import NotificationKind, ProbeError, WatcherState
from sitepulse_core.reload.notifier import (
    ConsoleNotifier,
    LoggingNotifier,
    Notifier,
    notification_text,
)
from sitepulse_core.reload.ping import ContentVersion, PingEndpoint
from sitepulse_core.reload.probe import HttpProbe, Probe
from sitepulse_core.reload.source_watcher import SourceChangeWatcher
from sitepulse_core.reload.watcher import ReloadWatcher

__all__ = [
    "ConsoleNotifier",
    "ContentVersion",
    "HttpProbe",
    "LoggingNotifier",
    "NotificationKind",
    "Notifier",
    "PingEndpoint",
    "Probe",
    "ProbeError",
    "ReloadWatcher",
    "SourceChangeWatcher",
    "WatcherState",
    "notification_text",
]
