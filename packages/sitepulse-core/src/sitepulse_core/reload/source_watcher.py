"""Debounced source directory watcher that rotates the content token."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from sitepulse_core.reload.ping import ContentVersion

logger = logging.getLogger(__name__)

_DEFAULT_IGNORE = (".git", "node_modules", "__pycache__", "public", ".sitepulse")


class _ChangeHandler(FileSystemEventHandler):
    """Forwards relevant file events to the watcher."""

    def __init__(
        self,
        root: Path,
        ignore_parts: set[str],
        on_event: Callable[[str, str], None],
    ) -> None:
        super().__init__()
        self._root = root
        self._ignore_parts = ignore_parts
        self._on_event = on_event

    def should_ignore(self, path: str) -> bool:
        p = Path(path)
        try:
            parts = p.resolve().relative_to(self._root).parts
        except ValueError:
            parts = p.parts
        return any(part in self._ignore_parts for part in parts)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        src = str(event.src_path)
        if self.should_ignore(src):
            return
        self._on_event(event.event_type, src)


class SourceChangeWatcher:
    """Watches a source tree and bumps ``version`` once per burst of changes.

    Every event restarts the debounce timer; when it expires the token is
    rotated and ``on_change`` receives the paths seen during the burst.
    """

    def __init__(
        self,
        root: Path,
        version: ContentVersion,
        debounce_seconds: float = 0.5,
        ignore_dirs: Iterable[str] = _DEFAULT_IGNORE,
        on_change: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._root = Path(root).resolve()
        self._version = version
        self._debounce = debounce_seconds
        self._on_change = on_change
        self._lock = threading.Lock()
        self._pending: list[str] = []
        self._timer: threading.Timer | None = None
        self._stopped = False
        self._observer: Observer | None = None
        self._handler = _ChangeHandler(self._root, set(ignore_dirs), self._record)

    @property
    def pending_paths(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def start(self) -> None:
        """Begin watching the source directory recursively."""
        if self._observer is not None:
            return
        with self._lock:
            self._stopped = False
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._root), recursive=True)
        self._observer.start()
        logger.info("Watching %s for source changes", self._root)

    def stop(self) -> None:
        """Stop watching and drop any pending burst."""
        with self._lock:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching %s", self._root)

    def _record(self, event_type: str, path: str) -> None:
        logger.debug("Source %s: %s", event_type, path)
        with self._lock:
            if self._stopped:
                return
            if path not in self._pending:
                self._pending.append(path)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self._flush)
            self._timer.daemon = True
            self._timer.start()

    def _flush(self) -> None:
        with self._lock:
            if self._stopped:
                return
            paths, self._pending = self._pending, []
            self._timer = None
            if not paths:
                return
            # Rotated under the lock so nothing bumps once stop() has returned.
            token = self._version.bump()
        logger.info("%d source file(s) changed; content token is now %s", len(paths), token)
        if self._on_change is not None:
            try:
                self._on_change(paths)
            except Exception:
                logger.exception("Source change callback failed")
