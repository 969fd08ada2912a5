"""Polling live-reload watcher.

The watcher asks the dev server for its content token at a fixed interval.
The first token it sees becomes the baseline. When a later token differs,
polling stops for good, a "reload imminent" notification is shown and the
reload action runs once after a grace delay. Probe failures only show an
"offline" notification; polling carries on and the baseline is kept.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sitepulse_core.config.models import ReloadConfig
from sitepulse_core.reload.models import NotificationKind, ProbeError, WatcherState
from sitepulse_core.reload.notifier import Notifier
from sitepulse_core.reload.probe import HttpProbe, Probe

logger = logging.getLogger(__name__)


class ReloadWatcher:
    """Single-loop watcher driving the watching -> warning -> reloading machine.

    Each tick fires the probe as its own task and handles the outcome in a
    completion callback, so a slow probe never delays the schedule. If two
    probe results overlap, whichever is applied last wins the comparison.
    """

    def __init__(
        self,
        probe: Probe,
        notifier: Notifier,
        reload: Callable[[], None],
        interval: float = 1.0,
        grace_delay: float = 3.0,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if grace_delay < 0:
            raise ValueError("grace_delay must not be negative")
        self._probe = probe
        self._notifier = notifier
        self._reload = reload
        self._interval = interval
        self._grace_delay = grace_delay

        self._state = WatcherState.watching
        self._offline = False
        self.baseline_token: str | None = None
        self.probe_count = 0

        self._loop: asyncio.AbstractEventLoop | None = None
        self._poll_task: asyncio.Task | None = None
        self._probe_tasks: set[asyncio.Task] = set()
        self._reload_handle: asyncio.TimerHandle | None = None
        self._reloaded = asyncio.Event()

    @classmethod
    def from_config(
        cls,
        config: ReloadConfig,
        notifier: Notifier,
        reload: Callable[[], None],
        probe: Probe | None = None,
    ) -> ReloadWatcher:
        if probe is None:
            probe = HttpProbe(
                config.url,
                path=config.ping_path,
                timeout=config.timeout_ms / 1000.0,
            )
        return cls(
            probe,
            notifier,
            reload,
            interval=config.interval_ms / 1000.0,
            grace_delay=config.grace_delay_ms / 1000.0,
        )

    # -- State ---------------------------------------------------------------

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def offline(self) -> bool:
        return self._offline

    @property
    def display_state(self) -> WatcherState:
        """State as shown to the user; ``offline`` overlays watching/warning."""
        if self._offline and self._state is not WatcherState.reloading:
            return WatcherState.offline
        return self._state

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def reloaded(self) -> bool:
        return self._reloaded.is_set()

    # -- Lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Schedule the recurring probe. Must be called from a running loop."""
        if self._poll_task is not None or self._state is not WatcherState.watching:
            return
        self._loop = asyncio.get_running_loop()
        self._poll_task = self._loop.create_task(self._poll_forever())
        self._poll_task.add_done_callback(self._on_poll_done)
        logger.info("Watching for content changes every %.2fs", self._interval)

    async def wait_reloaded(self) -> None:
        await self._reloaded.wait()

    async def run(self) -> None:
        """Start watching and return once the reload action has run."""
        self.start()
        try:
            await self.wait_reloaded()
        finally:
            self.stop()

    def stop(self) -> None:
        """Tear down any pending poll, probe or reload callback."""
        self._cancel_polling()
        if self._reload_handle is not None:
            self._reload_handle.cancel()
            self._reload_handle = None

    # -- Probe outcomes ------------------------------------------------------

    def on_probe_success(self, token: str) -> None:
        if self._state is not WatcherState.watching:
            logger.debug("Ignoring late probe result %r in state %s", token, self._state.value)
            return
        self._offline = False

        if self.baseline_token is None:
            self.baseline_token = token
            logger.debug("Baseline content token %r", token)
            return
        if token == self.baseline_token:
            return

        logger.info(
            "Content token changed (%r -> %r); reloading in %.1fs",
            self.baseline_token,
            token,
            self._grace_delay,
        )
        self.baseline_token = token
        self._cancel_polling()
        self._state = WatcherState.warning
        self._notify(NotificationKind.reload_imminent)
        loop = self._loop or asyncio.get_running_loop()
        self._reload_handle = loop.call_later(self._grace_delay, self._do_reload)

    def on_probe_failure(self, error: BaseException) -> None:
        if self._state is WatcherState.reloading:
            return
        if isinstance(error, ProbeError):
            logger.debug("%s", error)
        else:
            logger.warning("Probe raised %s", type(error).__name__, exc_info=error)
        self._offline = True
        self._notify(NotificationKind.offline)

    # -- Internals -----------------------------------------------------------

    async def _poll_forever(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._fire_probe()

    def _fire_probe(self) -> None:
        self.probe_count += 1
        try:
            task = asyncio.ensure_future(self._probe())
        except Exception as e:
            self.on_probe_failure(e)
            return
        self._probe_tasks.add(task)
        task.add_done_callback(self._on_probe_done)

    def _on_poll_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Poll loop stopped unexpectedly", exc_info=error)

    def _on_probe_done(self, task: asyncio.Task) -> None:
        self._probe_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            self.on_probe_success(task.result())
        else:
            self.on_probe_failure(error)

    def _cancel_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
        for task in list(self._probe_tasks):
            task.cancel()
        self._probe_tasks.clear()

    def _do_reload(self) -> None:
        self._reload_handle = None
        self._state = WatcherState.reloading
        try:
            self._reload()
        except Exception:
            logger.exception("Reload action failed")
        finally:
            self._reloaded.set()

    def _notify(self, kind: NotificationKind) -> None:
        try:
            self._notifier.notify(kind)
        except Exception:
            logger.exception("Notifier failed for %s", kind.value)
