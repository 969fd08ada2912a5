"""Named build-step stopwatches shared by the stages of one build."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Literal

from sitepulse_core.config.models import TimingConfig

from .models import (
    BuildReport,
    StepAlreadyStartedError,
    StepNotStartedError,
    TimerEntry,
)
from .report import format_report

logger = logging.getLogger(__name__)

RestartPolicy = Literal["reset", "reject"]


@dataclass
class StepHandle:
    """Yielded by ``StepTimer.measure``; set ``unit_count`` once it is known."""

    name: str
    unit_count: int = 1


class StepTimer:
    """Tracks running and completed build steps.

    One instance belongs to one build and is handed to every stage that needs
    it. Stages may run on different threads as long as each step name is
    started and stopped by a single caller; concurrent start/stop of the
    *same* name is not supported and its outcome is unspecified.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.perf_counter,
        restart_policy: RestartPolicy = "reset",
    ) -> None:
        if restart_policy not in ("reset", "reject"):
            raise ValueError(f"Unknown restart policy: {restart_policy!r}")
        self._report_logger = logger or logging.getLogger("sitepulse.build")
        self._clock = clock
        self._restart_policy = restart_policy
        self._lock = threading.Lock()
        self._active: dict[str, TimerEntry] = {}
        self._completed: list[TimerEntry] = []

    @classmethod
    def from_config(
        cls,
        config: TimingConfig,
        clock: Callable[[], float] = time.perf_counter,
    ) -> StepTimer:
        return cls(
            logger=logging.getLogger(config.logger_name),
            clock=clock,
            restart_policy=config.restart_policy,
        )

    # -- Views ---------------------------------------------------------------

    @property
    def restart_policy(self) -> RestartPolicy:
        return self._restart_policy

    @property
    def active_steps(self) -> list[str]:
        with self._lock:
            return list(self._active)

    @property
    def completed(self) -> list[TimerEntry]:
        """Completed entries in completion order."""
        with self._lock:
            return list(self._completed)

    # -- Public API ----------------------------------------------------------

    def start(self, name: str) -> None:
        """Begin timing ``name``.

        Restarting a running step either discards the running measurement
        (``reset``) or raises StepAlreadyStartedError (``reject``).
        """
        started_at = self._clock()
        with self._lock:
            if name in self._active:
                if self._restart_policy == "reject":
                    raise StepAlreadyStartedError(name)
                logger.debug("Restarting step %s; previous measurement discarded", name)
            self._active[name] = TimerEntry(name=name, started_at=started_at)

    def stop(self, name: str, unit_count: int = 1) -> TimerEntry:
        """Finish timing ``name`` and record how many items the step processed.

        Raises StepNotStartedError if ``name`` is not running, which includes
        stopping the same step twice.
        """
        if isinstance(unit_count, bool) or not isinstance(unit_count, int) or unit_count < 1:
            raise ValueError(
                f"Step '{name}': unit_count must be a positive integer, got {unit_count!r}"
            )

        stopped_at = self._clock()
        with self._lock:
            entry = self._active.pop(name, None)
            if entry is None:
                raise StepNotStartedError(name)
            done = entry.model_copy(
                update={
                    "elapsed": max(0.0, stopped_at - entry.started_at),
                    "unit_count": unit_count,
                    "sequence": len(self._completed),
                }
            )
            self._completed.append(done)

        logger.debug("Step %s took %.1f ms (%d items)", name, done.elapsed_ms, unit_count)
        return done

    def discard(self, name: str) -> bool:
        """Drop a running measurement without recording it."""
        with self._lock:
            return self._active.pop(name, None) is not None

    @contextmanager
    def measure(self, name: str, unit_count: int = 1) -> Iterator[StepHandle]:
        """Time the enclosed block as step ``name``.

        If the block raises, the measurement is discarded and the step does
        not appear in the report.
        """
        handle = StepHandle(name=name, unit_count=unit_count)
        self.start(name)
        try:
            yield handle
        except BaseException:
            self.discard(name)
            raise
        self.stop(name, handle.unit_count)

    def report(self, site_title: str) -> BuildReport:
        return BuildReport(site_title=site_title, entries=tuple(self.completed))

    def log_report(self, site_title: str) -> str:
        """Log the build summary at INFO and return the rendered text."""
        text = format_report(self.report(site_title))
        self._report_logger.info("%s", text)
        return text

    def reset(self) -> None:
        with self._lock:
            self._active.clear()
            self._completed.clear()
