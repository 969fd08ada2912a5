"""Pydantic models and errors for build step timing."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TimingError(Exception):
    """Base class for step sequencing errors."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(message)


class StepNotStartedError(TimingError):
    """Raised by ``stop`` when the step is not currently running."""

    def __init__(self, step: str) -> None:
        super().__init__(step, f"Step '{step}' has not been started.")


class StepAlreadyStartedError(TimingError):
    """Raised by ``start`` under the ``reject`` restart policy."""

    def __init__(self, step: str) -> None:
        super().__init__(step, f"Step '{step}' is already running.")


class TimerEntry(BaseModel):
    """One named measurement.

    ``elapsed`` and ``unit_count`` stay ``None`` while the step is running.
    Entries are frozen; stopping a step produces a new, completed entry.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    started_at: float
    elapsed: float | None = None
    unit_count: int | None = None
    sequence: int | None = None

    @property
    def completed(self) -> bool:
        return self.elapsed is not None

    @property
    def elapsed_ms(self) -> float:
        return (self.elapsed or 0.0) * 1000.0


class BuildReport(BaseModel):
    """Completed steps of one build, in completion order."""

    model_config = ConfigDict(frozen=True)

    site_title: str
    entries: tuple[TimerEntry, ...] = ()

    @property
    def total_elapsed(self) -> float:
        return sum(e.elapsed or 0.0 for e in self.entries)

    @property
    def step_names(self) -> list[str]:
        return [e.name for e in self.entries]
