"""Build step timing: named stopwatches and the end-of-build report."""

from sitepulse_core.timing.models import (
    BuildReport,
    StepAlreadyStartedError,
    StepNotStartedError,
    TimerEntry,
    TimingError,
)
from sitepulse_core.timing.registry import StepHandle, StepTimer
from sitepulse_core.timing.report import (
    format_report,
    format_step_line,
    per_item_ms,
)

__all__ = [
    "BuildReport",
    "StepAlreadyStartedError",
    "StepHandle",
    "StepNotStartedError",
    "StepTimer",
    "TimerEntry",
    "TimingError",
    "format_report",
    "format_step_line",
    "per_item_ms",
]
