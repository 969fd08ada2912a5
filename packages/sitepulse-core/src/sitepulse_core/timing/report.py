"""Plain-text rendering of a BuildReport."""

from __future__ import annotations

from .models import BuildReport, TimerEntry

_DOUBLE_RULE = "═" * 60
_SINGLE_RULE = "─" * 60

_NAME_WIDTH = 24
_ITEMS_WIDTH = 8
_DURATION_WIDTH = 12


def format_duration(ms: float) -> str:
    return f"{ms:.0f} ms"


def per_item_ms(entry: TimerEntry) -> float | None:
    """Average duration of one item, or None when the step covered a single item."""
    if not entry.unit_count or entry.unit_count <= 1:
        return None
    return entry.elapsed_ms / entry.unit_count


def format_step_line(entry: TimerEntry) -> str:
    """One report row: name, item count, duration and the per-item average."""
    avg = per_item_ms(entry)
    avg_str = f"{avg:.2f} ms" if avg is not None else ""
    line = (
        f"{entry.name:<{_NAME_WIDTH}} "
        f"{entry.unit_count or '':<{_ITEMS_WIDTH}} "
        f"{format_duration(entry.elapsed_ms):<{_DURATION_WIDTH}} "
        f"{avg_str}"
    )
    return line.rstrip()


def format_report(report: BuildReport) -> str:
    """Render the full multi-line report that ends up in the build log."""
    header = (
        f"{'Step':<{_NAME_WIDTH}} "
        f"{'Items':<{_ITEMS_WIDTH}} "
        f"{'Duration':<{_DURATION_WIDTH}} "
        "Per item"
    )
    lines = [
        f"Site '{report.site_title}' created!",
        _DOUBLE_RULE,
        header,
        _SINGLE_RULE,
    ]
    lines.extend(format_step_line(entry) for entry in report.entries)
    lines.append(_SINGLE_RULE)
    total = f"{'Total':<{_NAME_WIDTH + _ITEMS_WIDTH + 1}} {format_duration(report.total_elapsed * 1000.0)}"
    lines.append(total)
    lines.append(_DOUBLE_RULE)
    return "\n".join(lines)
