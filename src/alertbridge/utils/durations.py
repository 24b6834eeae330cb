"""Human readable durations for chat messages."""
from __future__ import annotations

from datetime import timedelta

_UNITS = ("years", "months", "weeks", "days", "hours", "minutes", "seconds")


def humanize(delta: timedelta) -> str:
    """
    Render a duration as e.g. ``1 hour 5 minutes``.

    Months are counted as four weeks and years as twelve months. Zero units
    are omitted and anything under a second renders as ``0 seconds``.

    Args:
        delta: Duration to render, may be negative

    Returns:
        Human readable duration
    """
    total = int(delta.total_seconds())
    sign = ""
    if total < 0:
        sign = "-"
        total = -total

    hours = total // 3600
    days = hours // 24
    weeks = days // 7
    months = weeks // 4
    values = {
        "years": months // 12,
        "months": months % 12,
        "weeks": weeks % 4,
        "days": days % 7,
        "hours": hours % 24,
        "minutes": (total // 60) % 60,
        "seconds": total % 60,
    }

    parts = []
    for unit in _UNITS:
        value = values[unit]
        if value == 1:
            parts.append(f"1 {unit[:-1]}")
        elif value > 1:
            parts.append(f"{value} {unit}")

    if not parts:
        return "0 seconds"
    return sign + " ".join(parts)
