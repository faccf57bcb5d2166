"""Small text helpers for terminal output.

`format_duration` uses the short form that the platform's other tooling
prints ("2h", "45s", "120ms"), so ages look the same everywhere.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

_UNITS: tuple[tuple[str, int], ...] = (
    ("d", 86_400_000),
    ("h", 3_600_000),
    ("m", 60_000),
    ("s", 1_000),
)


def as_utc(value: datetime) -> datetime:
    """Read naive timestamps as UTC."""

    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_duration(delta: timedelta) -> str:
    """Render a duration in its largest whole unit: `2h`, `3d`, `850ms`."""

    millis = delta.total_seconds() * 1000
    magnitude = abs(millis)
    for suffix, size in _UNITS:
        if magnitude >= size:
            return f"{_round_half_up(millis / size)}{suffix}"
    return f"{_round_half_up(millis)}ms"


def pluralize(word: str, count: int, *, include_count: bool = True) -> str:
    noun = word if count == 1 else f"{word}s"
    return f"{count} {noun}" if include_count else noun
