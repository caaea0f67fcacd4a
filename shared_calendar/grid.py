"""
Fixed slot taxonomy of the weekly grid.

A day is split into 32 half-hour slots from 6:00 to 22:00; a week has the
seven day labels ``Mon`` .. ``Sun``. Everything here is pure.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

SLOT_COUNT = 32
FIRST_HOUR = 6
DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _clock(minutes_after_first_hour: int) -> str:
    hour, minute = divmod(minutes_after_first_hour, 60)
    return f"{FIRST_HOUR + hour}:{minute:02d}"


def slot_label(slot: int) -> str:
    """Start time of ``slot`` as ``H:MM`` (0 -> "6:00", 31 -> "21:30")."""
    return _clock(slot * 30)


def slot_end_label(slot: int) -> str:
    """End time of ``slot``; the last slot ends at 22:00."""
    return _clock((slot + 1) * 30)


def slot_labels() -> list[str]:
    return [slot_label(s) for s in range(SLOT_COUNT)]


def day_index(day: str) -> int:
    """Monday-based index of a day label; ``ValueError`` for unknown labels."""
    return DAYS.index(day)


def date_for_day(week_start: date, day: str) -> date:
    """Calendar date of ``day`` in the week anchored at ``week_start``."""
    return week_start + timedelta(days=day_index(day))


def cells() -> Iterator[tuple[str, int]]:
    """All ``(day, slot)`` pairs, row by row (slot-major)."""
    for slot in range(SLOT_COUNT):
        for day in DAYS:
            yield day, slot
