"""Monday-anchored week arithmetic and the navigator holding the shown week."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime]


def _as_date(d: DateLike) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(d, datetime):
        return d.date()
    return d


def monday(d: DateLike) -> date:
    """Monday on or before ``d`` (time of day dropped)."""
    d = _as_date(d)
    return d - timedelta(days=d.isoweekday() - 1)


def add_days(d: DateLike, n: int) -> date:
    return _as_date(d) + timedelta(days=n)


def ymd(d: DateLike) -> str:
    """Canonical ``YYYY-MM-DD`` key used to compare weeks."""
    return _as_date(d).isoformat()


def iso_week_number(d: DateLike) -> int:
    """ISO 8601 week number (the week holding the year's first Thursday is 1)."""
    return _as_date(d).isocalendar()[1]


class WeekWindow:
    """
    The seven consecutive dates currently on screen.

    Only explicit navigation moves the anchor.
    """

    def __init__(self, anchor: Optional[DateLike] = None):
        self.monday = monday(anchor if anchor is not None else date.today())

    def __repr__(self) -> str:
        return f"WeekWindow({self.key})"

    @property
    def key(self) -> str:
        return ymd(self.monday)

    @property
    def dates(self) -> list[date]:
        return [add_days(self.monday, i) for i in range(7)]

    @property
    def sunday(self) -> date:
        return add_days(self.monday, 6)

    @property
    def week_number(self) -> int:
        return iso_week_number(self.monday)

    @property
    def label(self) -> str:
        """E.g. ``"Week 10 · Mar 4 – Mar 10, 2024"``."""
        first, last = self.monday, self.sunday
        return (
            f"Week {self.week_number} · "
            f"{first:%b} {first.day} – {last:%b} {last.day}, {last.year}"
        )

    def contains(self, d: DateLike) -> bool:
        return self.monday <= _as_date(d) <= self.sunday

    def prev(self) -> None:
        self.monday = add_days(self.monday, -7)

    def next(self) -> None:
        self.monday = add_days(self.monday, 7)

    def jump_to_today(self, today: Optional[DateLike] = None) -> None:
        self.monday = monday(today if today is not None else date.today())

    def jump_to_date(self, d: DateLike) -> None:
        self.monday = monday(d)
