"""
Derive what each (day, slot) cell of the shown week displays.

Overlapping reservations split a cell into equal-width segments in store
order. A cell covered by the selection in progress is drawn with a fixed
highlight, whatever lies under it.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from .grid import DAYS, SLOT_COUNT, slot_label
from .models import Reservation
from .registry import user_color
from .selection import SelectionMachine
from .week import WeekWindow

HIGHLIGHT_COLOR = "#A8B5A0"


@dataclass(frozen=True)
class Segment:
    reservation: Reservation
    text: str
    color: str
    width: float


@dataclass(frozen=True)
class Cell:
    day: str
    slot: int
    segments: tuple[Segment, ...]
    highlighted: bool = False

    @property
    def empty(self) -> bool:
        return not self.segments and not self.highlighted


@dataclass(frozen=True)
class WeekGrid:
    week_key: str
    week_number: int
    dates: tuple[date, ...]
    rows: tuple[tuple[Cell, ...], ...]

    def cell(self, day: str, slot: int) -> Cell:
        return self.rows[slot][DAYS.index(day)]


def reservations_for_cell(
    reservations: Iterable[Reservation], day: str, slot: int, week_key: str
) -> list[Reservation]:
    return [r for r in reservations if r.visible_in(week_key) and r.covers(day, slot)]


def render_cell(
    reservations: Iterable[Reservation],
    day: str,
    slot: int,
    week_key: str,
    highlighted: bool = False,
) -> Cell:
    overlapping = reservations_for_cell(reservations, day, slot, week_key)
    width = 1 / len(overlapping) if overlapping else 0.0
    segments = tuple(
        Segment(
            reservation=r,
            text=r.user if slot == r.start else r.description,
            color=user_color(r.user),
            width=width,
        )
        for r in overlapping
    )
    return Cell(day=day, slot=slot, segments=segments, highlighted=highlighted)


def render_week(
    reservations: Sequence[Reservation],
    window: WeekWindow,
    machine: Optional[SelectionMachine] = None,
) -> WeekGrid:
    week_key = window.key
    # filter once, every cell below scans the same week
    in_week = [r for r in reservations if r.visible_in(week_key)]
    rows = tuple(
        tuple(
            render_cell(
                in_week,
                day,
                slot,
                week_key,
                highlighted=machine is not None and machine.highlighted(day, slot),
            )
            for day in DAYS
        )
        for slot in range(SLOT_COUNT)
    )
    return WeekGrid(
        week_key=week_key,
        week_number=window.week_number,
        dates=tuple(window.dates),
        rows=rows,
    )


# ---- HTML ---------------------------------------------------------------------

_TABLE_STYLE = (
    "width:100%;border-collapse:collapse;table-layout:fixed;"
    "font-size:0.8rem;color:#4A4A4A;background:#FFFFFF"
)
_HEAD_STYLE = "background:#F5F3F0;padding:4px;text-align:center;font-weight:600"
_TIME_STYLE = "background:#FAFAF8;padding:2px 6px;border-top:1px solid #E0DED9;width:4rem"
_CELL_STYLE = "border-top:1px solid #E0DED9;border-left:1px solid #E0DED9;height:1.8rem;padding:0"


def _cell_html(cell: Cell) -> str:
    if cell.highlighted:
        inner = f'<div style="flex:1;background:{HIGHLIGHT_COLOR};opacity:0.5"></div>'
    else:
        inner = "".join(
            f'<div style="flex:{seg.width:.4f};background:{seg.color};opacity:0.9;'
            f'color:#FFFFFF;overflow:hidden;white-space:nowrap;text-align:center">'
            f"{html.escape(seg.text)}</div>"
            for seg in cell.segments
        )
    return (
        f'<td style="{_CELL_STYLE}">'
        f'<div style="display:flex;height:100%;min-height:1.8rem">{inner}</div></td>'
    )


def grid_html(grid: WeekGrid) -> str:
    """The week as an HTML table, ready for ``st.markdown(..., unsafe_allow_html=True)``."""
    head = "".join(
        f'<th style="{_HEAD_STYLE}">{day}<br>'
        f'<span style="font-weight:400;color:#6B705C">{d:%b} {d.day}</span></th>'
        for day, d in zip(DAYS, grid.dates)
    )
    body = "".join(
        f'<tr><td style="{_TIME_STYLE}">{slot_label(slot)}</td>'
        + "".join(_cell_html(cell) for cell in row)
        + "</tr>"
        for slot, row in enumerate(grid.rows)
    )
    return (
        f'<table style="{_TABLE_STYLE}">'
        f'<tr><th style="{_HEAD_STYLE}">Time</th>{head}</tr>{body}</table>'
    )
