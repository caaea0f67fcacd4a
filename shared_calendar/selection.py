"""
Selection state machine for reserving a slot range.

    IDLE --press--> SELECTING --release--> PENDING_CONFIRM --confirm/cancel--> IDLE

Pressing a cell that lies in one of the active user's own reservations
deletes that reservation instead and leaves the machine idle. Ranges never
span days. Confirming without a user or description is a silent cancel.

Two gesture recognizers drive the machine: ``DragGesture`` for pointers
that can hover (press, drag, release) and ``TapGesture`` for touch-like
input (tap the first slot, tap the last slot).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import structlog

from .cache import LiveCache
from .grid import SLOT_COUNT
from .models import Reservation, new_reservation_document
from .store import DocumentStore

LOGGER = structlog.get_logger(__name__)


class SelectionState(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    PENDING_CONFIRM = "pending_confirm"


@dataclass
class Selection:
    """Transient range on one day; ``anchor`` is where the gesture began."""

    day: str
    anchor: int
    end: int

    @property
    def start_slot(self) -> int:
        return min(self.anchor, self.end)

    @property
    def end_slot(self) -> int:
        return max(self.anchor, self.end)

    def covers(self, day: str, slot: int) -> bool:
        return day == self.day and self.start_slot <= slot <= self.end_slot


class SelectionMachine:
    def __init__(
        self,
        store: DocumentStore,
        cache: LiveCache,
        load_week_key: Optional[str] = None,
    ):
        self.store = store
        self.cache = cache
        # week the page was opened in; legacy reservations are shown there
        self.load_week_key = load_week_key or cache.load_week_key
        self.state = SelectionState.IDLE
        self.selection: Optional[Selection] = None

    def __repr__(self) -> str:
        return f"SelectionMachine({self.state.value}, {self.selection})"

    @property
    def idle(self) -> bool:
        return self.state is SelectionState.IDLE

    def _reset(self) -> None:
        self.state = SelectionState.IDLE
        self.selection = None

    def own_reservation_at(
        self, day: str, slot: int, user: str, week_key: str
    ) -> Optional[Reservation]:
        for reservation in self.cache.reservations_for_week(week_key, self.load_week_key):
            if reservation.user == user and reservation.covers(day, slot):
                return reservation
        return None

    def press(self, day: str, slot: int, user: str, week_key: str) -> bool:
        """
        Start a selection at ``(day, slot)``.

        Returns True when a selection started. Pressing one of the user's
        own reservations removes it (one delete call) and returns False.
        """
        user = (user or "").strip()
        if not self.idle or not user:
            return False
        mine = self.own_reservation_at(day, slot, user, week_key)
        if mine is not None:
            LOGGER.info("reservation_removed_by_tap", id=mine.id, user=user)
            self.store.delete_by_id(self.cache.settings.reservations_collection, mine.id)
            return False
        self.selection = Selection(day=day, anchor=slot, end=slot)
        self.state = SelectionState.SELECTING
        return True

    def enter(self, day: str, slot: int) -> None:
        if self.state is not SelectionState.SELECTING:
            return
        if day != self.selection.day:
            return
        self.selection.end = slot

    def release(self) -> bool:
        """Close the range and wait for confirmation."""
        if self.state is not SelectionState.SELECTING:
            return False
        sel = self.selection
        self.selection = Selection(day=sel.day, anchor=sel.start_slot, end=sel.end_slot)
        self.state = SelectionState.PENDING_CONFIRM
        return True

    def set_end(self, slot: int) -> None:
        """Adjust the end of a pending range, never before its start."""
        if self.state is not SelectionState.PENDING_CONFIRM:
            return
        self.selection.end = max(self.selection.start_slot, min(slot, SLOT_COUNT - 1))

    def confirm(self, description: str, user: str, week_key: str) -> Optional[str]:
        """
        Append the pending range as a reservation; returns the new id.

        A missing user or blank description discards the selection
        without writing anything.
        """
        if self.state is not SelectionState.PENDING_CONFIRM:
            return None
        sel = self.selection
        self._reset()
        if not (user or "").strip() or not (description or "").strip():
            LOGGER.info("selection_discarded", reason="missing user or description")
            return None
        record = new_reservation_document(
            sel.day, sel.start_slot, sel.end_slot, user, description, week_key
        )
        doc_id = self.store.append(self.cache.settings.reservations_collection, record)
        LOGGER.info(
            "reservation_created",
            id=doc_id,
            day=sel.day,
            start=sel.start_slot,
            end=sel.end_slot,
            week_start=week_key,
        )
        return doc_id

    def cancel(self) -> None:
        self._reset()

    def highlighted(self, day: str, slot: int) -> bool:
        return self.selection is not None and self.selection.covers(day, slot)


# ---- gesture recognizers ---------------------------------------------------------

class DragGesture:
    """Press on a cell, drag across the same day, release to close the range."""

    def __init__(self, machine: SelectionMachine):
        self.machine = machine

    def on_press(self, day: str, slot: int, user: str, week_key: str) -> bool:
        return self.machine.press(day, slot, user, week_key)

    def on_enter(self, day: str, slot: int) -> None:
        self.machine.enter(day, slot)

    def on_release(self) -> bool:
        return self.machine.release()


class TapGesture:
    """
    First tap anchors the range, second tap on the same day closes it.

    With ``single_tap`` the first tap closes a one-slot range at once.
    Taps on another day while a range is open are ignored.
    """

    def __init__(self, machine: SelectionMachine, single_tap: bool = False):
        self.machine = machine
        self.single_tap = single_tap

    def on_tap(self, day: str, slot: int, user: str, week_key: str) -> bool:
        """Returns True when the tap moved the range to pending confirmation."""
        machine = self.machine
        if machine.state is SelectionState.SELECTING:
            if day != machine.selection.day:
                return False
            machine.enter(day, slot)
            return machine.release()
        if not machine.press(day, slot, user, week_key):
            return False
        if self.single_tap:
            return machine.release()
        return False


Gesture = Union[DragGesture, TapGesture]


def recognizer_for(
    machine: SelectionMachine, pointer_hover: bool, single_tap: bool = False
) -> Gesture:
    """Pick the recognizer for the input device's capabilities."""
    if pointer_hover:
        return DragGesture(machine)
    return TapGesture(machine, single_tap=single_tap)
