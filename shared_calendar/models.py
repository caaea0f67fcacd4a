"""
Typed records exchanged with the document store.

Snapshots arrive as untyped ``{id, data}`` documents; they are validated
here, at the store boundary, and anything that does not fit is dropped.

Wire format of a reservation document (camelCase keys, id held by the store)::

    {"day": "Wed", "start": 4, "end": 7, "user": "Ana",
     "description": "Gym", "weekStart": "2024-03-04",
     "date": "2024-03-06", "schemaVersion": 2}

Version 1 documents are the legacy ones written before week navigation
existed and carry no ``weekStart``/``date``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Literal, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .grid import DAYS, SLOT_COUNT, date_for_day
from .week import ymd

LOGGER = structlog.get_logger(__name__)

LEGACY_SCHEMA = 1
CURRENT_SCHEMA = 2

DayLabel = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class Document:
    """Raw document as pushed by a store snapshot."""

    id: str
    data: dict


class Reservation(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str
    day: DayLabel
    start: int = Field(ge=0, lt=SLOT_COUNT)
    end: int = Field(ge=0, lt=SLOT_COUNT)
    user: str = Field(min_length=1)
    description: str = Field(min_length=1)
    week_start: Optional[str] = Field(None, alias="weekStart")
    day_date: Optional[str] = Field(None, alias="date")
    schema_version: int = Field(CURRENT_SCHEMA, alias="schemaVersion")

    @model_validator(mode="after")
    def _ordered_range(self) -> "Reservation":
        if self.start > self.end:
            raise ValueError(f"start {self.start} after end {self.end}")
        return self

    def covers(self, day: str, slot: int) -> bool:
        return self.day == day and self.start <= slot <= self.end

    def visible_in(self, week_key: str) -> bool:
        return self.week_start == week_key

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})


class User(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    name: str = Field(min_length=1)


def _day_date(week_start: str, day: str) -> str:
    return ymd(date_for_day(date.fromisoformat(week_start), day))


def new_reservation_document(
    day: str,
    start: int,
    end: int,
    user: str,
    description: str,
    week_start: str,
) -> dict:
    """
    Build the document appended to the store for a confirmed selection.

    The slot range is normalised so that ``start <= end`` whatever the
    direction of the gesture. Raises ``ValueError`` for an empty user or
    description, an unknown day or an out-of-grid slot.
    """
    user, description = user.strip(), description.strip()
    if not user or not description:
        raise ValueError("user and description must be non-empty")
    if day not in DAYS:
        raise ValueError(f"unknown day {day!r}")
    lo, hi = min(start, end), max(start, end)
    if lo < 0 or hi >= SLOT_COUNT:
        raise ValueError(f"slot range {lo}..{hi} outside the grid")
    return {
        "day": day,
        "start": lo,
        "end": hi,
        "user": user,
        "description": description,
        "weekStart": week_start,
        "date": _day_date(week_start, day),
        "schemaVersion": CURRENT_SCHEMA,
    }


def schema_version_of(data: dict) -> int:
    if data.get("weekStart"):
        return data.get("schemaVersion") or CURRENT_SCHEMA
    return LEGACY_SCHEMA


def migrate_reservation(data: dict, load_week_key: str) -> dict:
    """Upgrade a legacy document to the current schema, in a copy."""
    if schema_version_of(data) != LEGACY_SCHEMA:
        return {**data, "schemaVersion": schema_version_of(data)}
    upgraded = {**data, "weekStart": load_week_key, "schemaVersion": CURRENT_SCHEMA}
    if data.get("day") in DAYS:
        upgraded["date"] = _day_date(load_week_key, data["day"])
    return upgraded


def parse_reservations(
    documents: Iterable[Document], load_week_key: str
) -> tuple[Reservation, ...]:
    """Validate a reservation snapshot, keeping store order."""
    parsed: list[Reservation] = []
    migrated = 0
    for doc in documents:
        if schema_version_of(doc.data) == LEGACY_SCHEMA:
            migrated += 1
        data = migrate_reservation(doc.data, load_week_key)
        data.pop("id", None)
        try:
            parsed.append(Reservation(id=doc.id, **data))
        except (ValidationError, TypeError) as err:
            LOGGER.warning("reservation_dropped", id=doc.id, error=str(err))
    if migrated:
        LOGGER.info("reservations_migrated", count=migrated, week_start=load_week_key)
    return tuple(parsed)


def parse_users(documents: Iterable[Document]) -> tuple[User, ...]:
    """Validate a registry snapshot; names are unique, first one wins."""
    users: list[User] = []
    seen: set[str] = set()
    for doc in documents:
        try:
            user = User(id=doc.id, name=doc.data.get("name", ""))
        except ValidationError as err:
            LOGGER.warning("user_dropped", id=doc.id, error=str(err))
            continue
        if user.name in seen:
            continue
        seen.add(user.name)
        users.append(user)
    return tuple(users)
