"""Process-wide reactive cache of the reservation and user collections."""

from __future__ import annotations

from datetime import date
from typing import Optional

import structlog

from .config import Settings
from .models import Document, Reservation, User, parse_reservations, parse_users
from .store import DocumentStore, Unsubscribe
from .week import monday, ymd

LOGGER = structlog.get_logger(__name__)


class LiveCache:
    """
    Local, read-only mirror of the store.

    ``mount()`` subscribes to both collections and every snapshot replaces
    the mirrored state wholesale; ``unmount()`` tears the subscriptions
    down. Writes go to the store, never here.

    Raw reservation documents are kept so that legacy records (no week
    tag) can be placed in the load week of whichever page reads them;
    ``load_week_key`` is only the default for callers that do not say.
    """

    def __init__(
        self,
        store: DocumentStore,
        settings: Settings,
        load_week: Optional[date] = None,
    ):
        self.store = store
        self.settings = settings
        self.load_week_key = ymd(monday(load_week or date.today()))
        # (raw documents, parsed views keyed by load week); swapped as one
        self._reservation_snapshot: tuple[tuple[Document, ...], dict] = ((), {})
        self._users: tuple[User, ...] = ()
        self._user_ids: dict[str, list[str]] = {}
        self._unsubscribers: list[Unsubscribe] = []
        self.snapshots = 0

    @property
    def mounted(self) -> bool:
        return bool(self._unsubscribers)

    def mount(self) -> "LiveCache":
        if self.mounted:
            return self
        self._unsubscribers = [
            self.store.subscribe(self.settings.reservations_collection, self._on_reservations),
            self.store.subscribe(self.settings.users_collection, self._on_users),
        ]
        LOGGER.info("cache_mounted", load_week=self.load_week_key)
        return self

    def unmount(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()
        if unsubscribers:
            LOGGER.info("cache_unmounted")

    def _on_reservations(self, documents: list[Document]) -> None:
        self._reservation_snapshot = (tuple(documents), {})
        self.snapshots += 1
        LOGGER.debug(
            "snapshot",
            collection=self.settings.reservations_collection,
            received=len(documents),
        )

    def _on_users(self, documents: list[Document]) -> None:
        user_ids: dict[str, list[str]] = {}
        for doc in documents:
            name = str(doc.data.get("name") or "").strip()
            if name:
                user_ids.setdefault(name, []).append(doc.id)
        self._users = parse_users(documents)
        self._user_ids = user_ids
        self.snapshots += 1
        LOGGER.debug(
            "snapshot",
            collection=self.settings.users_collection,
            received=len(documents),
            kept=len(self._users),
        )

    def reservations_at(self, load_week_key: Optional[str] = None) -> tuple[Reservation, ...]:
        """Validated reservations, legacy ones tagged with ``load_week_key``."""
        key = load_week_key or self.load_week_key
        documents, parsed = self._reservation_snapshot
        if key not in parsed:
            parsed[key] = parse_reservations(documents, key)
        return parsed[key]

    @property
    def reservations(self) -> tuple[Reservation, ...]:
        return self.reservations_at(self.load_week_key)

    @property
    def users(self) -> tuple[User, ...]:
        return self._users

    @property
    def user_names(self) -> list[str]:
        return [u.name for u in self._users]

    def user_ids(self, name: str) -> list[str]:
        """Ids of every registry document holding ``name``, duplicates included."""
        return list(self._user_ids.get(name.strip(), []))

    def reservations_for_week(
        self, week_key: str, load_week_key: Optional[str] = None
    ) -> list[Reservation]:
        return [r for r in self.reservations_at(load_week_key) if r.visible_in(week_key)]

    def owned_by(self, user: str) -> list[Reservation]:
        return [r for r in self.reservations if r.user == user]
