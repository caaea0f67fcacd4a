"""
User registry operations and per-user colours.

The registry is a plain collection of ``{name}`` documents; the active
user of a page is session state and does not have to be registered.
"""

from __future__ import annotations

import hashlib
from typing import Optional

import structlog

from .cache import LiveCache
from .store import DocumentStore

LOGGER = structlog.get_logger(__name__)

USER_COLORS = (
    "#B5A896",  # beige
    "#A8B5A0",  # sage
    "#E07A5F",  # terracotta
    "#D8B4A0",  # dusty rose
    "#6B705C",  # muted olive
    "#CB997E",  # warm taupe
    "#C08497",  # blush pink
)
FALLBACK_COLOR = "#9CA3AF"


def user_color(name: str) -> str:
    """Colour of ``name``; depends on the name only, not on registry order."""
    name = (name or "").strip()
    if not name:
        return FALLBACK_COLOR
    digest = hashlib.sha1(name.encode("utf-8")).digest()
    return USER_COLORS[int.from_bytes(digest[:4], "big") % len(USER_COLORS)]


def save_user(store: DocumentStore, cache: LiveCache, name: str) -> Optional[str]:
    """Register ``name`` unless it is blank or already known; returns the trimmed name."""
    name = (name or "").strip()
    if not name:
        return None
    if name not in cache.user_names:
        store.append(cache.settings.users_collection, {"name": name})
        LOGGER.info("user_registered", name=name)
    return name


def delete_user(
    store: DocumentStore,
    cache: LiveCache,
    name: str,
    cascade: bool = True,
) -> int:
    """
    Remove ``name`` from the registry.

    With ``cascade`` every reservation the user owns, in any week, is
    deleted as well. Returns the number of reservations removed.
    """
    # concurrent saves can leave several documents for one name
    for doc_id in cache.user_ids(name):
        store.delete_by_id(cache.settings.users_collection, doc_id)
    removed = 0
    if cascade:
        for reservation in cache.owned_by(name):
            store.delete_by_id(cache.settings.reservations_collection, reservation.id)
            removed += 1
    LOGGER.info("user_deleted", name=name, reservations_removed=removed)
    return removed
