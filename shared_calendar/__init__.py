"""
Package initialiser for the `shared_calendar` package.

Re-exports what the Streamlit page needs to wire itself up:

    from shared_calendar import LiveCache, get_settings, get_store
"""
from .cache import LiveCache
from .config import Settings, get_settings
from .store import FirestoreStore, MemoryStore, StoreError, get_store

__all__ = [
    "FirestoreStore",
    "LiveCache",
    "MemoryStore",
    "Settings",
    "StoreError",
    "get_settings",
    "get_store",
]
