"""
Document-store layer used by the calendar page.

The core only ever talks to a store through three calls:

subscribe(collection, callback) -> unsubscribe
    Push a full-collection snapshot (a list of ``Document``) to
    ``callback`` now and after every change.
append(collection, record) -> id
    Add a document; the store assigns the id.
delete_by_id(collection, id)
    Remove one document. Unknown ids are a no-op.

Two backends implement it: ``FirestoreStore`` (shared, live) and
``MemoryStore`` (one process, nothing persisted).
"""

from __future__ import annotations

import json
import threading
import uuid
from typing import Callable, Optional, Protocol

import structlog
from google.cloud import exceptions as gexc
from google.cloud import firestore, secretmanager
from google.oauth2 import service_account

from .config import Settings
from .models import Document

LOGGER = structlog.get_logger(__name__)

SnapshotCallback = Callable[[list[Document]], None]
Unsubscribe = Callable[[], None]


class StoreError(RuntimeError):
    """A store call failed (network, permissions, quota...)."""


class DocumentStore(Protocol):
    def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe: ...

    def append(self, collection: str, record: dict) -> str: ...

    def delete_by_id(self, collection: str, doc_id: str) -> None: ...


# ---- Firestore ---------------------------------------------------------------

def build_client(settings: Settings) -> firestore.Client:
    """
    Firestore client for ``settings``.

    Uses Application Default Credentials unless ``credentials_secret`` names
    a Secret Manager secret holding a service-account JSON key.
    """
    if not settings.credentials_secret:
        # project ID inferred from ADC when not configured
        return firestore.Client(project=settings.gcp_project)

    project_id = settings.project_id()
    sm = secretmanager.SecretManagerServiceClient()
    name = f"projects/{project_id}/secrets/{settings.credentials_secret}/versions/latest"
    info = json.loads(sm.access_secret_version(name=name).payload.data.decode())
    credentials = service_account.Credentials.from_service_account_info(info)
    return firestore.Client(project=project_id, credentials=credentials)


class FirestoreStore:
    """Store backed by Firestore collections and snapshot listeners."""

    def __init__(self, settings: Settings, client: Optional[firestore.Client] = None):
        self._settings = settings
        self._client = client

    @property
    def client(self) -> firestore.Client:
        if self._client is None:
            self._client = build_client(self._settings)
        return self._client

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        # runs on the listener's background thread
        def _on_snapshot(col_snapshot, changes, read_time):
            callback([Document(doc.id, doc.to_dict() or {}) for doc in col_snapshot])

        try:
            watch = self.client.collection(collection).on_snapshot(_on_snapshot)
        except gexc.GoogleCloudError as err:
            raise StoreError(f"Firestore error: {err}") from err
        return watch.unsubscribe

    def append(self, collection: str, record: dict) -> str:
        try:
            _, ref = self.client.collection(collection).add(record)
        except gexc.GoogleCloudError as err:          # network / perms
            raise StoreError(f"Firestore error: {err}") from err
        LOGGER.info("document_appended", collection=collection, id=ref.id)
        return ref.id

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        # Firestore deletes of missing documents succeed silently
        try:
            self.client.collection(collection).document(doc_id).delete()
        except gexc.GoogleCloudError as err:
            raise StoreError(f"Firestore error: {err}") from err
        LOGGER.info("document_deleted", collection=collection, id=doc_id)


# ---- in-process ----------------------------------------------------------------

class MemoryStore:
    """
    Process-local store for running the page without a backend.

    Every write pushes a fresh snapshot to the subscribers of that
    collection synchronously, in insertion order. Deliveries are
    serialised: a snapshot is taken and handed to every subscriber before
    the next one is taken, so subscribers never see an older snapshot
    after a newer one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # reentrant, a callback may write back into the store
        self._delivery = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}
        self._subscribers: dict[str, list[SnapshotCallback]] = {}

    def _snapshot(self, collection: str) -> list[Document]:
        docs = self._collections.get(collection, {})
        return [Document(doc_id, dict(data)) for doc_id, data in docs.items()]

    def _publish(self, collection: str) -> None:
        with self._delivery:
            with self._lock:
                snapshot = self._snapshot(collection)
                callbacks = list(self._subscribers.get(collection, []))
            for callback in callbacks:
                callback(snapshot)

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        with self._delivery:
            with self._lock:
                self._subscribers.setdefault(collection, []).append(callback)
                snapshot = self._snapshot(collection)
            callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(collection, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def append(self, collection: str, record: dict) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = dict(record)
        LOGGER.info("document_appended", collection=collection, id=doc_id)
        self._publish(collection)
        return doc_id

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        with self._lock:
            removed = self._collections.get(collection, {}).pop(doc_id, None)
        if removed is None:
            return
        LOGGER.info("document_deleted", collection=collection, id=doc_id)
        self._publish(collection)


def get_store(settings: Settings) -> DocumentStore:
    if settings.backend == "memory":
        return MemoryStore()
    return FirestoreStore(settings)
