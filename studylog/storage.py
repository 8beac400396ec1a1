"""Date-bucketed note storage on top of a pluggable backend."""

from __future__ import annotations

import json
import logging
import threading

from pydantic import ValidationError

from .backends import StorageBackend
from .metrics import BACKUP_OPERATIONS, NOTE_WRITES, STORE_LOAD_FAILURES
from .models import DayBucket, Note, Store

logger = logging.getLogger(__name__)


class NoteStore:
    """Notes grouped by date key, newest first within each day.

    Every mutation is a full load-modify-save of the persisted document,
    serialised by a lock so concurrent request threads cannot interleave.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend
        self._lock = threading.RLock()

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding load-modify-save cycles, for multi-step callers."""
        return self._lock

    # ------------------------------------------------------------------
    # Whole-document operations
    # ------------------------------------------------------------------

    def load(self) -> Store:
        """Read and parse the persisted document. Never raises."""
        raw = self._backend.read()
        if raw is None or not raw.strip():
            return Store()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            STORE_LOAD_FAILURES.inc()
            logger.error("Failed to load notes: %s — starting fresh", exc)
            return Store()
        if not isinstance(data, dict):
            STORE_LOAD_FAILURES.inc()
            logger.error("Stored document is not an object — starting fresh")
            return Store()

        store = Store()
        for key, value in data.items():
            try:
                store.root[key] = DayBucket.model_validate(value)
            except ValidationError as exc:
                logger.warning("Day %s is malformed, treating it as empty: %s", key, exc)
                store.root[key] = DayBucket()
        return store

    def save(self, store: Store) -> None:
        """Write the whole store back."""
        self._backend.write(store.model_dump_json(by_alias=True))

    def replace_all(self, store: Store) -> None:
        """Overwrite every bucket with ``store``."""
        with self._lock:
            self.save(store)
        logger.info("Store replaced — %d days, %d notes", len(store.root), store.note_count)

    def wipe(self) -> None:
        """Drop the persisted document; every day reads empty afterwards."""
        with self._lock:
            self._backend.clear()
        BACKUP_OPERATIONS.labels(operation="wipe", status="ok").inc()
        logger.info("Store wiped")

    # ------------------------------------------------------------------
    # Per-day operations
    # ------------------------------------------------------------------

    def get_items(self, key: str) -> list[Note]:
        """Notes for ``key``, newest first. Missing days read as empty."""
        bucket = self.load().root.get(key)
        if bucket is None:
            return []
        return list(bucket.items)

    def upsert_item(self, key: str, note: Note) -> None:
        """Replace the note with the same id in place, or add it as newest.

        ``created_at`` is not checked here: callers updating a note must carry
        the original value forward.
        """
        with self._lock:
            store = self.load()
            bucket = store.bucket(key)
            stored = note.model_copy(deep=True)
            for idx, existing in enumerate(bucket.items):
                if existing.id == note.id:
                    bucket.items[idx] = stored
                    operation = "update"
                    break
            else:
                bucket.items.insert(0, stored)
                operation = "insert"
            self.save(store)
        NOTE_WRITES.labels(operation=operation).inc()
        logger.info("Note %s %sd on %s", note.id, operation, key)

    def delete_item(self, key: str, note_id: str) -> bool:
        """Remove the note with ``note_id``. Returns whether one was removed."""
        with self._lock:
            store = self.load()
            bucket = store.bucket(key)
            before = len(bucket.items)
            bucket.items = [n for n in bucket.items if n.id != note_id]
            removed = len(bucket.items) < before
            self.save(store)
        if removed:
            NOTE_WRITES.labels(operation="delete").inc()
            logger.info("Note %s deleted from %s", note_id, key)
        return removed

    def keys(self) -> list[str]:
        """Date keys that have a bucket, oldest first."""
        return sorted(self.load().root)
