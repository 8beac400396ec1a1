"""Export, validation and import of whole-store backup documents."""

from __future__ import annotations

import json
import logging
from datetime import timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import STORAGE_KEY
from .datekey import DateKeyCodec
from .errors import BackupValidationError, BackupViolation, ImportFailedError
from .metrics import BACKUP_OPERATIONS
from .models import BackupDocument, DayBucket, Store
from .storage import NoteStore

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "study-log-backup"


def validate(doc: Any) -> None:
    """Check the structure of a backup document.

    Raises BackupValidationError describing the first violation found.
    A document with an empty ``data`` object is valid.
    """
    if not isinstance(doc, dict):
        raise BackupValidationError(BackupViolation.MALFORMED_DOCUMENT)
    data = doc.get("data")
    if not isinstance(data, dict):
        raise BackupValidationError(BackupViolation.MISSING_DATA)
    for key, bucket in data.items():
        if not isinstance(key, str) or not isinstance(bucket, dict):
            raise BackupValidationError(BackupViolation.MALFORMED_BUCKET, str(key))
        items = bucket.get("items")
        if not isinstance(items, list):
            raise BackupValidationError(BackupViolation.MISSING_ITEMS, key)
        if not all(isinstance(item, dict) for item in items):
            raise BackupValidationError(BackupViolation.MALFORMED_BUCKET, key)


def to_store(doc: dict[str, Any]) -> Store:
    """Build a Store from an already validated document."""
    store = Store()
    for key, bucket in doc["data"].items():
        try:
            store.root[key] = DayBucket.model_validate(bucket)
        except ValidationError as exc:
            raise BackupValidationError(BackupViolation.MALFORMED_BUCKET, key) from exc
    return store


class BackupCodec:
    """Snapshots the store into a portable document and restores it."""

    def __init__(
        self,
        store: NoteStore,
        codec: DateKeyCodec,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        self._store = store
        self._codec = codec
        self._storage_key = storage_key

    def export(self) -> BackupDocument:
        """Snapshot of every bucket. Does not modify the store."""
        store = self._store.load()
        exported_at = self._codec.now().astimezone(timezone.utc)
        document = BackupDocument(
            exported_at=exported_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            storage_key=self._storage_key,
            data=store.root,
        )
        BACKUP_OPERATIONS.labels(operation="export", status="ok").inc()
        logger.info("Exported %d days, %d notes", len(store.root), store.note_count)
        return document

    validate = staticmethod(validate)

    def prepare(self, doc: Any) -> Store:
        """Validate ``doc`` down to its notes and build the store it describes.

        Raises BackupValidationError; nothing is written either way.
        """
        try:
            validate(doc)
            return to_store(doc)
        except BackupValidationError as exc:
            BACKUP_OPERATIONS.labels(operation="import", status="invalid").inc()
            logger.warning("Import rejected: %s", exc.message)
            raise

    def restore(self, store: Store) -> Store:
        """Overwrite the whole store with an already prepared one."""
        self._store.replace_all(store)
        BACKUP_OPERATIONS.labels(operation="import", status="ok").inc()
        return store

    def import_document(self, doc: Any) -> Store:
        """Validate ``doc`` and overwrite the whole store with its data.

        On a validation error the store is left untouched.
        """
        return self.restore(self.prepare(doc))

    @staticmethod
    def dumps(document: BackupDocument) -> str:
        return json.dumps(document.model_dump(by_alias=True), indent=2, ensure_ascii=False)

    @staticmethod
    def loads(text: str) -> Any:
        """Parse backup text. Raises ImportFailedError on invalid JSON."""
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            BACKUP_OPERATIONS.labels(operation="import", status="failed").inc()
            raise ImportFailedError(f"Import failed: {exc}") from exc

    def read_file(self, path: Path) -> Any:
        """Read and parse a backup file.

        Raises ImportFailedError carrying the underlying error text.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            BACKUP_OPERATIONS.labels(operation="import", status="failed").inc()
            raise ImportFailedError(f"Import failed: {exc}") from exc
        return self.loads(text)

    def filename(self, ext: str = "json") -> str:
        """``study-log-backup-<today>.<ext>``."""
        return f"{FILENAME_PREFIX}-{self._codec.today_key()}.{ext}"
