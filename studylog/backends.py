"""Storage backends holding the single persisted study log document.

A backend only moves opaque text: parsing and validation happen in
:class:`studylog.storage.NoteStore`. Reads that fail are logged and reported
as "no document" so that loading never raises.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

import redis
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .config import Settings

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Where the persisted document lives."""

    def read(self) -> Optional[str]:
        """Return the stored document text, or None if there is none."""
        ...

    def write(self, document: str) -> None:
        """Replace the stored document."""
        ...

    def clear(self) -> None:
        """Remove the stored document entirely."""
        ...


class MemoryBackend:
    """In-process backend, used by tests and throwaway sessions."""

    def __init__(self, document: Optional[str] = None) -> None:
        self.document = document

    def read(self) -> Optional[str]:
        return self.document

    def write(self, document: str) -> None:
        self.document = document

    def clear(self) -> None:
        self.document = None


class JsonFileBackend:
    """Keeps the document in one JSON file, rewritten whole on every save."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Optional[str]:
        if not self._path.exists():
            logger.info("No storage file found at %s — starting fresh", self._path)
            return None
        try:
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to read %s: %s", self._path, exc)
            return None

    def write(self, document: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(document, encoding="utf-8")

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


_CREATE_TABLE_STMT = """CREATE TABLE IF NOT EXISTS documents (
    doc_key VARCHAR(255) PRIMARY KEY,
    value TEXT NOT NULL
)"""


class SqlBackend:
    """One row per storage key in a ``documents`` table.

    Works with any SQLAlchemy URL whose dialect supports
    ``INSERT ... ON CONFLICT``; SQLite is the default.
    """

    def __init__(self, database_url: str, key: str) -> None:
        self._url = database_url
        self._key = key
        self._engine: Engine = create_engine(database_url)
        with self._engine.begin() as conn:
            conn.execute(text(_CREATE_TABLE_STMT))
        logger.info("SQL storage ready at %s (key=%s)", database_url, key)

    def read(self) -> Optional[str]:
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    text("SELECT value FROM documents WHERE doc_key = :key"),
                    {"key": self._key},
                ).first()
        except Exception as e:
            logger.error("SQL read failed: %s", e)
            return None
        return row[0] if row else None

    def write(self, document: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO documents (doc_key, value) VALUES (:key, :value) "
                    "ON CONFLICT (doc_key) DO UPDATE SET value = excluded.value"
                ),
                {"key": self._key, "value": document},
            )

    def clear(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("DELETE FROM documents WHERE doc_key = :key"),
                {"key": self._key},
            )

    def close(self) -> None:
        """Dispose of the engine and connection pool."""
        self._engine.dispose()


class RedisBackend:
    """Stores the document as a single Redis string."""

    def __init__(self, redis_url: str, key: str) -> None:
        self._redis_url = redis_url
        self._key = key
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    def read(self) -> Optional[str]:
        try:
            return self._client.get(self._key)
        except redis.RedisError as e:
            logger.warning("Redis get failed: %s", e)
            return None

    def write(self, document: str) -> None:
        self._client.set(self._key, document)

    def clear(self) -> None:
        self._client.delete(self._key)

    def close(self) -> None:
        self._client.close()


def build_backend(settings: Settings) -> StorageBackend:
    """Create the backend selected by ``settings.storage_backend``."""
    kind = settings.storage_backend
    if kind == "memory":
        return MemoryBackend()
    if kind == "file":
        return JsonFileBackend(settings.storage_path)
    if kind == "sql":
        return SqlBackend(settings.database_url, settings.storage_key)
    if kind == "redis":
        return RedisBackend(settings.redis_url, settings.storage_key)
    raise ValueError(f"Unknown storage backend: {kind!r}")
