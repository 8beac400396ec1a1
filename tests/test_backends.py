"""Unit tests for studylog.backends — where the persisted document lives."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import redis

from studylog.backends import (
    JsonFileBackend,
    MemoryBackend,
    RedisBackend,
    SqlBackend,
    build_backend,
)
from studylog.config import Settings
from studylog.models import Note
from studylog.storage import NoteStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_redis_backend() -> tuple[RedisBackend, MagicMock]:
    """Create a RedisBackend with a mocked Redis client."""
    client = MagicMock()
    with patch("studylog.backends.redis.Redis.from_url", return_value=client):
        backend = RedisBackend("redis://localhost:6379", "studyLogsV2")
    return backend, client


# ---------------------------------------------------------------------------
# Memory / file
# ---------------------------------------------------------------------------


class TestMemoryBackend:
    def test_read_write_clear(self):
        backend = MemoryBackend()
        assert backend.read() is None
        backend.write("{}")
        assert backend.read() == "{}"
        backend.clear()
        assert backend.read() is None


class TestJsonFileBackend:
    def test_missing_file_reads_none(self, tmp_path: Path):
        assert JsonFileBackend(tmp_path / "absent.json").read() is None

    def test_write_creates_parent_dirs(self, tmp_path: Path):
        path = tmp_path / "nested" / "dir" / "log.json"
        backend = JsonFileBackend(path)
        backend.write('{"a": 1}')
        assert path.read_text(encoding="utf-8") == '{"a": 1}'
        assert backend.read() == '{"a": 1}'

    def test_clear_removes_file(self, tmp_path: Path):
        path = tmp_path / "log.json"
        backend = JsonFileBackend(path)
        backend.write("{}")
        backend.clear()
        assert not path.exists()
        backend.clear()  # second clear is harmless

    def test_unreadable_path_reads_none(self, tmp_path: Path):
        """A directory in place of the file is reported, not raised."""
        assert JsonFileBackend(tmp_path).read() is None


# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------


class TestSqlBackend:
    def test_round_trip(self, tmp_path: Path):
        backend = SqlBackend(f"sqlite:///{tmp_path / 'log.db'}", "studyLogsV2")
        assert backend.read() is None
        backend.write('{"x": 1}')
        backend.write('{"x": 2}')
        assert backend.read() == '{"x": 2}'
        backend.clear()
        assert backend.read() is None
        backend.close()

    def test_keys_are_isolated(self, tmp_path: Path):
        url = f"sqlite:///{tmp_path / 'log.db'}"
        a = SqlBackend(url, "a")
        b = SqlBackend(url, "b")
        a.write("A")
        assert b.read() is None
        b.write("B")
        assert a.read() == "A"

    def test_store_survives_reopen(self, tmp_path: Path):
        url = f"sqlite:///{tmp_path / 'log.db'}"
        NoteStore(SqlBackend(url, "k")).upsert_item(
            "2024-01-10", Note(id="a", title="T", body="B", created_at=1, updated_at=1)
        )
        items = NoteStore(SqlBackend(url, "k")).get_items("2024-01-10")
        assert [n.id for n in items] == ["a"]


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------


class TestRedisBackend:
    def test_read_uses_storage_key(self):
        backend, client = _make_redis_backend()
        client.get.return_value = "{}"
        assert backend.read() == "{}"
        client.get.assert_called_once_with("studyLogsV2")

    def test_read_failure_returns_none(self):
        """Redis errors on read degrade to an empty store."""
        backend, client = _make_redis_backend()
        client.get.side_effect = redis.ConnectionError("refused")
        assert backend.read() is None
        assert NoteStore(backend).get_items("2024-01-10") == []

    def test_write_and_clear(self):
        backend, client = _make_redis_backend()
        backend.write('{"a": 1}')
        client.set.assert_called_once_with("studyLogsV2", '{"a": 1}')
        backend.clear()
        client.delete.assert_called_once_with("studyLogsV2")

    def test_close(self):
        backend, client = _make_redis_backend()
        backend.close()
        client.close.assert_called_once()


# ---------------------------------------------------------------------------
# build_backend
# ---------------------------------------------------------------------------


class TestBuildBackend:
    def test_memory(self):
        assert isinstance(build_backend(Settings(storage_backend="memory")), MemoryBackend)

    def test_file(self, tmp_path: Path):
        backend = build_backend(Settings(storage_backend="file", storage_path=tmp_path / "x.json"))
        assert isinstance(backend, JsonFileBackend)
        assert backend.path == tmp_path / "x.json"

    def test_sql(self, tmp_path: Path):
        backend = build_backend(
            Settings(storage_backend="sql", database_url=f"sqlite:///{tmp_path / 'x.db'}")
        )
        assert isinstance(backend, SqlBackend)

    def test_redis(self):
        with patch("studylog.backends.redis.Redis.from_url", return_value=MagicMock()):
            backend = build_backend(Settings(storage_backend="redis"))
        assert isinstance(backend, RedisBackend)

    def test_unknown(self):
        settings = Settings.model_construct(storage_backend="tape")
        with pytest.raises(ValueError):
            build_backend(settings)
