"""Store adapter factory — creates the right store based on config."""

from __future__ import annotations

from life_calendar.config import settings
from life_calendar.ports.store_port import KeyValueStore


def create_store(db_path: str | None = None) -> KeyValueStore:
    """Return the key-value store matching the STORAGE_BACKEND setting.

    Args:
        db_path: Overrides DATABASE_PATH for the sqlite backend.
    """
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "sqlite":
        from life_calendar.adapters.sqlite_store import SQLiteKeyValueStore

        return SQLiteKeyValueStore(db_path=db_path)

    if backend == "memory":
        from life_calendar.adapters.memory_store import InMemoryKeyValueStore

        return InMemoryKeyValueStore()

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")
