"""In-memory key-value store — implements KeyValueStore.

Nothing is written to disk; useful for tests and throwaway sessions.
"""

from __future__ import annotations


class InMemoryKeyValueStore:
    """Dict-backed implementation of KeyValueStore."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
