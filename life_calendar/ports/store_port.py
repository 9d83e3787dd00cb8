"""Store port — abstract key-value text store.

Persistence depends on this protocol, never on a specific backend.
Only the calendar's data payload is stored; the week index never is.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Abstract string store used by the persistence module."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...
