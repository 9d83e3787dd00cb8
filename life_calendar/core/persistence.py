"""
Life Calendar — Persistence.

Keeps the calendar's data payload (birth date, life expectancy, eras,
events) in a KeyValueStore as a JSON string. The annotation index is never
stored; LifeCalendarState rebuilds it after every load.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Callable

from life_calendar.core.codec import ImportResult

if TYPE_CHECKING:
    from life_calendar.core.calendar_state import LifeCalendarState, StateChange
    from life_calendar.ports.store_port import KeyValueStore

logger = logging.getLogger(__name__)


def _resolve_key(key: str | None) -> str:
    if key is None:
        from life_calendar.config import settings
        key = settings.STORAGE_KEY
    return key


def save_state(
    state: LifeCalendarState,
    store: KeyValueStore,
    key: str | None = None,
) -> None:
    """Write the state's data payload under key (default: STORAGE_KEY)."""
    key = _resolve_key(key)
    store.set(key, json.dumps(state.export_data(), ensure_ascii=False))
    logger.debug("Calendar saved under '%s'", key)


def load_state(
    state: LifeCalendarState,
    store: KeyValueStore,
    key: str | None = None,
) -> ImportResult:
    """Hydrate the state from the store.

    A missing key is a success that leaves the state untouched. A corrupted
    payload is reported and also leaves the state untouched.
    """
    key = _resolve_key(key)
    raw = store.get(key)
    if raw is None:
        logger.debug("Nothing stored under '%s'", key)
        return ImportResult(success=True)

    result = state.load_data(raw)
    if result.success:
        logger.info("Calendar loaded from '%s'", key)
    else:
        logger.warning("Stored calendar under '%s' is invalid, ignoring it", key)
    return result


def forget_state(store: KeyValueStore, key: str | None = None) -> None:
    """Remove the stored payload."""
    store.remove(_resolve_key(key))


def attach_autosave(
    state: LifeCalendarState,
    store: KeyValueStore,
    key: str | None = None,
) -> Callable[[], None]:
    """Save after every change of the state; clearing removes the key.

    Returns the unsubscribe function.
    """
    key = _resolve_key(key)

    def _on_change(change: StateChange) -> None:
        if change.reason == "clear":
            forget_state(store, key)
        else:
            save_state(state, store, key)

    return state.subscribe(_on_change)
