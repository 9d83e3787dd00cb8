"""
Life Calendar — Calendar State.

Single owner of the profile (birth date, life expectancy), the era list
and the event list, plus the annotation index derived from them.

Every mutating command rebuilds the index before it returns, so a query
made right after a command always sees the new data. Interested parties
(a UI, the autosave hook) register with subscribe() instead of polling.

Two macro-states:
    Uninitialized: no birth date; get_week_data() always returns None.
    Initialized:   birth date set; the full query surface is live.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from life_calendar.core import codec
from life_calendar.core.annotation_index import (
    AnnotationIndex,
    IndexDiff,
    WeekAnnotations,
    build_annotation_index,
    diff_annotation_index,
)
from life_calendar.core.codec import ImportResult
from life_calendar.core.temporal import (
    is_current,
    is_past,
    position_of,
    to_day,
    total_weeks,
    week_index_of,
    week_indices_for_era,
    week_range,
)
from life_calendar.data.models import (
    DEFAULT_LIFE_EXPECTANCY,
    MAX_LIFE_EXPECTANCY,
    MIN_LIFE_EXPECTANCY,
    Era,
    Event,
    LifeSummary,
    WeekRecord,
)

if TYPE_CHECKING:
    from life_calendar.ports.clock_port import Clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateChange:
    """Delivered to subscribers after every effective mutation."""

    reason: str        # e.g. "add_era", "import", "clear"
    diff: IndexDiff


Listener = Callable[[StateChange], None]


def clamp_life_expectancy(years: int) -> int:
    return max(MIN_LIFE_EXPECTANCY, min(MAX_LIFE_EXPECTANCY, int(years)))


class LifeCalendarState:
    """The user's life calendar and its per-week annotation index."""

    def __init__(
        self,
        clock: Clock | None = None,
        life_expectancy: int = DEFAULT_LIFE_EXPECTANCY,
    ) -> None:
        if clock is None:
            from life_calendar.adapters.clock import SystemClock
            clock = SystemClock()

        self._clock = clock
        self._default_life_expectancy = clamp_life_expectancy(life_expectancy)
        self._birth_date: date | None = None
        self._life_expectancy = self._default_life_expectancy
        self._eras: dict[str, Era] = {}
        self._events: dict[str, Event] = {}
        self._index: AnnotationIndex = {}
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def birth_date(self) -> date | None:
        return self._birth_date

    @property
    def life_expectancy(self) -> int:
        return self._life_expectancy

    @property
    def eras(self) -> tuple[Era, ...]:
        return tuple(self._eras.values())

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events.values())

    @property
    def is_initialized(self) -> bool:
        return self._birth_date is not None

    @property
    def annotation_index(self) -> Mapping[int, WeekAnnotations]:
        """Read-only view of the current index."""
        return MappingProxyType(self._index)

    def get_era(self, era_id: str) -> Era | None:
        return self._eras.get(era_id)

    def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: StateChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as exc:
                logger.error("State listener failed after '%s': %s", change.reason, exc)

    def _rebuild(
        self,
        reason: str,
        eras: dict[str, Era] | None = None,
        events: dict[str, Event] | None = None,
    ) -> None:
        """Recompute the index from scratch and tell subscribers.

        Candidate collections are committed only once their index is built,
        so a bad entity leaves the state as it was.
        """
        eras = self._eras if eras is None else eras
        events = self._events if events is None else events
        index = build_annotation_index(
            self._birth_date, self._life_expectancy, eras.values(), events.values(),
        )
        old = self._index
        self._eras, self._events, self._index = eras, events, index
        self._notify(StateChange(reason=reason, diff=diff_annotation_index(old, index)))

    # ------------------------------------------------------------------
    # Profile commands
    # ------------------------------------------------------------------

    def set_birth_date(self, birth_date: date | datetime) -> None:
        """Set the birth date (time of day is dropped) and rebuild."""
        self._birth_date = to_day(birth_date)
        logger.info("Birth date set to %s", self._birth_date)
        self._rebuild("set_birth_date")

    def set_life_expectancy(self, years: int) -> None:
        """Set life expectancy, clamped to [50, 120] years, and rebuild."""
        clamped = clamp_life_expectancy(years)
        if clamped != years:
            logger.warning("Life expectancy %s clamped to %d", years, clamped)
        self._life_expectancy = clamped
        logger.info("Life expectancy set to %d years", clamped)
        self._rebuild("set_life_expectancy")

    # ------------------------------------------------------------------
    # Era commands
    # ------------------------------------------------------------------

    def add_era(self, era: Era) -> Era:
        """Append an era. Raises ValueError if the id is already taken."""
        if era.id in self._eras:
            raise ValueError(f"Era {era.id} already exists")
        self._rebuild("add_era", eras={**self._eras, era.id: era})
        logger.info("Era added: %s '%s' (%s..%s)", era.id, era.title, era.start_date, era.end_date or "ongoing")
        return era

    def update_era(self, era_id: str, **changes: Any) -> bool:
        """Replace some fields of an era, keeping its list position.

        Returns False (and changes nothing) when the id is unknown.
        """
        era = self._eras.get(era_id)
        if era is None:
            logger.debug("update_era: no era %s", era_id)
            return False
        self._rebuild("update_era", eras={**self._eras, era_id: _apply_changes(era, changes)})
        logger.info("Era updated: %s (%s)", era_id, ", ".join(sorted(changes)))
        return True

    def remove_era(self, era_id: str) -> bool:
        """Delete an era. Returns False when the id is unknown."""
        era = self._eras.pop(era_id, None)
        if era is None:
            logger.debug("remove_era: no era %s", era_id)
            return False
        logger.info("Era removed: %s '%s'", era_id, era.title)
        self._rebuild("remove_era")
        return True

    # ------------------------------------------------------------------
    # Event commands
    # ------------------------------------------------------------------

    def add_event(self, event: Event) -> Event:
        """Append an event. Raises ValueError if the id is already taken."""
        if event.id in self._events:
            raise ValueError(f"Event {event.id} already exists")
        self._rebuild("add_event", events={**self._events, event.id: event})
        logger.info("Event added: %s '%s' on %s", event.id, event.title, event.date)
        return event

    def update_event(self, event_id: str, **changes: Any) -> bool:
        """Replace some fields of an event. Returns False for an unknown id."""
        event = self._events.get(event_id)
        if event is None:
            logger.debug("update_event: no event %s", event_id)
            return False
        self._rebuild("update_event", events={**self._events, event_id: _apply_changes(event, changes)})
        logger.info("Event updated: %s (%s)", event_id, ", ".join(sorted(changes)))
        return True

    def remove_event(self, event_id: str) -> bool:
        """Delete an event. Returns False when the id is unknown."""
        event = self._events.pop(event_id, None)
        if event is None:
            logger.debug("remove_event: no event %s", event_id)
            return False
        logger.info("Event removed: %s '%s'", event_id, event.title)
        self._rebuild("remove_event")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def today(self) -> date:
        """The clock's current calendar date."""
        return to_day(self._clock.now())

    def get_total_weeks(self) -> int:
        return total_weeks(self._life_expectancy)

    def get_week_data(self, week_index: int) -> WeekRecord | None:
        """Describe one week of the grid.

        Returns None when no birth date is set or the index lies outside
        [0, total weeks). Absence means "no data", not an error.
        """
        if self._birth_date is None:
            return None
        if week_index < 0 or week_index >= self.get_total_weeks():
            return None

        position = position_of(week_index)
        rng = week_range(self._birth_date, week_index)
        now = self._clock.now()
        slot = self._index.get(week_index)

        return WeekRecord(
            index=week_index,
            year=position.year,
            week_of_year=position.week_of_year,
            start_date=rng.start,
            end_date=rng.end,
            is_past=is_past(rng.end, now),
            is_current_week=is_current(rng.start, rng.end, now),
            active_era_ids=tuple(slot.era_ids) if slot else (),
            event_ids=tuple(slot.event_ids) if slot else (),
        )

    def eras_in_week(self, week_index: int) -> list[Era]:
        """Eras active in a week, in era list order."""
        slot = self._index.get(week_index)
        if slot is None:
            return []
        return [self._eras[i] for i in slot.era_ids]

    def events_in_week(self, week_index: int) -> list[Event]:
        """Events touching a week, in event list order."""
        slot = self._index.get(week_index)
        if slot is None:
            return []
        return [self._events[i] for i in slot.event_ids]

    def events_by_date(self) -> list[Event]:
        """All events, earliest first. Ties keep list order."""
        return sorted(self._events.values(), key=lambda ev: ev.date)

    def era_weeks(self, era_id: str) -> list[int]:
        """Week indices an era covers, an ongoing era running until today.

        Clamped to the grid. Empty for an unknown id or no birth date.
        """
        era = self._eras.get(era_id)
        if era is None or self._birth_date is None:
            return []
        total = self.get_total_weeks()
        indices = week_indices_for_era(
            self._birth_date, era.start_date, era.end_date, self._clock.now(),
        )
        return [i for i in indices if i < total]

    def life_summary(self) -> LifeSummary:
        """Weeks lived and remaining, as shown above the grid."""
        total = self.get_total_weeks()
        if self._birth_date is None:
            return LifeSummary(
                total_weeks=total,
                weeks_lived=0,
                weeks_remaining=total,
                percent_lived=0.0,
                current_week_index=None,
            )

        now_index = week_index_of(self._birth_date, self._clock.now())
        lived = min(max(0, now_index), total)
        current = now_index if 0 <= now_index < total else None
        return LifeSummary(
            total_weeks=total,
            weeks_lived=lived,
            weeks_remaining=max(0, total - lived),
            percent_lived=round(lived / total * 100, 1),
            current_week_index=current,
        )

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_data(self) -> dict:
        """The bare data payload (no version envelope), as persisted."""
        return codec.dump_data(
            self._birth_date, self._life_expectancy, self.eras, self.events,
        )

    def export_snapshot(self) -> dict:
        """The versioned export document."""
        return codec.build_document(
            self._birth_date,
            self._life_expectancy,
            self.eras,
            self.events,
            exported_at=self._clock.now(),
        )

    def export_json(self, indent: int | None = 2) -> str:
        return codec.dumps_document(self.export_snapshot(), indent=indent)

    def import_snapshot(self, document: dict | str) -> ImportResult:
        """Validate a document and, only if it is fully valid, replace all data.

        On failure the state is left exactly as it was.
        """
        if isinstance(document, str):
            result = codec.parse_json(document)
        else:
            result = codec.parse_document(document)
        if result.success:
            self.apply_data(result.data, reason="import")
        return result

    def load_data(self, payload: dict | str) -> ImportResult:
        """Like import_snapshot, for a bare data payload from storage."""
        result = codec.parse_data(payload)
        if result.success:
            self.apply_data(result.data, reason="load")
        return result

    def apply_data(self, data: codec.CalendarData, reason: str = "import") -> None:
        """Replace profile and collections with already-validated data."""
        self._birth_date = data.birth_date
        self._life_expectancy = clamp_life_expectancy(data.life_expectancy)
        self._eras = {era.id: era for era in data.eras}
        self._events = {event.id: event for event in data.events}
        logger.info(
            "Calendar replaced (%s): birth date %s, %d eras, %d events",
            reason, self._birth_date, len(self._eras), len(self._events),
        )
        self._rebuild(reason)

    def clear(self) -> None:
        """Forget everything and return to the Uninitialized state."""
        self._birth_date = None
        self._life_expectancy = self._default_life_expectancy
        self._eras = {}
        self._events = {}
        logger.info("Calendar cleared")
        self._rebuild("clear")

    def __repr__(self) -> str:
        return (
            f"<LifeCalendarState(birth_date={self._birth_date}, "
            f"life_expectancy={self._life_expectancy}, "
            f"eras={len(self._eras)}, events={len(self._events)})>"
        )


def _apply_changes(item: Any, changes: dict[str, Any]) -> Any:
    if "id" in changes and changes["id"] != item.id:
        raise ValueError("The id of an era or event cannot be changed")
    return dataclasses.replace(item, **changes)
