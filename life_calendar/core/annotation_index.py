"""
Life Calendar — Annotation Index Builder.

Maps eras and events onto the weeks they touch, so that looking up the
annotations of any single cell is a dict lookup. The index is always
rebuilt in full: O(eras * weeks + events), a few hundred thousand
comparisons for a realistic profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from life_calendar.core.temporal import (
    era_active_in_week,
    total_weeks,
    week_index_of,
    week_range,
)
from life_calendar.data.models import Era, Event

logger = logging.getLogger(__name__)


@dataclass
class WeekAnnotations:
    """Ids annotating one week, in era/event list order."""

    era_ids: list[str] = field(default_factory=list)
    event_ids: list[str] = field(default_factory=list)

    def add_era(self, era_id: str) -> None:
        if era_id not in self.era_ids:
            self.era_ids.append(era_id)

    def add_event(self, event_id: str) -> None:
        if event_id not in self.event_ids:
            self.event_ids.append(event_id)


AnnotationIndex = dict[int, WeekAnnotations]


@dataclass
class IndexDiff:
    """Per-week ids that appeared or disappeared between two indexes."""

    added_eras: dict[int, set[str]] = field(default_factory=dict)
    removed_eras: dict[int, set[str]] = field(default_factory=dict)
    added_events: dict[int, set[str]] = field(default_factory=dict)
    removed_events: dict[int, set[str]] = field(default_factory=dict)

    @property
    def changed_weeks(self) -> set[int]:
        return (
            set(self.added_eras) | set(self.removed_eras)
            | set(self.added_events) | set(self.removed_events)
        )

    @property
    def is_empty(self) -> bool:
        return not self.changed_weeks


def _slot(index: AnnotationIndex, week: int) -> WeekAnnotations:
    slot = index.get(week)
    if slot is None:
        slot = index[week] = WeekAnnotations()
    return slot


def build_annotation_index(
    birth_date: date | None,
    life_expectancy: int,
    eras: Iterable[Era],
    events: Iterable[Event],
) -> AnnotationIndex:
    """Build the sparse week -> annotations mapping.

    Args:
        birth_date: Anchor of week 0. None yields an empty index.
        life_expectancy: Grid height in years; the grid has 52 weeks per year.
        eras: Eras in list order. Each era is tested against every week.
        events: Events in list order. Point events land in one week, period
            events in every week of [date, end_date].

    Returns:
        Dict keyed by week index. Weeks without annotations have no entry.
        Annotations outside the grid are dropped, never raised.
    """
    index: AnnotationIndex = {}
    if birth_date is None:
        return index

    total = total_weeks(life_expectancy)
    ranges = [week_range(birth_date, w) for w in range(total)]

    era_count = 0
    for era in eras:
        era_count += 1
        for week, rng in enumerate(ranges):
            if era_active_in_week(era.start_date, era.end_date, rng.start, rng.end):
                _slot(index, week).add_era(era.id)

    event_count = 0
    for event in events:
        event_count += 1
        if event.end_date is None:
            week = week_index_of(birth_date, event.date)
            if 0 <= week < total:
                _slot(index, week).add_event(event.id)
            else:
                logger.debug("Event %s (%s) falls outside the grid", event.id, event.date)
            continue

        start_index = max(0, week_index_of(birth_date, event.date))
        end_index = min(total - 1, week_index_of(birth_date, event.end_date))
        if end_index < start_index:
            logger.debug("Event %s contributes no weeks (%s..%s)", event.id, event.date, event.end_date)
            continue
        for week in range(start_index, end_index + 1):
            _slot(index, week).add_event(event.id)

    logger.debug(
        "Annotation index rebuilt: %d eras, %d events over %d weeks -> %d annotated weeks",
        era_count, event_count, total, len(index),
    )
    return index


def diff_annotation_index(
    old: Mapping[int, WeekAnnotations],
    new: Mapping[int, WeekAnnotations],
) -> IndexDiff:
    """Compare two indexes week by week.

    Only weeks whose id sets differ appear in the result. Reordering ids
    within a week is not a change.
    """
    diff = IndexDiff()
    empty = WeekAnnotations()
    for week in set(old) | set(new):
        before = old.get(week, empty)
        after = new.get(week, empty)

        added = set(after.era_ids) - set(before.era_ids)
        removed = set(before.era_ids) - set(after.era_ids)
        if added:
            diff.added_eras[week] = added
        if removed:
            diff.removed_eras[week] = removed

        added = set(after.event_ids) - set(before.event_ids)
        removed = set(before.event_ids) - set(after.event_ids)
        if added:
            diff.added_events[week] = added
        if removed:
            diff.removed_events[week] = removed
    return diff
