"""
Life Calendar — Data Models.

Eras and events are the only things a user annotates the grid with.
They are owned by LifeCalendarState; week records are derived on demand
and never stored.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

MIN_LIFE_EXPECTANCY = 50
MAX_LIFE_EXPECTANCY = 120
DEFAULT_LIFE_EXPECTANCY = 80


def new_id() -> str:
    """Return a fresh UUID string for an era or event."""
    return str(uuid.uuid4())


class EraCategory(Enum):
    WORK = "work"
    EDUCATION = "education"
    LOCATION = "location"
    RELATIONSHIP = "relationship"
    HEALTH = "health"
    OTHER = "other"


@dataclass(frozen=True)
class Era:
    """A named range of life, e.g. "High School" or "Living in London".

    Eras may overlap (living somewhere while working somewhere).
    An era without end_date is ongoing.
    """

    title: str
    start_date: date
    color: str                        # "#RGB" or "#RRGGBB"
    category: EraCategory
    end_date: date | None = None
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Event:
    """A single occurrence (point event) or a period (date..end_date)."""

    title: str
    date: date
    end_date: date | None = None      # None = point event, single week
    description: str | None = None
    color: str | None = None
    id: str = field(default_factory=new_id)

    @property
    def is_period(self) -> bool:
        return self.end_date is not None


@dataclass(frozen=True)
class WeekRecord:
    """Everything known about one cell of the grid."""

    index: int
    year: int                         # row, i.e. age in life-years
    week_of_year: int                 # column, 0-51
    start_date: date
    end_date: date
    is_past: bool
    is_current_week: bool
    active_era_ids: tuple[str, ...] = ()
    event_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class LifeSummary:
    """Headline statistics of the calendar."""

    total_weeks: int
    weeks_lived: int
    weeks_remaining: int
    percent_lived: float
    current_week_index: int | None
