"""Clock adapters — implement the Clock port."""

from __future__ import annotations

from datetime import date, datetime


def _as_datetime(moment: date | datetime) -> datetime:
    if isinstance(moment, datetime):
        return moment
    return datetime(moment.year, moment.month, moment.day)


class SystemClock:
    """Reads the local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Always returns the same instant. A plain date means its midnight."""

    def __init__(self, moment: date | datetime) -> None:
        self._moment = _as_datetime(moment)

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: date | datetime) -> None:
        """Move the clock, e.g. to simulate the passing of a week."""
        self._moment = _as_datetime(moment)
