"""Clock port — abstract source of "now".

Past/current classification reads time only through this protocol, so
tests can pin the date.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Abstract clock used by LifeCalendarState."""

    def now(self) -> datetime: ...
