"""
Life Calendar — Import/Export Codec.

Converts the calendar to and from its portable JSON document:

{
    "version": 1,
    "exportedAt": "2026-10-18T09:30:00",
    "data": {
        "birthDate": "2000-01-01",
        "lifeExpectancy": 80,
        "eras": [{"id": "...", "title": "School", "startDate": "2006-09-01",
                  "endDate": "2018-06-30", "color": "#3b82f6", "category": "education"}],
        "events": [{"id": "...", "date": "2024-05-04", "title": "Wedding"}]
    }
}

String <-> date coercion happens here and nowhere else: the rest of the
package only ever sees typed Era/Event objects. Parsing never raises; every
problem is collected into an ImportResult as a (path, message) pair.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Annotated, Any, Iterable, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from life_calendar.data.models import (
    DEFAULT_LIFE_EXPECTANCY,
    MAX_LIFE_EXPECTANCY,
    MIN_LIFE_EXPECTANCY,
    Era,
    EraCategory,
    Event,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{3}){1,2}$")


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _parse_timestamp(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _coerce_date(value: Any) -> date:
    """Accept a date, a datetime, or an ISO date/timestamp string.

    Timestamps with an offset are converted to local time before the time
    of day is dropped.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        try:
            if len(value.strip()) == 10:
                return date.fromisoformat(value.strip())
            moment = _parse_timestamp(value)
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}") from None
    else:
        raise ValueError("Expected an ISO-8601 date string")

    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def _coerce_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return _parse_timestamp(value)
        except ValueError:
            raise ValueError(f"Invalid timestamp: {value!r}") from None
    raise ValueError("Expected an ISO-8601 timestamp string")


CalendarDate = Annotated[date, BeforeValidator(_coerce_date)]
Timestamp = Annotated[datetime, BeforeValidator(_coerce_timestamp)]


def _check_uuid(value: str) -> str:
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise ValueError("Must be a valid UUID") from None
    return value


def _check_title(value: str) -> str:
    if not value.strip():
        raise ValueError("Title is required")
    return value


def is_hex_color(value: str) -> bool:
    """True for "#RGB" or "#RRGGBB"."""
    return bool(_HEX_COLOR_RE.match(value))


def _check_color(value: str) -> str:
    if not is_hex_color(value):
        raise ValueError("Must be a valid hex color")
    return value


UuidString = Annotated[str, AfterValidator(_check_uuid)]
Title = Annotated[str, AfterValidator(_check_title)]
HexColor = Annotated[str, AfterValidator(_check_color)]


# ---------------------------------------------------------------------------
# Document schemas
# ---------------------------------------------------------------------------


class _Schema(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class EraSchema(_Schema):
    id: UuidString
    title: Title
    start_date: CalendarDate
    end_date: CalendarDate | None = None
    color: HexColor
    category: EraCategory

    def to_era(self) -> Era:
        return Era(
            id=self.id,
            title=self.title,
            start_date=self.start_date,
            end_date=self.end_date,
            color=self.color,
            category=self.category,
        )

    @classmethod
    def from_era(cls, era: Era) -> EraSchema:
        return cls.model_construct(
            id=era.id,
            title=era.title,
            start_date=era.start_date,
            end_date=era.end_date,
            color=era.color,
            category=era.category,
        )


class EventSchema(_Schema):
    id: UuidString
    date: CalendarDate
    end_date: CalendarDate | None = None
    title: Title
    description: str | None = None
    color: HexColor | None = None

    def to_event(self) -> Event:
        return Event(
            id=self.id,
            date=self.date,
            end_date=self.end_date,
            title=self.title,
            description=self.description,
            color=self.color,
        )

    @classmethod
    def from_event(cls, event: Event) -> EventSchema:
        return cls.model_construct(
            id=event.id,
            date=event.date,
            end_date=event.end_date,
            title=event.title,
            description=event.description,
            color=event.color,
        )


class CalendarDataSchema(_Schema):
    birth_date: CalendarDate | None = None
    life_expectancy: int = Field(
        default=DEFAULT_LIFE_EXPECTANCY,
        strict=True,
        ge=MIN_LIFE_EXPECTANCY,
        le=MAX_LIFE_EXPECTANCY,
    )
    eras: list[EraSchema] = Field(default_factory=list)
    events: list[EventSchema] = Field(default_factory=list)


class ExportDocument(_Schema):
    version: Literal[1]
    exported_at: Timestamp
    data: CalendarDataSchema


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationIssue:
    """One violation found while importing: where, and what is wrong."""

    path: str       # e.g. "data.eras.0.color"
    message: str


@dataclass
class CalendarData:
    """A validated, typed calendar payload ready to be applied."""

    birth_date: date | None
    life_expectancy: int
    eras: list[Era] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)


@dataclass
class ImportResult:
    success: bool
    data: CalendarData | None = None
    errors: list[ValidationIssue] = field(default_factory=list)

    def error_message(self) -> str:
        """Human-readable summary, one "path: message" line per issue."""
        if self.success:
            return ""
        lines = [f"{issue.path}: {issue.message}" for issue in self.errors]
        return "Validation failed:\n" + "\n".join(lines)


def _fail(errors: list[ValidationIssue]) -> ImportResult:
    logger.warning(
        "Import rejected with %d issue(s): %s",
        len(errors), "; ".join(f"{e.path}: {e.message}" for e in errors),
    )
    return ImportResult(success=False, errors=errors)


def _issues_from(exc: ValidationError, prefix: tuple = ()) -> list[ValidationIssue]:
    issues = []
    for err in exc.errors():
        loc = prefix + tuple(err["loc"])
        path = ".".join(str(part) for part in loc) or "$"
        message = err["msg"].removeprefix("Value error, ")
        issues.append(ValidationIssue(path=path, message=message))
    return issues


def _duplicate_id_issues(data: CalendarDataSchema, prefix: str) -> list[ValidationIssue]:
    issues = []
    for name, items in (("eras", data.eras), ("events", data.events)):
        seen: set[str] = set()
        for i, item in enumerate(items):
            if item.id in seen:
                issues.append(ValidationIssue(
                    path=f"{prefix}{name}.{i}.id", message=f"Duplicate id {item.id}",
                ))
            seen.add(item.id)
    return issues


def _to_calendar_data(data: CalendarDataSchema) -> CalendarData:
    return CalendarData(
        birth_date=data.birth_date,
        life_expectancy=data.life_expectancy,
        eras=[e.to_era() for e in data.eras],
        events=[e.to_event() for e in data.events],
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_document(document: Any) -> ImportResult:
    """Validate an exported document (already decoded from JSON).

    The version is checked first; a document of another version is not
    inspected further.
    """
    if not isinstance(document, dict):
        return _fail([ValidationIssue(path="$", message="Document must be a JSON object")])

    if document.get("version") != EXPORT_VERSION or isinstance(document.get("version"), bool):
        return _fail([ValidationIssue(
            path="version", message=f"Unsupported version {document.get('version')!r}, expected {EXPORT_VERSION}",
        )])

    try:
        parsed = ExportDocument.model_validate(document)
    except ValidationError as exc:
        return _fail(_issues_from(exc))

    duplicates = _duplicate_id_issues(parsed.data, prefix="data.")
    if duplicates:
        return _fail(duplicates)

    return ImportResult(success=True, data=_to_calendar_data(parsed.data))


def parse_json(text: str) -> ImportResult:
    """Decode and validate an exported JSON document."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Import rejected: invalid JSON (%s)", exc)
        return ImportResult(
            success=False,
            errors=[ValidationIssue(path="$", message="Invalid JSON format. Please check the file contents.")],
        )
    return parse_document(document)


def parse_data(payload: Any) -> ImportResult:
    """Validate a bare data payload, as kept in the key-value store."""
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            return _fail([ValidationIssue(path="$", message="Stored data is not valid JSON")])

    try:
        parsed = CalendarDataSchema.model_validate(payload)
    except ValidationError as exc:
        return _fail(_issues_from(exc))

    duplicates = _duplicate_id_issues(parsed, prefix="")
    if duplicates:
        return _fail(duplicates)

    return ImportResult(success=True, data=_to_calendar_data(parsed))


# ---------------------------------------------------------------------------
# Exporting
# ---------------------------------------------------------------------------


def dump_data(
    birth_date: date | None,
    life_expectancy: int,
    eras: Iterable[Era],
    events: Iterable[Event],
) -> dict:
    """Serialize the calendar payload to JSON-compatible primitives.

    Values are written as they are held; entry-time validation belongs to
    the caller, so nothing is rejected here.
    """
    data = CalendarDataSchema.model_construct(
        birth_date=birth_date,
        life_expectancy=life_expectancy,
        eras=[EraSchema.from_era(e) for e in eras],
        events=[EventSchema.from_event(e) for e in events],
    )
    dumped = data.model_dump(mode="json", by_alias=True, exclude_none=True)
    # Keep the key even for an uninitialized calendar
    dumped.setdefault("birthDate", None)
    return dumped


def build_document(
    birth_date: date | None,
    life_expectancy: int,
    eras: Iterable[Era],
    events: Iterable[Event],
    exported_at: datetime,
) -> dict:
    """Build the versioned export document."""
    return {
        "version": EXPORT_VERSION,
        "exportedAt": exported_at.isoformat(),
        "data": dump_data(birth_date, life_expectancy, eras, events),
    }


def dumps_document(document: dict, indent: int | None = 2) -> str:
    """Format a document as JSON text, ready to write to a file."""
    return json.dumps(document, indent=indent, ensure_ascii=False)


def export_filename(today: date | datetime) -> str:
    """Default file name for an export, e.g. life-calendar-2026-10-18.json."""
    if isinstance(today, datetime):
        today = today.date()
    return f"life-calendar-{today.isoformat()}.json"
