"""
Life Calendar — Command line interface.

Works on the calendar persisted in the configured store; every command
loads it, applies one change or query, and saves it back. When the stored
calendar cannot be read, only `import` and `clear` run, since both replace it.

    python main.py init --birth-date 1990-04-12
    python main.py add-era --title "University" --start 2008-09-01 --end 2012-06-30 \
        --color "#3b82f6" --category education
    python main.py week 1200
    python main.py export
"""

from __future__ import annotations

import argparse
import logging
import sqlite3
import sys
from datetime import date
from pathlib import Path

from life_calendar.adapters.store_factory import create_store
from life_calendar.config import settings
from life_calendar.core.calendar_state import LifeCalendarState, StateChange
from life_calendar.core.codec import export_filename, is_hex_color
from life_calendar.core.persistence import forget_state, load_state, save_state
from life_calendar.data.models import Era, EraCategory, Event
from life_calendar.ports.store_port import KeyValueStore

logger = logging.getLogger(__name__)

# Commands that replace the whole calendar, so they run even if loading failed
_REPLACING_COMMANDS = ("import", "clear")


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}") from None


def _title(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("title is required")
    return value


def _color(value: str) -> str:
    if not is_hex_color(value):
        raise argparse.ArgumentTypeError(f"not a hex color: {value!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="life-calendar",
        description="Your life as a grid of weeks: eras, events and where you are now.",
    )
    ap.add_argument("--db", default=None, help="SQLite file (default: DATABASE_PATH)")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Set the birth date (and life expectancy)")
    p.add_argument("--birth-date", type=_iso_date, required=True)
    p.add_argument("--life-expectancy", type=int, default=None, help="Years, 50-120")

    p = sub.add_parser("add-era", help="Add a life chapter")
    p.add_argument("--title", type=_title, required=True)
    p.add_argument("--start", type=_iso_date, required=True)
    p.add_argument("--end", type=_iso_date, default=None, help="Omit for an ongoing era")
    p.add_argument("--color", type=_color, default="#6b7280")
    p.add_argument("--category", choices=[c.value for c in EraCategory], default="other")

    p = sub.add_parser("add-event", help="Add an event or a period")
    p.add_argument("--title", type=_title, required=True)
    p.add_argument("--date", type=_iso_date, required=True)
    p.add_argument("--end", type=_iso_date, default=None, help="Makes it a period event")
    p.add_argument("--description", default=None)
    p.add_argument("--color", type=_color, default=None)

    p = sub.add_parser("remove", help="Remove an era or event by id")
    p.add_argument("id")

    p = sub.add_parser("week", help="Show one week of the grid")
    p.add_argument("index", type=int)

    sub.add_parser("summary", help="Weeks lived and remaining")

    p = sub.add_parser("export", help="Write the calendar to a JSON file")
    p.add_argument("file", nargs="?", default=None, help="Default: life-calendar-<today>.json")

    p = sub.add_parser("import", help="Replace the calendar with a JSON export")
    p.add_argument("file")

    sub.add_parser("clear", help="Delete all calendar data")
    return ap


def _print_week(state: LifeCalendarState, index: int) -> int:
    week = state.get_week_data(index)
    if week is None:
        print(f"No week {index} (grid has {state.get_total_weeks()} weeks, birth date set: {state.is_initialized})")
        return 1

    status = "current" if week.is_current_week else "past" if week.is_past else "future"
    print(f"Week {week.index}: year {week.year}, week {week.week_of_year + 1} ({status})")
    print(f"  {week.start_date.isoformat()} .. {week.end_date.isoformat()}")
    for era in state.eras_in_week(index):
        print(f"  era:   {era.title} [{era.category.value}] {era.id}")
    for event in state.events_in_week(index):
        print(f"  event: {event.title} ({event.date.isoformat()}) {event.id}")
    return 0


def _run(args: argparse.Namespace, state: LifeCalendarState) -> int:
    if args.command == "init":
        state.set_birth_date(args.birth_date)
        if args.life_expectancy is not None:
            state.set_life_expectancy(args.life_expectancy)
        print(f"Birth date {state.birth_date}, {state.get_total_weeks()} weeks")
        return 0

    if args.command == "add-era":
        era = state.add_era(Era(
            title=args.title,
            start_date=args.start,
            end_date=args.end,
            color=args.color,
            category=EraCategory(args.category),
        ))
        print(era.id)
        return 0

    if args.command == "add-event":
        event = state.add_event(Event(
            title=args.title,
            date=args.date,
            end_date=args.end,
            description=args.description,
            color=args.color,
        ))
        print(event.id)
        return 0

    if args.command == "remove":
        if state.remove_era(args.id) or state.remove_event(args.id):
            print(f"Removed {args.id}")
            return 0
        print(f"Nothing with id {args.id}")
        return 1

    if args.command == "week":
        return _print_week(state, args.index)

    if args.command == "summary":
        s = state.life_summary()
        print(f"{s.weeks_lived:,} weeks lived, {s.weeks_remaining:,} remaining ({s.percent_lived}% of {s.total_weeks:,})")
        return 0

    if args.command == "export":
        path = Path(args.file or export_filename(state.today()))
        path.write_text(state.export_json(), encoding="utf-8")
        print(f"Exported to {path}")
        return 0

    if args.command == "import":
        text = Path(args.file).read_text(encoding="utf-8")
        result = state.import_snapshot(text)
        if not result.success:
            print(result.error_message(), file=sys.stderr)
            return 1
        print(f"Imported {len(state.eras)} eras and {len(state.events)} events")
        return 0

    if args.command == "clear":
        state.clear()
        print("Calendar cleared")
        return 0

    raise ValueError(f"Unknown command: {args.command!r}")


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _persist(state: LifeCalendarState, store: KeyValueStore, changes: list[StateChange]) -> None:
    """Write the outcome of a command; nothing is written when nothing changed."""
    if not changes:
        return
    if changes[-1].reason == "clear":
        forget_state(store)
    else:
        save_state(state, store)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging()

    state = LifeCalendarState(life_expectancy=settings.DEFAULT_LIFE_EXPECTANCY)
    changes: list[StateChange] = []
    try:
        store = create_store(db_path=args.db)
        loaded = load_state(state, store)
        if not loaded.success:
            print(loaded.error_message(), file=sys.stderr)
            if args.command not in _REPLACING_COMMANDS:
                print("Run 'import FILE' or 'clear' to replace the stored calendar", file=sys.stderr)
                return 1

        state.subscribe(changes.append)
        code = _run(args, state)
        _persist(state, store, changes)
        return code
    except OSError as exc:
        logger.error("File error during '%s': %s", args.command, exc)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except sqlite3.Error as exc:
        logger.error("Storage error during '%s': %s", args.command, exc)
        print(f"ERROR: storage failed: {exc}", file=sys.stderr)
        return 1
