import argparse
import json
import logging
import sys
from datetime import date
from typing import Optional, Sequence

from rumb.core.config import settings
from rumb.core.database import SessionLocal, init_db
from rumb.core.resources import get_region_graph, get_rule_catalog
from rumb.engine import EngineError
from rumb.engine.calendar import is_week_key, local_now, normalize_day_key
from rumb.schemas import BatchResult, LevelType, ScheduleMode
from rumb.services import ScheduleServices
from rumb.services.schedule_services import summarize
from rumb.utils.logger_config import configure_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rumb-generate",
        description="Create the daily and weekly Rumb levels, or backfill missing ones.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="mode", required=True)

    daily = commands.add_parser(ScheduleMode.DAILY.value, help="Ensure today's level and the previous days")
    daily.add_argument("--force", action="store_true", help="Ignore the run ledger")
    weekly = commands.add_parser(ScheduleMode.WEEKLY.value, help="Ensure this week's level and the previous weeks")
    weekly.add_argument("--force", action="store_true", help="Ignore the run ledger")

    backfill_range = commands.add_parser(ScheduleMode.BACKFILL_RANGE.value, help="Fill every day and week of a range")
    backfill_range.add_argument("start", type=date.fromisoformat, help="First day, YYYY-MM-DD")
    backfill_range.add_argument("end", type=date.fromisoformat, help="Last day, YYYY-MM-DD")
    backfill_range.add_argument("--no-weekly", action="store_true", help="Only daily levels")

    backfill_dates = commands.add_parser(ScheduleMode.BACKFILL_DATES.value, help="Fill explicit days")
    backfill_dates.add_argument("dates", nargs="+", help="Days, YYYY-MM-DD")

    preview = commands.add_parser("preview", help="Print the level of a day or week without storing it")
    preview.add_argument("key", help="YYYY-MM-DD or YYYY-Www")
    return parser


def _print_batch(label: str, batch: Optional[BatchResult]) -> None:
    if batch is None:
        return
    if batch.current is not None:
        current = batch.current
        print(f"{label}: " + (f"created {current.level_id}" if current.created else current.reason))
    for line in summarize(batch.results):
        logger.debug(line)
    if batch.created_keys:
        print(f"{label} backfill: {batch.summary}")


def _preview(services: ScheduleServices, key: str) -> int:
    if is_week_key(key):
        level_type = LevelType.WEEKLY
    else:
        key = normalize_day_key(key)
        if not key:
            print("Give a day (YYYY-MM-DD) or an ISO week (YYYY-Www).", file=sys.stderr)
            return 1
        level_type = LevelType.DAILY

    level = services.preview_level(level_type, key)
    print(json.dumps({"key": key, **level.to_dict()}, ensure_ascii=False, indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    # stdout carries the command's output
    configure_logging(args.log_level, stream=sys.stderr)

    try:
        graph = get_region_graph()
        catalog = get_rule_catalog()
    except EngineError as e:
        print(f"Cannot load game data: {e}", file=sys.stderr)
        return 1

    init_db()
    db = SessionLocal()
    try:
        services = ScheduleServices(db, graph, catalog)
        if args.mode == "preview":
            return _preview(services, args.key)
        mode = ScheduleMode(args.mode)

        if mode in (ScheduleMode.DAILY, ScheduleMode.WEEKLY):
            response = services.run(mode=mode, now=local_now(settings.TIMEZONE), force=args.force)
            _print_batch("daily", response.daily)
            _print_batch("weekly", response.weekly)
        elif mode == ScheduleMode.BACKFILL_RANGE:
            if args.end < args.start:
                print("END is before START.", file=sys.stderr)
                return 1
            response = services.backfill_range(args.start, args.end, include_weekly=not args.no_weekly)
            print(f"daily backfill {args.start}..{args.end}: {response.daily.summary}")
            if response.weekly is not None:
                print(f"weekly backfill {args.start}..{args.end}: {response.weekly.summary}")
        else:
            try:
                batch = services.backfill_dates(args.dates)
            except ValueError as e:
                print(str(e), file=sys.stderr)
                return 1
            for line in summarize(batch.results):
                print(f"daily {line}")
            print(f"daily backfill: {batch.summary}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
