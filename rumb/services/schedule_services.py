import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from rumb import models
from rumb.core.config import Settings, settings as default_settings
from rumb.engine import GeneratedLevel, LevelData, RegionGraph, RuleDefinition, generate_level
from rumb.engine.calendar import (
    day_key,
    day_range,
    days_between,
    is_in_cron_window,
    local_now,
    normalize_day_key,
    week_key,
    week_range,
    weeks_between,
)
from rumb.engine.difficulty import get_difficulty, rule_pool
from rumb.engine.history import RULE_HISTORY_LIMIT
from rumb.schemas import (
    ALREADY_EXISTS,
    ALREADY_RAN,
    OUTSIDE_WINDOW,
    BackfillResponse,
    BatchResult,
    CronResponse,
    EnsureResult,
    LevelType,
    ScheduleMode,
)

logger = logging.getLogger(__name__)


class ScheduleServices:
    """ Makes sure a level exists for every day and week it is asked for"""

    def __init__(self, db, graph: RegionGraph, catalog: Sequence[RuleDefinition], config: Settings = default_settings):
        self.db = db
        self.graph = graph
        self.catalog = catalog
        self.config = config
        self.pool = rule_pool(catalog, get_difficulty(config.DIFFICULTY_ID), fixed_cadence=True)

    def _min_internal(self, level_type: LevelType) -> int:
        if level_type == LevelType.DAILY:
            return self.config.DAILY_MIN_INTERNAL
        return self.config.WEEKLY_MIN_INTERNAL

    # rule history
    def recent_rule_ids(self, level_type: LevelType) -> List[str]:
        """Last rule ids issued for a cadence, oldest first"""
        rows = (
            self.db.query(models.RuleHistoryEntry.rule_id)
            .filter(models.RuleHistoryEntry.cadence == LevelType(level_type).value)
            .order_by(models.RuleHistoryEntry.id.desc())
            .limit(RULE_HISTORY_LIMIT)
            .all()
        )
        return [row.rule_id for row in reversed(rows)]

    # calendar lookups
    def existing_keys(self, level_type: LevelType, keys: Iterable[str]) -> Set[str]:
        """One bulk lookup for the keys that already have a level"""
        keys = list(keys)
        if not keys:
            return set()
        if LevelType(level_type) == LevelType.DAILY:
            column = models.CalendarDaily.date
        else:
            column = models.CalendarWeekly.week_key
        rows = self.db.query(column).filter(column.in_(keys)).all()
        return {row[0] for row in rows}

    def level_exists(self, level_type: LevelType, key: str) -> bool:
        return key in self.existing_keys(level_type, [key])

    # level creation
    def ensure_level(self, level_type: LevelType, key: str) -> EnsureResult:
        """Create the level for key unless one exists"""
        level_type = LevelType(level_type)
        try:
            if self.level_exists(level_type, key):
                return EnsureResult(created=False, reason=ALREADY_EXISTS)
        except SQLAlchemyError as e:
            logger.error("Calendar lookup failed for %s %s: %s", level_type.value, key, e)
            return EnsureResult(created=False, reason=str(e))
        return self._create_level(level_type, key)

    def generate(self, level_type: LevelType, key: str) -> GeneratedLevel:
        """Level the scheduler would store for key given the current rule history"""
        level_type = LevelType(level_type)
        recent = self.recent_rule_ids(level_type) if self.config.RULE_HISTORY_ENABLED else None
        return generate_level(
            cadence_key=key,
            graph=self.graph,
            pool=self.pool,
            difficulty_id=self.config.DIFFICULTY_ID,
            min_internal=self._min_internal(level_type),
            recent_rule_ids=recent,
        )

    def preview_level(self, level_type: LevelType, key: str) -> LevelData:
        """Stored level for key, or the one the next run would create"""
        level_type = LevelType(level_type)
        if level_type == LevelType.DAILY:
            row = self.db.query(models.CalendarDaily).filter(models.CalendarDaily.date == key).first()
        else:
            row = self.db.query(models.CalendarWeekly).filter(models.CalendarWeekly.week_key == key).first()
        if row is None:
            return self.generate(level_type, key).level
        level = row.level
        return LevelData(
            start_id=level.start_id,
            target_id=level.target_id,
            shortest_path=list(level.shortest_path),
            rule_id=level.rule_id,
            avoid_ids=level.avoid_ids,
            must_pass_ids=level.must_pass_ids,
        )

    def _create_level(self, level_type: LevelType, key: str) -> EnsureResult:
        try:
            generated = self.generate(level_type, key)
            level_data = generated.level

            level = models.Level(
                level_type=level_type.value,
                date=key if level_type == LevelType.DAILY else None,
                week_key=key if level_type == LevelType.WEEKLY else None,
                difficulty_id=self.config.DIFFICULTY_ID,
                rule_id=level_data.rule_id,
                start_id=level_data.start_id,
                target_id=level_data.target_id,
                shortest_path=level_data.shortest_path,
                avoid_ids=level_data.avoid_ids,
                must_pass_ids=level_data.must_pass_ids,
            )
            self.db.add(level)
            self.db.flush()

            # the calendar primary key decides who wins a concurrent insert
            if level_type == LevelType.DAILY:
                self.db.add(models.CalendarDaily(date=key, level_id=level.id))
            else:
                self.db.add(models.CalendarWeekly(week_key=key, level_id=level.id))
            if generated.history_rule_id:
                self.db.add(models.RuleHistoryEntry(
                    cadence=level_type.value,
                    rule_id=generated.history_rule_id,
                    cadence_key=key,
                ))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Level %s %s was created by another run", level_type.value, key)
            return EnsureResult(created=False, reason=ALREADY_EXISTS)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Could not store level %s %s: %s", level_type.value, key, e)
            return EnsureResult(created=False, reason=str(e))

        logger.info("Created %s level %s for %s (rule %s)", level_type.value, level.id, key, level.rule_id)
        return EnsureResult(created=True, level_id=level.id)

    def ensure_keys(self, level_type: LevelType, keys: Sequence[str], current_key: Optional[str] = None) -> BatchResult:
        """Fill every missing key of a batch, checking existence once for the whole batch"""
        level_type = LevelType(level_type)
        unique_keys = list(dict.fromkeys(keys))
        batch = BatchResult(level_type=level_type, total=len(unique_keys))

        try:
            existing = self.existing_keys(level_type, unique_keys)
        except SQLAlchemyError as e:
            logger.error("Calendar lookup failed for %s batch: %s", level_type.value, e)
            failed = EnsureResult(created=False, reason=str(e))
            batch.current = failed
            return batch

        for key in unique_keys:
            if key in existing:
                result = EnsureResult(created=False, reason=ALREADY_EXISTS)
            else:
                result = self._create_level(level_type, key)
                if result.created:
                    batch.created_keys.append(key)
            batch.results[key] = result

        if current_key is not None:
            batch.current = batch.results.get(current_key) or EnsureResult(created=False, reason=ALREADY_EXISTS)
        return batch

    def ensure_daily_range(self, start: date, days: int, current_key: Optional[str] = None) -> BatchResult:
        return self.ensure_keys(LevelType.DAILY, day_range(start, days), current_key)

    def ensure_weekly_range(self, start: date, weeks: int, current_key: Optional[str] = None) -> BatchResult:
        return self.ensure_keys(LevelType.WEEKLY, week_range(start, weeks), current_key)

    # backfill
    def backfill_dates(self, values: Iterable[str]) -> BatchResult:
        """Daily levels for explicit dates, unparseable entries are dropped"""
        keys = [key for key in (normalize_day_key(value) for value in values) if key]
        if not keys:
            raise ValueError("No valid dates (YYYY-MM-DD) to backfill")
        return self.ensure_keys(LevelType.DAILY, keys)

    def backfill_range(self, start: date, end: date, include_weekly: bool = True) -> BackfillResponse:
        daily = self.ensure_keys(LevelType.DAILY, days_between(start, end))
        weekly = self.ensure_keys(LevelType.WEEKLY, weeks_between(start, end)) if include_weekly else None
        logger.info("Backfill %s..%s: daily %s, weekly %s", start, end, daily.summary,
                    weekly.summary if weekly else "-")
        return BackfillResponse(mode=ScheduleMode.BACKFILL_RANGE, daily=daily, weekly=weekly)

    # run ledger
    def claim_run(self, run_key: str, purpose: str) -> bool:
        """Insert-if-absent into the run ledger, False when another run got there first.
        Other database errors propagate after a rollback.
        """
        try:
            self.db.add(models.CronRun(run_key=run_key, purpose=purpose))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Run %s/%s already happened", purpose, run_key)
            return False
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True

    def _run_cadence(self, level_type: LevelType, today: date, force: bool) -> BatchResult:
        if level_type == LevelType.DAILY:
            current_key = day_key(today)
        else:
            current_key = week_key(today)

        try:
            claimed = force or self.claim_run(current_key, level_type.value)
        except SQLAlchemyError as e:
            logger.error("Run ledger unavailable for %s %s: %s", level_type.value, current_key, e)
            return BatchResult(
                level_type=level_type,
                current=EnsureResult(created=False, reason=str(e)),
            )
        if not claimed:
            return BatchResult(
                level_type=level_type,
                current=EnsureResult(created=False, reason=ALREADY_RAN),
            )

        if level_type == LevelType.DAILY:
            days = self.config.DAILY_BACKFILL_DAYS
            return self.ensure_daily_range(today - timedelta(days=days - 1), days, current_key)
        weeks = self.config.WEEKLY_BACKFILL_WEEKS
        return self.ensure_weekly_range(today - timedelta(days=7 * (weeks - 1)), weeks, current_key)

    def run(self, mode: Optional[ScheduleMode] = None, now: Optional[datetime] = None, force: bool = False) -> CronResponse:
        """Scheduler entry point. Without mode and force it only acts in the minutes after local midnight."""
        now = now or local_now(self.config.TIMEZONE)
        mode = ScheduleMode(mode) if mode else None
        if mode not in (None, ScheduleMode.DAILY, ScheduleMode.WEEKLY):
            raise ValueError(f"Mode {mode.value} is not a scheduled mode")

        in_window = is_in_cron_window(now, self.config.CRON_WINDOW_MINUTES)
        if not force and not in_window and mode is None:
            return CronResponse(ran=False, reason=OUTSIDE_WINDOW)

        is_monday = now.weekday() == 0
        run_daily = force or mode == ScheduleMode.DAILY or (mode is None and in_window)
        run_weekly = force or mode == ScheduleMode.WEEKLY or (mode is None and in_window and is_monday)

        today = now.date()
        response = CronResponse(ran_daily=run_daily, ran_weekly=run_weekly)
        if run_daily:
            response.daily = self._run_cadence(LevelType.DAILY, today, force)
        if run_weekly:
            response.weekly = self._run_cadence(LevelType.WEEKLY, today, force)
        return response


def summarize(results: Dict[str, EnsureResult]) -> List[str]:
    """One printable line per cadence key"""
    lines = []
    for key, result in results.items():
        outcome = f"created {result.level_id}" if result.created else result.reason
        lines.append(f"{key}: {outcome}")
    return lines
