from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict
from uuid import UUID
from datetime import date
from enum import Enum

from rumb.schemas.level_schema import LevelType


ALREADY_EXISTS = "already exists"
ALREADY_RAN = "already ran"
OUTSIDE_WINDOW = "outside window"


class ScheduleMode(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BACKFILL_RANGE = "backfill-range"
    BACKFILL_DATES = "backfill-dates"


# outcome of "make sure a level exists" for one cadence key
class EnsureResult(BaseModel):
    created: bool
    level_id: Optional[UUID] = None
    reason: Optional[str] = None


class BatchResult(BaseModel):
    level_type: LevelType
    current: Optional[EnsureResult] = None # result for today / this week, when part of the batch
    results: Dict[str, EnsureResult] = Field(default_factory=dict)
    created_keys: List[str] = Field(default_factory=list)
    total: int = 0

    @property
    def summary(self) -> str:
        return f"{len(self.created_keys)}/{self.total}"


class BackfillRequest(BaseModel):
    dates: Optional[List[str]] = None # explicit day keys (backfill-dates)
    start: Optional[date] = None # inclusive range (backfill-range)
    end: Optional[date] = None
    include_weekly: bool = True # backfill-range also fills the weeks of the range

    @model_validator(mode="after")
    def check_dates_or_range(self):
        """Either a list of dates or a start/end range"""
        if self.dates:
            return self
        if self.start is None or self.end is None:
            raise ValueError("Give either 'dates' or both 'start' and 'end'")
        if self.end < self.start:
            raise ValueError("'end' is before 'start'")
        return self

    @property
    def mode(self) -> ScheduleMode:
        return ScheduleMode.BACKFILL_DATES if self.dates else ScheduleMode.BACKFILL_RANGE


class CronResponse(BaseModel):
    ok: bool = True
    ran: bool = True
    reason: Optional[str] = None
    ran_daily: bool = False
    ran_weekly: bool = False
    daily: Optional[BatchResult] = None
    weekly: Optional[BatchResult] = None


class BackfillResponse(BaseModel):
    mode: ScheduleMode
    daily: Optional[BatchResult] = None
    weekly: Optional[BatchResult] = None
