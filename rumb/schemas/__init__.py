from rumb.schemas.level_schema import LevelRead, LevelType
from rumb.schemas.schedule_schema import (
    ALREADY_EXISTS, ALREADY_RAN, OUTSIDE_WINDOW,
    BackfillRequest, BackfillResponse, BatchResult, CronResponse, EnsureResult, ScheduleMode,
)
