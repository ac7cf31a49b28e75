from rumb.models.level_model import Level
from rumb.models.calendar_model import CalendarDaily, CalendarWeekly
from rumb.models.cron_run_model import CronRun
from rumb.models.rule_history_model import RuleHistoryEntry
