from rumb.services.level_services import LevelServices
from rumb.services.schedule_services import ScheduleServices
