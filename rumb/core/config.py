from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import Optional


BASE_DIR = Path(__file__).resolve().parent.parent.parent
PACKAGE_DATA = Path(__file__).resolve().parent.parent / "data"

class Settings(BaseSettings): # load all key=value pairs from .env
    """ Service settings"""
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'rumb.db'}"
    CRON_SECRET: Optional[str] = None # bearer token of the scheduler, unset rejects every cron call
    TOPOLOGY_PATH: Path = PACKAGE_DATA / "comarques.json"
    RULES_PATH: Path = PACKAGE_DATA / "rules.json"

    DIFFICULTY_ID: str = "cap-colla-rutes"
    DAILY_MIN_INTERNAL: int = 4
    WEEKLY_MIN_INTERNAL: int = 8
    RULE_HISTORY_ENABLED: bool = True

    TIMEZONE: str = "Europe/Madrid"
    CRON_WINDOW_MINUTES: int = 5
    DAILY_BACKFILL_DAYS: int = 21 # today and the 20 days before
    WEEKLY_BACKFILL_WEEKS: int = 4

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file = BASE_DIR/".env",
        env_file_encoding = "utf-8",
        extra = "ignore",
    )

settings = Settings()
