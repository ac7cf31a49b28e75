import logging.config
import sys
from typing import Optional

from rumb.core.config import settings


def configure_logging(level: Optional[str] = None, error_file: str = "rumb_errors.log", stream=sys.stdout):
    level = (level or settings.LOG_LEVEL).upper()
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,

        # Formatters: How the logs look
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
        },

        # Handlers: Where the logs go
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": stream,
            },
            "errors": {
                "level": "ERROR",
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": error_file,
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "delay": True,  # no file until the first error
            },
        },

        # Loggers: per package levels
        "loggers": {
            "": {
                "handlers": ["console", "errors"],
                "level": level,
                "propagate": True
            },
            "rumb.engine": {  # per-attempt search logs only at DEBUG
                "level": level if level == "DEBUG" else "INFO",
            },
            "sqlalchemy.engine": {  # INFO prints every SQL statement
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False
            },
            "uvicorn.access": {
                "level": "WARNING" if level == "ERROR" else "INFO",
            },
        }
    }

    logging.config.dictConfig(logging_config)
