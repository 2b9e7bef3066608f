import logging
import logging.config
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from mailsync.environment import EnvironmentName
from settings import settings

JSON_FORMAT = (
    "%(module)s %(asctime)s %(levelname)s %(process)d %(taskName)s %(name)s "
    "%(funcName)s %(filename)s %(lineno)d %(message)s"
)

# Protocol libraries log every command at INFO/DEBUG, including credentials on login.
_QUIET_LOGGERS = ["aioimaplib", "aiosmtplib", "asyncio", "python_multipart", "sqlalchemy.engine"]

LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "jsonFormat": {
            "format": JSON_FORMAT,
            "class": "logging_config.CustomJsonFormatter",
        },
    },
    "handlers": {
        "jsonStreamHandler": {
            "formatter": "jsonFormat",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",  # Default is stderr
        },
    },
    "loggers": {
        "": {"handlers": ["jsonStreamHandler"], "level": settings.logging.level, "propagate": False},
        # uvicorn attaches its own handlers; route access logs through ours only once.
        "uvicorn.access": {"handlers": ["jsonStreamHandler"], "propagate": False},
        **{
            name: {"handlers": ["jsonStreamHandler"], "level": logging.WARNING, "propagate": False}
            for name in _QUIET_LOGGERS
        },
    },
}
LOCAL_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "default": {
            "formatter": "standard",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",  # Default is stderr
        },
    },
    "loggers": {
        "": {
            "handlers": ["default"],
            "level": settings.logging.level,
            "propagate": False,
        },
        "uvicorn.access": {"handlers": ["default"], "propagate": False},
        **{name: {"handlers": ["default"], "level": logging.WARNING, "propagate": False} for name in _QUIET_LOGGERS},
    },
}


# Used because we add custom local formatting.
class CustomJsonFormatter(JsonFormatter):
    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._app_env = settings.environment
        self._pretty_format = settings.logging.use_pretty_json
        # For local development we want to make logs more clear
        if self._app_env == EnvironmentName.DEVELOPMENT and self._pretty_format:
            self.json_indent = 2

    def format(self, record: logging.LogRecord) -> str:
        result = super().format(record)
        if self._app_env == EnvironmentName.DEVELOPMENT and self._pretty_format:
            result = result.replace("\\n", "\n\t\t")
        return result


def setup_logging() -> None:
    """Setup root logger using our logging config."""
    if settings.logging.use_config is True:
        logging.config.dictConfig(LOGGING_CONFIG)
    else:
        logging.config.dictConfig(LOCAL_LOGGING_CONFIG)

    logging.captureWarnings(True)
    logging.disable(logging.NOTSET)
