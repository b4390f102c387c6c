from logging.config import dictConfig
import logging

from app.config import settings


class SafeRequestIDFormatter(logging.Formatter):
    """Formatter that tolerates records logged outside of a request."""

    def format(self, record):
        if not hasattr(record, 'request_id'):
            record.request_id = 'no-request-id'
        return super().format(record)


LOG_LEVEL = "DEBUG" if settings.DEBUG else "INFO"

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": SafeRequestIDFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s",
        },
        "access": {
            "()": SafeRequestIDFormatter,
            "format": "%(asctime)s - %(levelname)s - [%(request_id)s] - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "access_console": {
            "class": "logging.StreamHandler",
            "formatter": "access",
        },
    },
    "root": {
        "level": LOG_LEVEL,
        "handlers": ["console"],
    },
    "loggers": {
        "app": {  # Every module under the app package
            "level": LOG_LEVEL,
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn.access": {
            "level": "INFO",
            "handlers": ["access_console"],
            "propagate": False,
        },
        "gunicorn.error": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        # SQL echo is controlled by the engine's echo flag in DEBUG mode
        "sqlalchemy.engine": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

def configure_logging():
    """Configure logging for the application."""
    dictConfig(LOGGING_CONFIG)
