import logging.config

from storygen.config.settings import settings


def build_logging_config(level: str = None, log_file: str = None) -> dict:
    level = level or settings.LOG_LEVEL
    log_file = settings.LOG_FILE if log_file is None else log_file

    handlers = {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "simple",
            "filename": log_file,
            "maxBytes": 10_000_000,
            "backupCount": 5,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    }


def configure_logging(level: str = None, log_file: str = None):
    logging.config.dictConfig(build_logging_config(level, log_file))
