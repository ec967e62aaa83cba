import os
import sys

from loguru import logger

from reportcard.core.config import settings

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOG_DIR = settings.LOG_DIR if os.path.isabs(settings.LOG_DIR) else os.path.join(BASE_DIR, settings.LOG_DIR)
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"
FILE_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _only(level_name: str):
    return lambda record: record["level"].name == level_name


def setup_logging() -> None:
    """
    One file per level under LOG_DIR plus a console sink.

    SUCCESS lines go to info.log and CRITICAL lines to error.log. The console
    shows everything from LOG_LEVEL up; in production DEBUG is never written.
    """
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=settings.LOG_LEVEL)

    os.makedirs(LOG_DIR, exist_ok=True)
    production = settings.ENVIRONMENT == "production"

    for level in FILE_LEVELS:
        if production and level == "DEBUG":
            continue
        if level == "INFO":
            log_filter = lambda record: record["level"].name in ("INFO", "SUCCESS")
        elif level == "ERROR":
            log_filter = lambda record: record["level"].no >= logger.level("ERROR").no
        else:
            log_filter = _only(level)

        logger.add(
            os.path.join(LOG_DIR, f"{level.lower()}.log"),
            format=LOG_FORMAT,
            level=level,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression="zip",
            enqueue=True,
            filter=log_filter
        )


setup_logging()
