import sys
from datetime import datetime, timezone
from traceback import TracebackException

from loguru import logger


def format_error(ex: BaseException) -> str:
    return "".join(TracebackException.from_exception(ex).format())


def init_logger(debug: bool | None = None):
    from .config import config

    if debug is None:
        debug = str(config.get("DEBUG", "false")).strip().lower() == "true"

    logger.remove()

    if debug:
        logger_level = "DEBUG"
        logger_format = (
            "<green>{time:MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        logger_level = "INFO"
        logger_format = (
            "{time:MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} | "
            "{message}"
        )
    logger.add(sys.stderr, level=logger_level, format=logger_format)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
