import sys

from loguru import logger

from wordbank.config import get_settings

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"


def configure_logging(level: str | None = None) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or get_settings().log_level,
        format=LOG_FORMAT,
    )
