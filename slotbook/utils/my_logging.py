# slotbook/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from slotbook.config.settings import get_settings

NOISY_LOGGERS = [
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "httpx",
    "googleapiclient.discovery",
    "googleapiclient.discovery_cache",
    "uvicorn.access",
]


def setup_logging(verbose=True):
    """Configure application logging once, at process start"""
    settings = get_settings()

    if verbose:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # The discovery client logs every request at INFO
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

    if not verbose:
        for name in NOISY_LOGGERS:
            logger = logging.getLogger(name)
            logger.setLevel(logging.ERROR)
            logger.propagate = False
