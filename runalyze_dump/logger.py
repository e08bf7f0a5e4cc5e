"""Logging configuration for runalyze_dump."""

import logging
import sys
from datetime import datetime

from runalyze_dump.config import Config

# Below DEBUG; request/response headers and bodies are only logged here.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

PACKAGE_LOGGER = "runalyze_dump"

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: str) -> int:
    """Map a configured level name to a logging level, defaulting to INFO."""
    return _LEVELS.get((name or "info").strip().lower(), logging.INFO)


def setup_logging(level: str = "info", console: bool = False) -> logging.Logger:
    """Configure the package logger.

    Log records always go to a dated file under LOGS_DIR. With ``console``
    (JSON/cron mode) they are also written to stdout.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(parse_level(level))

    # Avoid adding handlers if they already exist
    if logger.handlers:
        return logger

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(TRACE)
        console_format = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(console_format)
        logger.addHandler(console_handler)

    # File handler
    Config.ensure_directories()
    log_file = Config.LOGS_DIR / f"runalyzedump_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(TRACE)
    file_format = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    return logger
