import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from . import settings

CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty under INFO: one line per webhook connection
QUIET_LOGGERS = ("urllib3",)


def resolve_level(level: Union[int, str, None]) -> int:
    """Accepts a logging constant or a name like "debug"; falls back to LOG_LEVEL, then INFO."""
    if isinstance(level, int):
        return level
    name = (level or settings.LOG_LEVEL).upper()
    return getattr(logging, name, logging.INFO)


def setup_logger(
    name: Optional[str] = None,
    log_level: Union[int, str, None] = None,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Configures the report scripts' logger: bare messages on stdout (the pipelines
    log emoji step banners meant for a terminal) and timestamped lines in a
    rotating file under LOG_DIR. Library modules only use logging.getLogger(__name__).
    """
    level = resolve_level(log_level)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Only this logger's own handlers count; pytest and callers may own the root's
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    log_dir = Path(log_dir or settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_dir / settings.LOG_FILENAME,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return logger
