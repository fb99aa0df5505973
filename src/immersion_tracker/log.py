"""Logging setup for the tracker."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from immersion_tracker.config import DEFAULT_LOG_PATH

LOG_FORMAT = "%(asctime)s:%(levelname)s:%(name)s: %(message)s"


def setup_logging(log_path: str = DEFAULT_LOG_PATH, level: int = logging.INFO) -> logging.Logger:
    """Send package logs to a rotating file.

    The terminal belongs to the rich console, so nothing is streamed there.
    """
    Path(log_path).parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=2)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(level)

    logger = logging.getLogger("immersion_tracker")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.addHandler(file_handler)
    return logger
