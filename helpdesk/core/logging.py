"""JSON logging for the helpdesk backend."""
from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

# Libraries that log every scheduler tick or pool checkout at INFO.
QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "sqlalchemy.pool")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Send root logging to stderr as one JSON object per line.

    Calling it again replaces the handler instead of stacking a second one.
    """

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["get_logger", "setup_logging"]
