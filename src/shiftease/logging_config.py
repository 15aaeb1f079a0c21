"""Logging setup shared by the API process and the notification worker.

Both processes log to the console only: INFO and DEBUG go to stdout,
WARNING and above to stderr, so the hosting platform can tell them apart.
Every record carries the name of the process that wrote it.
"""

import logging
import sys
from typing import Optional

from shiftease.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(service)s] %(name)s: %(message)s"

# Client libraries that log every request at INFO (JWKS, Pexels, Mailgun)
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "aiocache")


class StdoutFilter(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


class ServiceFilter(logging.Filter):
    """Stamps ``record.service`` so API and worker lines can be told apart"""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record):
        record.service = self.service
        return True


def _console_handler(stream, level, formatter, service_filter, stdout_only=False):
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.addFilter(service_filter)
    if stdout_only:
        handler.addFilter(StdoutFilter())
    handler.setFormatter(formatter)
    return handler


def setup_logging(service: str = "shiftease-api", level: Optional[str] = None):
    """
    Replace the root handlers with the stdout/stderr pair.

    Args:
        service: Process name stamped on every record
        level: Overrides ``config["log_level"]``
    """
    level_name = (level or config.get("log_level") or "INFO").upper()
    root_level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)
    service_filter = ServiceFilter(service)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    root_logger.handlers.clear()
    root_logger.addHandler(
        _console_handler(
            sys.stdout, logging.DEBUG, formatter, service_filter, stdout_only=True
        )
    )
    root_logger.addHandler(
        _console_handler(sys.stderr, logging.WARNING, formatter, service_filter)
    )

    # Request chatter stays hidden unless we are debugging
    if root_level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
