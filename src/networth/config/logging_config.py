"""Logging configuration."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from networth.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - [%(threadName)s] - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """
    Configure application logging.

    Logs go to stdout and, when ``log_to_file`` is set, to a rotating
    ``networth.log`` in the data directory. Thread names are included since
    provider fan-out and the snapshot scheduler log from worker threads.
    """
    settings = get_settings()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_to_file:
        handlers.append(
            RotatingFileHandler(
                settings.get_log_dir() / "networth.log",
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("yfinance").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
