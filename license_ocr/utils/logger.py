"""Logging setup for the license OCR engine.

Recognition runs on caller threads, so log lines carry the thread name.
Pillow's plugin loggers are held at INFO so DEBUG runs show pipeline
detail instead of PNG chunk dumps.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - [%(threadName)s] - %(levelname)s - %(message)s"

# Third-party loggers kept at INFO or above whatever the configured level.
QUIET_LOGGERS = ("PIL",)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for the license OCR engine.

    Typically called with ``AppConfig.log_level``. A root logger that
    already has handlers is left alone.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))

    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module.
    """
    return logging.getLogger(name)
