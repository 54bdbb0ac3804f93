"""Logging setup for the command line tools.

Console output is human readable; an optional log file receives one JSON
object per record.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from pythonjsonlogger import jsonlogger

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d"


def setup_logging(log_level: str = "WARNING", log_file: Path | None = None) -> logging.Logger:
    """Configure the root logger.

    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for JSON lines output at DEBUG level

    Returns:
        The configured root logger
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        json_handler = logging.FileHandler(log_file, encoding="utf-8")
        json_handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT, timestamp=True))
        json_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(json_handler)
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("fpdf").setLevel(logging.WARNING)
    logging.getLogger("fontTools").setLevel(logging.WARNING)

    return root_logger
