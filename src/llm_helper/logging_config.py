"""
Centralized logging configuration for llm-helper.
"""
import logging
import sys
from pathlib import Path
from typing import Optional


_loggers = {}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: str = LOG_FORMAT
) -> None:
    """
    Configure the root logger.

    The terminal UI owns stdout, so when a log file is given it is the only
    handler.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file
        format_string: Log message format
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(log_file, encoding="utf-8")]
    else:
        handlers = [logging.StreamHandler(sys.stderr)]

    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True
    )


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger with the given name."""
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]
