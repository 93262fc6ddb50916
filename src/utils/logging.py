"""Logging configuration for the resume pipeline.

Every module logs through ``logging.getLogger(__name__)``; those loggers all
sit under the ``src`` package logger configured here.
"""

import logging
import sys
from pathlib import Path

LOGGER_NAME = "src"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# LiteLLM and its HTTP stack log every request at INFO
NOISY_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy", "httpx", "httpcore")

_configured = False


def _level_from_name(level: str | None) -> int:
    return getattr(logging, (level or "INFO").upper(), logging.INFO)


def configure_logging(
    level: str | None = None,
    log_file: Path | str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure and return the package logger.

    The first call installs a stderr handler; later calls only change
    levels, plus add a file handler for a log file not seen before.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names and
            None mean INFO.
        log_file: Optional path of a UTF-8 log file receiving the same records.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The configured ``src`` logger.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    log_level = _level_from_name(level)
    logger.setLevel(log_level)
    formatter = logging.Formatter(format_string, datefmt=date_format)

    if not _configured:
        logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        logger.propagate = False
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

        _configured = True

    if log_file is not None:
        path = Path(log_file).resolve()
        known = {
            Path(h.baseFilename)
            for h in logger.handlers
            if isinstance(h, logging.FileHandler)
        }
        if path not in known:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(log_level)

    return logger


def reset_logging() -> None:
    """Remove handlers and forget the configuration (for tests)."""
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    _configured = False
