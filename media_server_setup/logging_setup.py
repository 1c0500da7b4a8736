"""Logging to the setup log file and the terminal."""

import logging
import sys
from pathlib import Path
from typing import NoReturn, Union

from rich.logging import RichHandler

from .ui import console, err_console

LOGGER_NAME = "media_server_setup"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(LOGGER_NAME)


class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def setup_logging(log_file: Union[str, Path], debug: bool = False) -> logging.Logger:
    """
    Configure logging with Rich console handlers and file output.

    INFO and below go to stdout, ERROR and above to stderr. The log file
    is appended to and never rotated.

    Args:
        log_file: Path of the log file; its directory is created if missing.
        debug: Show DEBUG records on the console.

    Returns:
        The configured package logger.
    """
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.setLevel(logging.DEBUG)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    console_level = logging.DEBUG if debug else logging.INFO
    out_handler = RichHandler(console=console, show_path=False, markup=False)
    out_handler.setLevel(console_level)
    out_handler.addFilter(_BelowErrorFilter())
    logger.addHandler(out_handler)

    err_handler = RichHandler(console=err_console, show_path=False, markup=False)
    err_handler.setLevel(logging.ERROR)
    logger.addHandler(err_handler)

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.addHandler(file_handler)

    logger.debug(f"Logging initialized: {log_file}")
    return logger


def log(message: str) -> None:
    logger.info(message)


def error_exit(message: str, code: int = 1) -> NoReturn:
    """Log an error and terminate the process with the given status."""
    logger.error(message)
    sys.exit(code)
