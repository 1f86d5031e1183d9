"""Server logging: one stdout handler and one rotating file handler on the root logger.

Level comes from LOG_LEVEL (default INFO). HTTP client chatter from the
Ollama client and per-request uvicorn access lines stay at WARNING unless
LOG_LEVEL=DEBUG.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that drown out ledger events at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def get_log_level() -> int:
    """LOG_LEVEL as a logging constant; unknown names mean INFO."""
    return LOG_LEVEL_MAP.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def setup_server_logging(log_file: str = "logs/server.log") -> None:
    """Replace the root logger's handlers with stdout and ``log_file`` output.

    Safe to call more than once; existing handlers are dropped.

    Args:
        log_file: Path of the log file; parent directories are created
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    level = get_log_level()
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if isinstance(handler, RotatingFileHandler):
            handler.close()
    root_logger.setLevel(level)

    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            log_path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    quiet_level = logging.DEBUG if level == logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


__all__ = ["get_log_level", "setup_server_logging"]
