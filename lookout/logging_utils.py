from __future__ import annotations

import logging
import os
import time
from collections import deque
from logging.handlers import RotatingFileHandler
from pathlib import Path

from lookout.config import PACKAGE_DIR, resolve_log_dir

LOG_FILE_NAME = "lookout.log"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_file() -> Path:
    return resolve_log_dir() / LOG_FILE_NAME


def fallback_log_file() -> Path:
    return PACKAGE_DIR / "logs" / LOG_FILE_NAME


def _rotating_handler(log_file: Path) -> RotatingFileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )


def configure_rotating_logger(
    logger_name: str,
    preferred_log_file: Path,
    fallback_log_file: Path,
    level: int = logging.INFO,
) -> tuple[logging.Logger, Path]:
    """Attach a rotating file handler and a console handler to `logger_name` once.

    Child loggers (`lookout.scheduler`, `lookout.cycle`, ...) propagate here.
    Returns the logger and the log file actually in use.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger, preferred_log_file

    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    effective_log_file = preferred_log_file
    try:
        file_handler = _rotating_handler(preferred_log_file)
    except OSError:
        file_handler = _rotating_handler(fallback_log_file)
        effective_log_file = fallback_log_file

    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.propagate = False
    return logger, effective_log_file


def tail_logs(
    log_file: Path,
    lines: int = 100,
    follow: bool = True,
    poll_interval: float = 0.5,
) -> int:
    if lines < 0:
        print("--tail-lines must be >= 0")
        return 2

    if not log_file.exists():
        print(f"Log file does not exist yet: {log_file}")
        return 1

    try:
        with log_file.open("r", encoding="utf-8", errors="replace") as handle:
            if lines > 0:
                for line in deque(handle, maxlen=lines):
                    print(line, end="")
            else:
                handle.seek(0, os.SEEK_END)

            while follow:
                line = handle.readline()
                if line:
                    print(line, end="", flush=True)
                else:
                    time.sleep(poll_interval)
    except KeyboardInterrupt:
        pass
    return 0
