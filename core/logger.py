"""
Logging setup shared by every engine module.

Each module calls ``setup_logger(__name__)`` once at import. Records go to
stderr; when FINMODEL_LOG_DIR names an existing directory, a DEBUG-level copy
is also written to ``finmodel_YYYYMMDD.log`` there.
"""
import logging
import os
from datetime import datetime
from typing import Optional

LOG_DIR_ENV = "FINMODEL_LOG_DIR"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_file_path(log_dir: str, day: Optional[datetime] = None) -> str:
    day = day or datetime.now()
    return os.path.join(log_dir, f"finmodel_{day:%Y%m%d}.log")


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Return the named logger with the engine handlers attached.

    Calling it again for the same name returns the logger unchanged, so
    handlers are never duplicated.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_dir = os.environ.get(LOG_DIR_ENV)
    if log_dir and os.path.isdir(log_dir):
        to_file = logging.FileHandler(log_file_path(log_dir))
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(formatter)
        logger.addHandler(to_file)

    return logger


class LogContext:
    """Logs start, finish and elapsed seconds of a block; failures at ERROR."""

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.started = None

    def __enter__(self):
        self.started = datetime.now()
        self.logger.info(f"Starting: {self.operation}")
        return self

    @property
    def elapsed(self) -> float:
        return (datetime.now() - self.started).total_seconds()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.error(f"Failed: {self.operation} after {self.elapsed:.2f}s ({exc_val})")
        else:
            self.logger.info(f"Completed: {self.operation} in {self.elapsed:.2f}s")
        return False
