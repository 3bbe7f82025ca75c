import logging
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOGGER_NAME = "devicecfg"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class ISO8601Formatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        dt: datetime = datetime.fromtimestamp(record.created).astimezone()
        return dt.isoformat(timespec="milliseconds")


def resolve_log_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return LOG_LEVEL_MAP.get(level.upper(), logging.INFO)


def setup_logging(
    log_level: str | int = logging.INFO,
    log_to_file: bool = False,
    log_dir: str = "logs",
    when: str = "midnight",
    backup_count: int = 7,
    logger_name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Attach handlers to the package logger; the root logger is left alone.

    Console output goes to stderr, stdout carries command output.
    """
    formatter = ISO8601Formatter(fmt=LOG_FORMAT)

    package_logger = logging.getLogger(logger_name)
    package_logger.setLevel(resolve_log_level(log_level))

    if not package_logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

        if log_to_file:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            rotating_handler = TimedRotatingFileHandler(
                filename=Path(log_dir) / f"{logger_name}.log",
                when=when,
                interval=1,
                backupCount=backup_count,
                encoding="utf-8",
            )
            rotating_handler.setFormatter(formatter)
            package_logger.addHandler(rotating_handler)

    return package_logger


def quiet_pymodbus_logs(level: int = logging.WARNING) -> None:
    logging.getLogger("pymodbus").setLevel(level)
