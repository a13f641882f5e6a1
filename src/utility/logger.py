"""Logging setup for the visualizer: colored console, optional warning log file."""

import os
import logging
from logging import Logger
from typing import Dict, Iterable, Optional

from termcolor import colored

from src.utility.path_finder import Finder

LEVEL_COLORS: Dict[str, str] = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}

# SDK and HTTP client loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "openai", "urllib3")

CONSOLE_FORMAT = "%(levelbadge)s %(name)s | %(message)s"
FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
)


class LevelBadgeFormatter(logging.Formatter):
    """Console formatter that adds a padded, colored `levelbadge` field."""

    def __init__(self, fmt: str = CONSOLE_FORMAT, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        badge = f"{record.levelname + ':':<9}"
        color = LEVEL_COLORS.get(record.levelname)
        record.levelbadge = colored(badge, color) if (self.use_color and color) else badge
        return super().format(record)


def resolve_level(value: Optional[str], default: int = logging.INFO) -> int:
    """Turn a level name like "debug" into its logging constant."""
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


class AppLogger:
    """
    Central logging helper.

    AppLogger.init() once in api_server.py, then
    logger = AppLogger.get_logger(__name__) everywhere else.
    """

    _configured: bool = False

    @classmethod
    def init(
        cls,
        level: Optional[int] = None,
        log_to_file: bool = False,
        filename: str = "visualizer_server.log",
        quiet: Iterable[str] = NOISY_LOGGERS,
    ) -> None:
        """
        Configure the root logger. Only the first call has an effect.

        Level defaults to LOG_LEVEL from the environment. Third-party
        loggers in `quiet` are raised to WARNING. The file handler keeps
        WARNING and above under data/logs.
        """
        if cls._configured:
            return
        cls._configured = True

        if level is None:
            level = resolve_level(os.getenv("LOG_LEVEL"))

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(
            LevelBadgeFormatter(use_color=os.getenv("NO_COLOR") is None)
        )
        root_logger.addHandler(console_handler)

        if log_to_file:
            log_path = Finder().get_directory("logs") / filename
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(logging.WARNING)
            file_handler.setFormatter(
                logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            )
            root_logger.addHandler(file_handler)

        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)

    @staticmethod
    def get_logger(name: Optional[str] = None) -> Logger:
        """Named logger; use instead of logging.getLogger()."""
        return logging.getLogger(name if name is not None else __name__)
