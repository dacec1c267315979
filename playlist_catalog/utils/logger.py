import logging
import os

from termcolor import colored

ROOT = "playlist_catalog"

LEVEL_COLOURS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red",
}


class ColourFormatter(logging.Formatter):
    """
    Just prints the level name in colour, the rest as-is
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        if colour := LEVEL_COLOURS.get(record.levelname):
            line = line.replace(record.levelname, colored(record.levelname, colour), 1)

        return line


def level_from_env(default: str = "INFO") -> str:
    level = os.environ.get("LOG_LEVEL", default).strip().upper()

    # getLevelName maps known names to their number
    if isinstance(logging.getLevelName(level), int):
        return level

    return default


def _setup_root() -> logging.Logger:
    root = logging.getLogger(ROOT)

    if not root.handlers:
        handler = logging.StreamHandler()

        handler.setFormatter(
            ColourFormatter(
                "[%(asctime)s] %(levelname)-8s %(name)s | %(message)s",
                "%H:%M:%S",
            )
        )

        root.addHandler(handler)

        root.setLevel(level_from_env())

    return root


def set_level(level: int | str) -> None:
    _setup_root().setLevel(level)


def get_logger(name: str | None = None) -> logging.Logger:
    _setup_root()

    return logging.getLogger(name or ROOT)
