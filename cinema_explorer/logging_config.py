from __future__ import annotations

import logging
import os
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger

LOG_FORMAT_ENV = "CINEMA_EXPLORER_LOG_FORMAT"
LOG_LEVEL_ENV = "CINEMA_EXPLORER_LOG_LEVEL"

FORMAT_MODES = ("json", "plain")

# record attributes every JSON line carries, besides the `extra` fields
_JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"
_PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _format_mode(force_format: Optional[str]) -> str:
    mode = (force_format if force_format is not None else os.getenv(LOG_FORMAT_ENV, "json")).lower()
    if mode not in FORMAT_MODES:
        raise ValueError(f"Unknown log format '{mode}', expected one of {FORMAT_MODES}")
    return mode


def _level(level: Optional[int]) -> int:
    if level is not None:
        return level
    name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{name}' in {LOG_LEVEL_ENV}")
    return value


def build_formatter(mode: str) -> logging.Formatter:
    """
    Formatter for a log mode.

    JSON lines rename 'levelname' to 'level' so that the structured
    `extra={...}` context of the loaders and views sits beside it.
    """
    if mode == "plain":
        return logging.Formatter(_PLAIN_FORMAT)
    return jsonlogger.JsonFormatter(_JSON_FIELDS, rename_fields={"levelname": "level"})


def configure_logging(
        level: Optional[int] = None,
        force_format: Optional[str] = None,
        stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Configure the root logger for cinema_explorer.

    Format, first match wins:
        1) force_format argument ("json" or "plain")
        2) env var CINEMA_EXPLORER_LOG_FORMAT
        3) "json"

    Level, first match wins:
        1) level argument
        2) env var CINEMA_EXPLORER_LOG_LEVEL (a level name, e.g. "DEBUG")
        3) INFO

    :return: the installed handler
    :raises ValueError: for an unknown format or level name
    """
    mode = _format_mode(force_format)

    root = logging.getLogger()
    root.setLevel(_level(level))

    handler = logging.StreamHandler(stream)
    handler.setFormatter(build_formatter(mode))

    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)
    return handler
