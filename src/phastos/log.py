"""Leveled terminal logging for Phastos.

Messages below the active level are dropped. Warnings and errors are written
to stderr and everything else to stdout, so ``--format json`` output stays
parseable while operations log progress. ``PHASTOS_LOG_LEVEL`` sets the
initial level; ``NO_COLOR`` or ``PHASTOS_NO_COLOR`` disable styling.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import IntEnum

from rich.console import Console
from rich.text import Text

LEVEL_ENV_VAR = "PHASTOS_LOG_LEVEL"


class LogLevel(IntEnum):
    TRACE = 10
    DEBUG = 20
    INFO = 30
    SUCCESS = 35
    WARNING = 40
    ERROR = 50


LEVEL_NAMES = tuple(level.name.lower() for level in LogLevel)

_ALIASES = {"verbose": LogLevel.DEBUG, "warn": LogLevel.WARNING}
_STYLES = {
    LogLevel.TRACE: "dim",
    LogLevel.DEBUG: "cyan",
    LogLevel.SUCCESS: "green",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "bold red",
}


@dataclass
class _Settings:
    level: LogLevel | None = None
    no_color: bool | None = None


_settings = _Settings()


def parse_level(value: str | None, default: LogLevel = LogLevel.INFO) -> LogLevel:
    """Map a level name (or alias) to a ``LogLevel``; unknown names give ``default``.

    Example:
        >>> parse_level(" Warn ").name
        'WARNING'
        >>> parse_level("chatty").name
        'INFO'
    """
    normalized = (value or "").strip().lower()
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    if normalized in LEVEL_NAMES:
        return LogLevel[normalized.upper()]
    return default


def configured_level() -> LogLevel:
    if _settings.level is None:
        _settings.level = parse_level(os.environ.get(LEVEL_ENV_VAR))
    return _settings.level


def set_level(value: str | None) -> None:
    _settings.level = parse_level(value)


def set_no_color(value: bool) -> None:
    """Force styling off, or with ``False`` defer to the environment again."""
    _settings.no_color = True if value else None


def reset() -> None:
    """Drop runtime overrides; the next call re-reads the environment."""
    _settings.level = None
    _settings.no_color = None


def is_enabled(level: LogLevel) -> bool:
    return level >= configured_level()


def _color_disabled() -> bool:
    if _settings.no_color is not None:
        return _settings.no_color
    return bool(os.environ.get("NO_COLOR") or os.environ.get("PHASTOS_NO_COLOR"))


def console(*, stderr: bool = False) -> Console:
    return Console(
        file=sys.stderr if stderr else sys.stdout,
        soft_wrap=True,
        highlight=False,
        no_color=_color_disabled(),
    )


def emit(level: LogLevel, message: str, *, style: str | None = None) -> None:
    if not is_enabled(level):
        return
    text = Text(message, style=style or _STYLES.get(level, ""))
    console(stderr=level >= LogLevel.WARNING).print(text)


def trace(message: str) -> None:
    emit(LogLevel.TRACE, message)


def debug(message: str) -> None:
    emit(LogLevel.DEBUG, message)


def info(message: str) -> None:
    emit(LogLevel.INFO, message)


def success(message: str) -> None:
    emit(LogLevel.SUCCESS, message)


def warning(message: str) -> None:
    emit(LogLevel.WARNING, message)


def error(message: str) -> None:
    emit(LogLevel.ERROR, message)
