"""
Log severity levels.

Lower values are more severe. A writer configured at level N shows every
entry whose level is <= N.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union


class LogLevel(IntEnum):
    """Severity levels, most severe first."""

    error = 0
    warn = 1
    info = 2
    verbose = 3
    debug = 4
    silly = 5

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """
        Parse a level from a name ("info"), a number (2) or a numeric string ("2").

        Raises:
            ValueError: If the value does not name a level.
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().lower()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


# Levels a user can switch to from the keyboard (0-4).
SELECTABLE_LEVELS = (
    LogLevel.error,
    LogLevel.warn,
    LogLevel.info,
    LogLevel.verbose,
    LogLevel.debug,
)
