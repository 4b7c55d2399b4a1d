"""
ANSI-aware text helpers for the terminal canvas.

Styled strings travel through the writer as plain ``str`` with embedded SGR
escape sequences. These helpers measure and wrap them by visible cell width
(using Rich's cell tables) while treating escape sequences as zero-width.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List

from rich.cells import get_character_cell_size
from rich.color import ColorSystem
from rich.style import Style

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


@lru_cache(maxsize=256)
def style_ansi(text: str, style: str) -> str:
    """Render ``text`` with a Rich style string as a 16-color ANSI string."""
    if not text or not style:
        return text
    return Style.parse(style).render(text, color_system=ColorSystem.STANDARD)


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE.sub("", text)


def visible_width(text: str) -> int:
    """Return the number of terminal cells ``text`` occupies."""
    return sum(get_character_cell_size(ch) for ch in strip_ansi(text))


def _wrap_line(line: str, width: int) -> List[str]:
    rows: List[str] = []
    current: List[str] = []
    current_width = 0
    pos = 0

    while pos < len(line):
        match = ANSI_ESCAPE.match(line, pos)
        if match:
            current.append(match.group())
            pos = match.end()
            continue

        ch = line[pos]
        cells = get_character_cell_size(ch)
        if current_width + cells > width and current_width > 0:
            rows.append("".join(current))
            current = []
            current_width = 0
        current.append(ch)
        current_width += cells
        pos += 1

    rows.append("".join(current))
    return rows


def hard_wrap(text: str, width: int) -> str:
    """
    Hard-wrap ``text`` to ``width`` cells.

    Existing newlines are kept, nothing is trimmed or reflowed, and words
    are broken mid-way when a row is full. Escape sequences never count
    toward the width and are never split.

    Args:
        text: Text to wrap, possibly containing ANSI escape sequences
        width: Maximum visible cells per row (values below 1 are treated as 1)

    Returns:
        The wrapped text
    """
    width = max(width, 1)
    out: List[str] = []
    for line in text.split("\n"):
        out.extend(_wrap_line(line, width))
    return "\n".join(out)
