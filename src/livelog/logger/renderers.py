"""
Render log entries to terminal strings.

Every function here is pure: it reads an entry's message state and returns
an ANSI-styled string. Entry text always ends with a newline so that
concatenated entries split cleanly into physical lines.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Sequence

import yaml

from ..utils.text import style_ansi
from ..utils.ui.theme import ICONS, THEME
from .levels import LogLevel
from .log_entry import LogEntry, MessageState

RenderStyle = Literal["fancy", "basic"]

SECTION_PADDING = 25
MSG_SEPARATOR = " → "


def chain_messages(states: Sequence[MessageState]) -> List[str]:
    """
    Collapse message states into the current message chain.

    A state with ``append=True`` extends the chain, any other state with a
    message starts a new one.
    """
    chain: List[str] = []
    for state in states:
        if state.msg is None:
            continue
        if state.append:
            chain.append(state.msg)
        else:
            chain = [state.msg]
    return chain


def left_pad(entry: LogEntry) -> str:
    """Indentation prefix; the spinner column for active entries."""
    return " " * (entry.indent * 3)


def _msg_style(entry: LogEntry, state: MessageState) -> Optional[str]:
    if state.status == "error" or entry.level == LogLevel.error:
        return THEME["error"]
    if entry.level == LogLevel.warn:
        return THEME["warning"]
    if entry.level >= LogLevel.verbose:
        return THEME["verbose"]
    return None


def render_msg(entry: LogEntry) -> str:
    """Render the chained message. Std-stream output is passed through untouched."""
    msg = MSG_SEPARATOR.join(chain_messages(entry.get_message_states()))
    if entry.from_std_stream:
        return msg
    style = _msg_style(entry, entry.get_message_state())
    return style_ansi(msg, style) if style else msg


def render_symbol(entry: LogEntry) -> str:
    symbol = entry.get_message_state().symbol
    if not symbol:
        return ""
    icon = ICONS.get(symbol, " ")
    style = {
        "success": THEME["success"],
        "warning": THEME["warning"],
        "error": THEME["error"],
    }.get(symbol)
    return (style_ansi(icon, style) if style else icon) + " "


def render_section(entry: LogEntry) -> str:
    section = entry.get_message_state().section
    if not section:
        return ""
    return style_ansi(section.ljust(SECTION_PADDING), THEME["section"]) + MSG_SEPARATOR


def render_data(entry: LogEntry) -> str:
    data = entry.get_message_state().data
    if data is None:
        return ""
    dumped = yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip("\n")
    pad = left_pad(entry)
    lines = [pad + "  " + line for line in dumped.split("\n")]
    return "\n" + style_ansi("\n".join(lines), THEME["data"])


def format_for_terminal(entry: LogEntry, style: RenderStyle = "fancy") -> str:
    """
    Render an entry for display.

    Args:
        entry: The entry to render
        style: "fancy" adds indentation for the fullscreen writer, "basic"
            renders flush left for plain stdout output

    Returns:
        The rendered entry with a trailing newline, or "" if the entry has
        nothing to show (e.g. a placeholder)
    """
    msg = render_msg(entry)
    section = render_section(entry)
    data = render_data(entry)
    if not (msg or section or data):
        return ""
    pad = left_pad(entry) if style == "fancy" else ""
    return f"{pad}{render_symbol(entry)}{section}{msg}{data}\n"


def render_raw(entry: LogEntry) -> str:
    """Pass-through rendering for live-stream entries."""
    msg = render_msg(entry)
    if not msg:
        return ""
    return f"{left_pad(entry)}{msg}\n"


def basic_render(entry: LogEntry, level: LogLevel) -> str:
    """Render ``entry`` for plain output if it is visible at ``level``."""
    if level >= entry.level:
        return format_for_terminal(entry, "basic")
    return ""
