"""
UI Theme configuration: colors, icons, and spinner frames.

Colors are Rich style strings. They are rendered with the standard 16-color
system so that every styled glyph has a stable byte length on the canvas.
"""

from typing import Dict

THEME: Dict[str, str] = {
    # Entry states
    "active": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    # Text types
    "section": "cyan italic",
    "data": "bright_black",
    "muted": "bright_black",
    "verbose": "bright_black",
    # Chrome
    "command_line": "bright_black",
    "flash_border": "white",
    "flash_level": "bold white",
    "spinner": "cyan",
}

ICONS: Dict[str, str] = {
    "info": "ℹ",
    "success": "✓",
    "warning": "⚠",
    "error": "✗",
    "empty": " ",
    # Decorative
    "arrow": "→",
    "separator": "│",
}

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
