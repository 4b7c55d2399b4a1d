"""
Terminal UI: canvas, key dispatch, writer components and the fullscreen writer.

Import the writer from ``livelog.utils.ui.fullscreen_writer``; this package
init stays import-light so renderers can use the theme without cycles.
"""

from .theme import ICONS, SPINNER_FRAMES, THEME

__all__ = ["ICONS", "SPINNER_FRAMES", "THEME"]
