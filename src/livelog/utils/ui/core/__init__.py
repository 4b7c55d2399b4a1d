"""
Core terminal infrastructure.

This package owns the terminal: the line-addressable canvas painted via Rich
Live, key-press dispatch, and resize handling. Writers interact with this
package rather than printing directly.
"""

from .canvas import Canvas, RichCanvas
from .key_dispatcher import KeyDispatcher, KeyHandler

__all__ = ["Canvas", "KeyDispatcher", "KeyHandler", "RichCanvas"]
