"""
Fullscreen writer components.

These modules split the writer's responsibilities into focused components:
spinner animation, snapshot building, row diffing and burst throttling. The
writer in ``fullscreen_writer`` composes them.
"""

from .diff_writer import DiffWriter, flatten
from .snapshot_builder import RenderRecord, SnapshotBuilder
from .spinner_scheduler import Coords, SpinnerScheduler, SpinnerState, next_frame
from .throttle import Decision, ThrottleController

__all__ = [
    "Coords",
    "Decision",
    "DiffWriter",
    "RenderRecord",
    "SnapshotBuilder",
    "SpinnerScheduler",
    "SpinnerState",
    "ThrottleController",
    "flatten",
    "next_frame",
]
