"""
Write only the changed lines of a snapshot to the canvas.
"""

from __future__ import annotations

from typing import List, Sequence

from ..core.canvas import Canvas
from .snapshot_builder import RenderRecord


def flatten(records: Sequence[RenderRecord]) -> List[str]:
    """Split a snapshot into one string per physical canvas row."""
    return "".join(r.text for r in records).split("\n")


class DiffWriter:
    """
    Hold what the canvas currently shows and apply snapshots as row diffs.

    Attributes:
        previous_output: Rows as last applied to the canvas.
        scrolling: True while the user has scrolled back; suppresses the
            snap-to-bottom after a write.
    """

    def __init__(self, canvas: Canvas) -> None:
        self.canvas = canvas
        self.previous_output: List[str] = []
        self.scrolling = False

    def apply(self, records: Sequence[RenderRecord]) -> int:
        """
        Rewrite every row that is new or differs from the previous output.

        Rows the previous output had beyond the new output are blanked. The
        previous output is replaced even when nothing changed, since spinner
        frames mutate the canvas outside this path.

        Returns:
            Number of rows written
        """
        output = flatten(records)
        previous = self.previous_output
        written = 0

        for row, line in enumerate(output):
            if row >= len(previous) or previous[row] != line:
                self.canvas.set_line(row, line)
                written += 1
        for row in range(len(output), len(previous)):
            if previous[row]:
                self.canvas.set_line(row, "")
                written += 1

        if written:
            if not self.scrolling:
                self.canvas.set_scroll_percent(100)
            self.canvas.render()

        self.previous_output = output
        return written

    def force_full_redraw(self) -> None:
        """Forget the previous output so the next apply rewrites every row."""
        self.previous_output = []
