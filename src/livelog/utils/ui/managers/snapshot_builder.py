"""
Build terminal render records from a log graph snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ....logger.levels import LogLevel
from ....logger.log_entry import LogEntry
from ....logger.renderers import format_for_terminal, left_pad, render_raw
from ...text import hard_wrap
from .spinner_scheduler import Coords, SpinnerScheduler

EntryRenderer = Callable[[LogEntry], str]


@dataclass
class RenderRecord:
    """One visible entry, wrapped and positioned on the canvas."""

    key: str
    text: str
    line_number: int
    spinner_coords: Optional[Coords] = None


def _render_fancy(entry: LogEntry) -> str:
    return format_for_terminal(entry, "fancy")


class SnapshotBuilder:
    """
    Turn the current graph snapshot into an ordered list of RenderRecords.

    Entries above the severity threshold are dropped. Active entries get a
    spinner glyph spliced in at their left-padding column, every other entry
    has its spinner state forgotten.
    """

    def __init__(
        self,
        spinners: SpinnerScheduler,
        render_fancy: EntryRenderer = _render_fancy,
        render_stream: EntryRenderer = render_raw,
        prefix: EntryRenderer = left_pad,
    ) -> None:
        self._spinners = spinners
        self._render_fancy = render_fancy
        self._render_stream = render_stream
        self._prefix = prefix

    def build(self, entries: Iterable[LogEntry], level: LogLevel, width: int) -> List[RenderRecord]:
        """
        Render every visible entry.

        Args:
            entries: Graph entries in depth-first order
            level: Severity threshold; entries with a higher level are hidden
            width: Canvas width; text is hard-wrapped to ``width - 2``

        Returns:
            RenderRecords in traversal order with contiguous line numbers
        """
        records: List[RenderRecord] = []
        line_number = 0

        for entry in entries:
            if entry.level > level:
                continue

            spinner_coords: Optional[Coords] = None
            frame = ""
            if entry.status == "active":
                spinner_x = len(self._prefix(entry))
                frame = self._spinners.tick(entry.key)
                spinner_coords = (spinner_x, line_number)
            else:
                self._spinners.forget(entry.key)

            render = self._render_stream if entry.from_live_stream else self._render_fancy
            text = render(entry)
            if frame and text:
                text = f"{text[:spinner_x]}{frame} {text[spinner_x:]}"
            text = hard_wrap(text, width - 2) if text else ""

            if text:
                records.append(
                    RenderRecord(
                        key=entry.key,
                        text=text,
                        line_number=line_number,
                        spinner_coords=spinner_coords,
                    )
                )

            line_number += len(text.split("\n")) - 1

        return records
