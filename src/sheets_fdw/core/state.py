"""
Per-connector scan state.

One :class:`ConnectorState` is created when the connector is initialised and is
owned by that connector instance for its whole lifetime. It buffers the rows of
the current scan (the row store) and the cursor into them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Sequence


class ScanPhase(str, Enum):
    """Lifecycle position of the scanner."""

    IDLE = "idle"
    SCANNING = "scanning"
    EXHAUSTED = "exhausted"
    ENDED = "ended"


@dataclass(slots=True)
class ConnectorState:
    """
    Mutable state shared by the lifecycle calls of one connector.

    Attributes
    ----------
    base_url:
        Root of the spreadsheet endpoint, resolved from server options.
    source_rows:
        Raw rows of the current scan, in source order.
    cursor:
        Offset of the next row to hand out. Always ``0 <= cursor <= len(source_rows)``.
    phase:
        Current scanner state.
    """

    base_url: str
    source_rows: List[Any] = field(default_factory=list)
    cursor: int = 0
    phase: ScanPhase = ScanPhase.IDLE

    @property
    def is_open(self) -> bool:
        return self.phase in (ScanPhase.SCANNING, ScanPhase.EXHAUSTED)

    @property
    def remaining(self) -> int:
        return len(self.source_rows) - self.cursor

    def reset(self) -> None:
        """Drop rows from any earlier scan before a new fetch."""

        self.source_rows = []
        self.cursor = 0
        if self.is_open:
            self.phase = ScanPhase.ENDED

    def load(self, rows: Sequence[Any]) -> None:
        """Replace the row store with a freshly fetched row set and rewind."""

        self.source_rows = list(rows)
        self.cursor = 0
        self.phase = ScanPhase.SCANNING if self.source_rows else ScanPhase.EXHAUSTED

    def advance(self) -> Any:
        """Return the row under the cursor and move past it."""

        row = self.source_rows[self.cursor]
        self.cursor += 1
        if self.cursor == len(self.source_rows):
            self.phase = ScanPhase.EXHAUSTED
        return row

    def clear(self) -> None:
        self.source_rows.clear()
        self.cursor = 0
        self.phase = ScanPhase.ENDED
