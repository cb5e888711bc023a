"""
Foreign data wrapper lifecycle for Google Sheets.

The host drives a :class:`SheetsFdw` through::

    fdw = SheetsFdw.init(ctx)          # resolve base_url
    fdw.begin_scan(ctx)                # fetch and buffer all rows
    while fdw.iter_scan(ctx, row) is not None:
        ...                            # one row per call
    fdw.end_scan(ctx)                  # drop buffered rows

Each instance owns one :class:`~sheets_fdw.core.state.ConnectorState`, so a host
running several foreign tables creates one wrapper per table. Calls are expected
one at a time; the wrapper does no locking. The table is read-only: re-scans and
modifications are refused.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Optional

from .adapters.http import HttpTransport, HttpxTransport
from .adapters.sheets import SheetsClient
from .config import resolve_server_settings, resolve_table_settings
from .core.context import OptionsType, ScanContext
from .core.logging import get_logger, log_progress
from .core.state import ConnectorState, ScanPhase
from .core.types import Cell, Row
from .errors import UnsupportedOperation
from .mapping import fill_row

HOST_VERSION_REQUIREMENT = "^0.1.0"

# returned by iter_scan for every produced row
ROW_PRODUCED = 0


@dataclass(slots=True)
class SheetsFdw:
    """
    Read-only foreign data wrapper over one spreadsheet endpoint.

    Build instances with :meth:`init`; the constructor is public for tests that
    want to inject a prepared state or client.
    """

    state: ConnectorState
    client: SheetsClient
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(__name__, extra={"base_url": self.state.base_url})

    @staticmethod
    def host_version_requirement() -> str:
        """Semver requirement on the host wrapper runtime."""

        return HOST_VERSION_REQUIREMENT

    @classmethod
    def init(cls, ctx: ScanContext, *, transport: Optional[HttpTransport] = None) -> "SheetsFdw":
        """Resolve server options and create the connector state."""

        settings = resolve_server_settings(ctx.get_options(OptionsType.SERVER))
        state = ConnectorState(base_url=settings.base_url)
        client = SheetsClient(base_url=settings.base_url, transport=transport or HttpxTransport())
        return cls(state=state, client=client)

    @property
    def phase(self) -> ScanPhase:
        return self.state.phase

    def begin_scan(self, ctx: ScanContext) -> None:
        """
        Fetch the sheet and buffer its rows.

        Rows of any earlier scan are dropped before the request, so a failed
        fetch leaves the row store empty and no scan open.
        """

        self.state.reset()

        settings = resolve_table_settings(ctx.get_options(OptionsType.TABLE))
        log_progress(self.logger, "Fetching sheet", phase="begin_scan", status="started", extra={"sheet_id": settings.sheet_id})
        rows = self.client.fetch_rows(settings.sheet_id)
        self.state.load(rows)

        ctx.get_logger(__name__).info("We got response array length: %d", len(rows))

    def iter_scan(self, ctx: ScanContext, row: Row) -> Optional[int]:
        """
        Map the next buffered row into ``row``.

        Returns ``0`` when a row was produced and ``None`` once every row has
        been handed out. ``row`` is left untouched in the latter case.

        Raises
        ------
        UnsupportedType
            When a requested column type has no mapping rule.
        """

        if not self.state.is_open or self.state.cursor >= len(self.state.source_rows):
            return None

        source_row: Any = self.state.source_rows[self.state.cursor]
        fill_row(ctx.get_columns(), source_row, row)
        self.state.advance()
        return ROW_PRODUCED

    def re_scan(self, ctx: ScanContext) -> None:
        raise UnsupportedOperation("re_scan on foreign table is not supported")

    def end_scan(self, ctx: ScanContext) -> None:
        """Drop buffered rows. Safe to call in any state, any number of times."""

        if self.state.is_open:
            log_progress(
                self.logger,
                "Scan finished",
                phase="end_scan",
                status="done",
                extra={"rows": len(self.state.source_rows), "cursor": self.state.cursor},
            )
        self.state.clear()

    def begin_modify(self, ctx: ScanContext) -> None:
        raise UnsupportedOperation("modify on foreign table is not supported")

    # begin_modify always fails, so the calls below are only reachable when a
    # host invokes them directly; they accept and discard the request.

    def insert(self, ctx: ScanContext, row: Row) -> None:
        return None

    def update(self, ctx: ScanContext, rowid: Cell, row: Row) -> None:
        return None

    def delete(self, ctx: ScanContext, rowid: Cell) -> None:
        return None

    def end_modify(self, ctx: ScanContext) -> None:
        return None
