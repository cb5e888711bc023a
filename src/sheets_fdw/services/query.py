"""
Scan service that plays the host's part of the lifecycle.

The CLI and scripts use :class:`QueryService` to read a foreign table without a
database: it initialises a wrapper, opens a scan, pulls rows until the wrapper
reports exhaustion, and always closes the scan again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from logging import LoggerAdapter
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from ..adapters.base import VerificationResult
from ..adapters.http import HttpTransport
from ..adapters.sheets import SheetsAdapter, SheetsClient
from ..config import resolve_server_settings
from ..core import Column, ForeignTable, Row, ScanContext, TableCatalog, get_logger, log_progress
from ..fdw import SheetsFdw

Value = Union[int, str, date, None]


@dataclass(slots=True)
class QueryService:
    """
    Façade over :class:`SheetsFdw` for catalogue-driven or ad-hoc scans.

    Parameters
    ----------
    catalog:
        Declared foreign tables and server options.
    transport:
        Optional HTTP collaborator override, mainly for tests.
    tags:
        Observability tags attached to scan log records.
    """

    catalog: TableCatalog = field(default_factory=TableCatalog)
    transport: Optional[HttpTransport] = None
    tags: Sequence[str] = field(default_factory=tuple)
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__, tags=self.tags or None)

    def _context(self, table_options: Mapping[str, str], columns: Sequence[Column]) -> ScanContext:
        return ScanContext.build(
            server_options=self.catalog.server_options,
            table_options=table_options,
            columns=columns,
            tags=self.tags,
        )

    def iter_rows(
        self,
        table_options: Mapping[str, str],
        columns: Sequence[Column],
        *,
        limit: Optional[int] = None,
    ) -> Iterator[Dict[str, Value]]:
        """
        Yield rows of one scan as ``{column name: value}`` dictionaries.

        The scan is closed when iteration finishes, fails, or is abandoned.
        """

        ctx = self._context(table_options, columns)
        fdw = SheetsFdw.init(ctx, transport=self.transport)
        produced = 0
        try:
            fdw.begin_scan(ctx)
            while limit is None or produced < limit:
                row = Row()
                if fdw.iter_scan(ctx, row) is None:
                    break
                produced += 1
                yield {column.name: (cell.to_python() if cell is not None else None) for column, cell in zip(columns, row.cells)}
        finally:
            fdw.end_scan(ctx)
            log_progress(self.logger, "Scan closed", phase="scan", status="closed", extra={"rows": produced})

    def scan(
        self,
        table_options: Mapping[str, str],
        columns: Sequence[Column],
        *,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Value]]:
        """Run one complete scan and return its rows."""

        return list(self.iter_rows(table_options, columns, limit=limit))

    def scan_table(self, name: str, *, limit: Optional[int] = None) -> List[Dict[str, Value]]:
        """Scan a foreign table declared in the catalogue."""

        table: ForeignTable = self.catalog.require(name)
        log_progress(self.logger, "Scanning foreign table", phase="scan", status="started", extra={"table": name})
        return self.scan(table.options, table.columns, limit=limit)

    def verify(self, sheet_id: str) -> VerificationResult:
        """Check that ``sheet_id`` can be fetched and decoded."""

        settings = resolve_server_settings(self.catalog.server_options)
        kwargs: Dict[str, Any] = {"base_url": settings.base_url}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return SheetsAdapter(sheet_id=sheet_id, client=SheetsClient(**kwargs)).verify()
