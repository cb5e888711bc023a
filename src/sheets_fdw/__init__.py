"""
Read-only foreign data wrapper exposing public Google Sheets documents as tables.

:class:`SheetsFdw` implements the host scan lifecycle (init, begin/iter/end
scan) on top of :mod:`sheets_fdw.adapters.sheets`, which fetches the sheet, and
:mod:`sheets_fdw.mapping`, which types each cell. :class:`QueryService` runs the
lifecycle end to end for scripts and the ``sheets-fdw`` CLI.
"""

from .core import Cell, CellKind, Column, ConnectorState, Row, ScanContext, ScanPhase, TypeOid
from .errors import ConnectorError, FormatError, MissingOption, TransportError, UnsupportedOperation, UnsupportedType
from .fdw import SheetsFdw
from .services import QueryService

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "CellKind",
    "Column",
    "ConnectorError",
    "ConnectorState",
    "FormatError",
    "MissingOption",
    "QueryService",
    "Row",
    "ScanContext",
    "ScanPhase",
    "SheetsFdw",
    "TransportError",
    "TypeOid",
    "UnsupportedOperation",
    "UnsupportedType",
]
