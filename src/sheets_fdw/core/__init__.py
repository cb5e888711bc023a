"""
Core primitives shared by the connector, the scan service and the CLI.

The package only depends on the standard library and PyYAML. It exposes the
host-facing value types, the per-connector state, the foreign table catalogue
and the logging helpers.
"""

from .catalog import CatalogLoadError, ForeignTable, TableCatalog
from .context import Options, OptionsType, ScanContext
from .logging import configure_logging, get_logger, log_progress
from .state import ConnectorState, ScanPhase
from .types import Cell, CellKind, Column, Row, TypeOid

__all__ = [
    "CatalogLoadError",
    "Cell",
    "CellKind",
    "Column",
    "ConnectorState",
    "ForeignTable",
    "Options",
    "OptionsType",
    "Row",
    "ScanContext",
    "ScanPhase",
    "TableCatalog",
    "TypeOid",
    "configure_logging",
    "get_logger",
    "log_progress",
]
