"""
Source cell to target cell conversion.

A source row looks like ``{"c": [{"v": 1.0, "f": "1"}, {"v": "Erlich"}, null]}``.
Column ``num`` reads the raw ``v`` of cell ``num - 1``. A missing position is an
absent cell, never an error. A value of the wrong shape for the requested type
is also an absent cell. Only a column type with no rule at all aborts the scan.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Optional, Sequence

from .core.logging import get_logger
from .core.types import I64_MAX, I64_MIN, Cell, Column, Row, TypeOid
from .dates import parse_date_literal
from .errors import UnsupportedType

logger = get_logger(__name__)

_MISSING = object()


def lookup_raw(source_row: Any, num: int) -> Any:
    """
    Return the raw ``v`` of the cell at ordinal ``num`` (1-based).

    Returns the ``_MISSING`` sentinel when the row has no such cell. A JSON
    ``null`` stored under ``v`` is returned as ``None``.
    """

    if not isinstance(source_row, dict) or num < 1:
        return _MISSING
    cells = source_row.get("c")
    if not isinstance(cells, list) or num > len(cells):
        return _MISSING
    cell = cells[num - 1]
    if not isinstance(cell, dict) or "v" not in cell:
        return _MISSING
    return cell["v"]


def _saturate_i64(value: float | int) -> int:
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if math.isinf(value):
            return I64_MAX if value > 0 else I64_MIN
        value = math.trunc(value)
    return max(I64_MIN, min(I64_MAX, int(value)))


def _map_i64(raw: Any) -> Optional[Cell]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return Cell.i64(_saturate_i64(raw))


def _map_string(raw: Any) -> Optional[Cell]:
    if not isinstance(raw, str):
        return None
    return Cell.string(raw)


def _map_date(raw: Any) -> Optional[Cell]:
    return parse_date_literal(raw if isinstance(raw, str) else "")


CellMapper = Callable[[Any], Optional[Cell]]

MAPPERS: Dict[TypeOid, CellMapper] = {
    TypeOid.I64: _map_i64,
    TypeOid.STRING: _map_string,
    TypeOid.DATE: _map_date,
}


def map_cell(column: Column, source_row: Any) -> Optional[Cell]:
    """
    Convert one source cell into the target cell for ``column``.

    Raises
    ------
    UnsupportedType
        When the cell exists and ``column.type_oid`` has no mapping rule.
    """

    raw = lookup_raw(source_row, column.num)
    if raw is _MISSING:
        return None
    mapper = MAPPERS.get(column.type_oid)
    if mapper is None:
        raise UnsupportedType(column.name)
    cell = mapper(raw)
    if cell is None and raw is not None:
        logger.debug("Value %r of column %s does not map to %s", raw, column.name, column.type_oid.value)
    return cell


def fill_row(columns: Sequence[Column], source_row: Any, row: Row) -> None:
    """Push one target cell per column into ``row``, in column order."""

    for column in columns:
        row.push(map_cell(column, source_row))
