"""
Typed values exchanged with the host query engine.

A target row is a sequence of optional :class:`Cell` values, one per requested
:class:`Column`. ``None`` in a row stands for an absent (SQL ``NULL``) cell.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional, Union

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TypeOid(str, Enum):
    """Closed set of column types the host can request."""

    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    F32 = "f32"
    I32 = "i32"
    F64 = "f64"
    I64 = "i64"
    NUMERIC = "numeric"
    STRING = "string"
    DATE = "date"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    JSON = "json"

    @classmethod
    def from_sql(cls, name: str) -> "TypeOid":
        """Translate a SQL type spelling (``bigint``, ``text``...) into a member."""

        key = " ".join(name.strip().lower().split())
        try:
            return _SQL_TYPE_NAMES[key]
        except KeyError:
            pass
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown column type '{name}'.") from None


_SQL_TYPE_NAMES = {
    "boolean": TypeOid.BOOL,
    "bool": TypeOid.BOOL,
    "smallint": TypeOid.I16,
    "int2": TypeOid.I16,
    "real": TypeOid.F32,
    "float4": TypeOid.F32,
    "integer": TypeOid.I32,
    "int": TypeOid.I32,
    "int4": TypeOid.I32,
    "double precision": TypeOid.F64,
    "float8": TypeOid.F64,
    "bigint": TypeOid.I64,
    "int8": TypeOid.I64,
    "numeric": TypeOid.NUMERIC,
    "decimal": TypeOid.NUMERIC,
    "text": TypeOid.STRING,
    "varchar": TypeOid.STRING,
    "character varying": TypeOid.STRING,
    "date": TypeOid.DATE,
    "timestamp": TypeOid.TIMESTAMP,
    "timestamp without time zone": TypeOid.TIMESTAMP,
    "timestamptz": TypeOid.TIMESTAMPTZ,
    "timestamp with time zone": TypeOid.TIMESTAMPTZ,
    "json": TypeOid.JSON,
    "jsonb": TypeOid.JSON,
}


@dataclass(slots=True, frozen=True)
class Column:
    """
    Target column requested by the host.

    Attributes
    ----------
    num:
        1-based ordinal position. Maps to index ``num - 1`` of a source row.
    name:
        Column name, used in error messages and result dictionaries.
    type_oid:
        Requested semantic type.
    """

    num: int
    name: str
    type_oid: TypeOid


class CellKind(str, Enum):
    I64 = "i64"
    STRING = "string"
    DATE = "date"


@dataclass(slots=True, frozen=True)
class Cell:
    """Tagged cell value. Build instances with :meth:`i64`, :meth:`string` or :meth:`date`."""

    kind: CellKind
    value: Union[int, str, date]

    @classmethod
    def i64(cls, value: int) -> "Cell":
        if not I64_MIN <= value <= I64_MAX:
            raise OverflowError(f"{value} does not fit in a 64-bit integer")
        return cls(CellKind.I64, value)

    @classmethod
    def string(cls, value: str) -> "Cell":
        return cls(CellKind.STRING, value)

    @classmethod
    def date(cls, value: date) -> "Cell":
        if isinstance(value, datetime):
            value = value.date()
        return cls(CellKind.DATE, value)

    @property
    def epoch_micros(self) -> int:
        """Microseconds since the Unix epoch at midnight UTC (date cells only)."""

        if self.kind is not CellKind.DATE:
            raise TypeError(f"{self.kind.value} cell has no epoch representation")
        if not isinstance(self.value, date):
            raise TypeError(f"date cell holds {type(self.value).__name__}, expected date")
        midnight = datetime(self.value.year, self.value.month, self.value.day, tzinfo=timezone.utc)
        delta = midnight - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * 1_000_000

    def to_python(self) -> Union[int, str, date]:
        return self.value


@dataclass(slots=True)
class Row:
    """Target row the scanner fills one cell at a time."""

    cells: List[Optional[Cell]] = field(default_factory=list)

    def push(self, cell: Optional[Cell]) -> None:
        self.cells.append(cell)

    def clear(self) -> None:
        self.cells.clear()

    def __len__(self) -> int:
        return len(self.cells)
