"""
Context handed to every lifecycle call by the host query engine.

The host owns two option bags (foreign server and foreign table) and the list
of columns a query asks for. :class:`ScanContext` bundles them so lifecycle
methods can stay declarative about what they read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from logging import LoggerAdapter
from typing import Dict, Iterator, Mapping, Optional, Sequence

from ..errors import MissingOption
from .logging import get_logger as _get_logger
from .types import Column


class OptionsType(str, Enum):
    """Scope an option bag belongs to."""

    SERVER = "server"
    TABLE = "table"


class Options(Mapping[str, str]):
    """Read-only option bag with the host's ``require`` helpers."""

    def __init__(self, kind: OptionsType, values: Optional[Mapping[str, object]] = None) -> None:
        self.kind = kind
        self._values: Dict[str, str] = {str(key): str(value) for key, value in (values or {}).items() if value is not None}

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Options({self.kind.value}, {self._values!r})"

    def require(self, key: str) -> str:
        """Return a non-empty option value or raise :class:`MissingOption`."""

        value = self._values.get(key)
        if not value:
            raise MissingOption(key)
        return value

    def require_or(self, key: str, default: str) -> str:
        """Return a non-empty option value or ``default``."""

        return self._values.get(key) or default


@dataclass(slots=True)
class ScanContext:
    """
    Host-provided context for one lifecycle call.

    Attributes
    ----------
    server_options:
        Options declared on the foreign server.
    table_options:
        Options declared on the foreign table.
    columns:
        Target columns requested by the current query, in output order.
    tags:
        Observability tags attached to log records emitted during the call.
    """

    server_options: Options = field(default_factory=lambda: Options(OptionsType.SERVER))
    table_options: Options = field(default_factory=lambda: Options(OptionsType.TABLE))
    columns: Sequence[Column] = field(default_factory=tuple)
    tags: Sequence[str] = field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        *,
        server_options: Optional[Mapping[str, object]] = None,
        table_options: Optional[Mapping[str, object]] = None,
        columns: Optional[Sequence[Column]] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> "ScanContext":
        """Construct a context from plain mappings."""

        return cls(
            server_options=Options(OptionsType.SERVER, server_options),
            table_options=Options(OptionsType.TABLE, table_options),
            columns=tuple(columns or ()),
            tags=tuple(tags or ()),
        )

    def get_options(self, kind: OptionsType) -> Options:
        if kind is OptionsType.SERVER:
            return self.server_options
        return self.table_options

    def get_columns(self) -> Sequence[Column]:
        return self.columns

    def get_logger(self, name: str, *, extra: Optional[Mapping[str, object]] = None) -> LoggerAdapter:
        """Return a logger adapter carrying this context's tags."""

        return _get_logger(name, tags=self.tags or None, extra=extra)
