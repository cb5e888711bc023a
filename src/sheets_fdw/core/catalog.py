"""
Foreign table catalogue.

The catalogue plays the role of the host's ``CREATE SERVER`` and
``CREATE FOREIGN TABLE`` statements for command-line use. It is loaded from a
YAML document so tables can be declared without writing Python::

    server:
      base_url: https://docs.google.com/spreadsheets/d
    tables:
      - name: people
        options:
          sheet_id: 1AbC...
        columns:
          - {name: id, type: bigint}
          - {name: name, type: text}
          - {name: born, type: date}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, MutableMapping, Optional, Sequence

import yaml

from .types import Column, TypeOid


class CatalogLoadError(RuntimeError):
    """Raised when a catalogue YAML file cannot be parsed or validated."""


@dataclass(slots=True)
class ForeignTable:
    """
    Declaration of one foreign table.

    Parameters
    ----------
    name:
        Table name, unique within the catalogue.
    options:
        Table-scoped options (``sheet_id``).
    columns:
        Columns in declaration order. ``num`` follows that order starting at 1.
    description:
        Optional free-form note shown by ``tables describe``.
    """

    name: str
    options: Mapping[str, str] = field(default_factory=dict)
    columns: Sequence[Column] = field(default_factory=tuple)
    description: Optional[str] = None

    def validate(self) -> None:
        if not self.name:
            raise CatalogLoadError("Foreign table is missing a name.")
        if not self.columns:
            raise CatalogLoadError(f"Foreign table '{self.name}' declares no columns.")
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise CatalogLoadError(f"Foreign table '{self.name}' declares column '{column.name}' twice.")
            seen.add(column.name)

    def to_json(self) -> str:
        payload = {
            "name": self.name,
            "options": dict(self.options),
            "columns": [{"num": column.num, "name": column.name, "type": column.type_oid.value} for column in self.columns],
            "description": self.description,
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)


class TableCatalog:
    """In-memory catalogue of :class:`ForeignTable` declarations plus server options."""

    def __init__(self, server_options: Optional[Mapping[str, str]] = None) -> None:
        self.server_options: Dict[str, str] = dict(server_options or {})
        self._tables: MutableMapping[str, ForeignTable] = {}

    def register(self, table: ForeignTable) -> None:
        table.validate()
        self._tables[table.name] = table

    def get(self, name: str) -> Optional[ForeignTable]:
        return self._tables.get(name)

    def require(self, name: str) -> ForeignTable:
        table = self.get(name)
        if table is None:
            raise KeyError(f"Foreign table '{name}' is not declared.")
        return table

    def list(self) -> List[ForeignTable]:
        return list(self._tables.values())

    def __iter__(self) -> Iterator[ForeignTable]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "TableCatalog":
        """Load a catalogue from a YAML document."""

        location = Path(path)
        if not location.exists():
            raise CatalogLoadError(f"Catalogue file '{location}' does not exist.")

        try:
            with location.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise CatalogLoadError(f"Failed to parse '{location}': {exc}") from exc

        return cls.from_mapping(payload, origin=str(location))

    @classmethod
    def from_mapping(cls, payload: object, *, origin: str = "<memory>") -> "TableCatalog":
        if not isinstance(payload, dict):
            raise CatalogLoadError(f"Catalogue '{origin}' must be a mapping with 'server' and 'tables' keys.")

        server = payload.get("server") or {}
        if not isinstance(server, dict):
            raise CatalogLoadError(f"'server' in '{origin}' must be a mapping of options.")

        tables = payload.get("tables") or []
        if not isinstance(tables, list):
            raise CatalogLoadError(f"'tables' in '{origin}' must be a list.")

        catalog = cls(server_options=_string_map(server))
        for entry in tables:
            table = _table_from_payload(entry, origin=origin)
            if catalog.get(table.name):
                raise CatalogLoadError(f"Foreign table '{table.name}' is declared twice in '{origin}'.")
            catalog.register(table)
        return catalog


def _table_from_payload(entry: object, *, origin: str) -> ForeignTable:
    if not isinstance(entry, dict):
        raise CatalogLoadError(f"Invalid table entry in '{origin}': expected mapping, got {type(entry)!r}")

    try:
        name = str(entry["name"])
        raw_columns = entry["columns"]
    except KeyError as exc:
        raise CatalogLoadError(f"Missing required key {exc!s} in '{origin}'.") from exc

    options = entry.get("options") or {}
    if not isinstance(options, dict):
        raise CatalogLoadError(f"Options of table '{name}' in '{origin}' must be a mapping.")
    if not isinstance(raw_columns, list):
        raise CatalogLoadError(f"Columns of table '{name}' in '{origin}' must be a list.")

    columns: List[Column] = []
    for index, raw in enumerate(raw_columns, start=1):
        if not isinstance(raw, dict) or "name" not in raw or "type" not in raw:
            raise CatalogLoadError(f"Column #{index} of table '{name}' in '{origin}' needs 'name' and 'type'.")
        try:
            type_oid = TypeOid.from_sql(str(raw["type"]))
        except ValueError as exc:
            raise CatalogLoadError(f"Invalid column '{raw['name']}' of table '{name}' in '{origin}': {exc}") from exc
        columns.append(Column(num=index, name=str(raw["name"]), type_oid=type_oid))

    description = entry.get("description")
    return ForeignTable(
        name=name,
        options=_string_map(options),
        columns=tuple(columns),
        description=str(description).strip() if description else None,
    )


def _string_map(values: Mapping[object, object]) -> Dict[str, str]:
    return {str(key): str(value) for key, value in values.items() if value is not None}
