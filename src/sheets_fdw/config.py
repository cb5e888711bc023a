"""
Option resolution for the Sheets connector.

Two option scopes are recognised:

1. Foreign server options: ``base_url`` (optional). Defaults to the public
   Google Sheets document endpoint.
2. Foreign table options: ``sheet_id`` (required). Identifies the spreadsheet
   document to read.

Call :func:`resolve_server_settings` during initialisation and
:func:`resolve_table_settings` at the start of every scan.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .core.context import Options, OptionsType

DEFAULT_BASE_URL = "https://docs.google.com/spreadsheets/d"
BASE_URL_OPTION = "base_url"
SHEET_ID_OPTION = "sheet_id"


@dataclass(slots=True, frozen=True)
class ServerSettings:
    """Connector-level settings."""

    base_url: str = DEFAULT_BASE_URL


@dataclass(slots=True, frozen=True)
class TableSettings:
    """Table-level settings."""

    sheet_id: str


def _as_options(kind: OptionsType, options: Mapping[str, object] | Options) -> Options:
    if isinstance(options, Options):
        return options
    return Options(kind, options)


def resolve_server_settings(options: Mapping[str, object] | Options) -> ServerSettings:
    """Read ``base_url`` from the server options, falling back to the public endpoint."""

    opts = _as_options(OptionsType.SERVER, options)
    return ServerSettings(base_url=opts.require_or(BASE_URL_OPTION, DEFAULT_BASE_URL))


def resolve_table_settings(options: Mapping[str, object] | Options) -> TableSettings:
    """
    Read ``sheet_id`` from the table options.

    Raises
    ------
    MissingOption
        When ``sheet_id`` is absent or empty.
    """

    opts = _as_options(OptionsType.TABLE, options)
    return TableSettings(sheet_id=opts.require(SHEET_ID_OPTION))
