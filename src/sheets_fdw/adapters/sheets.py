"""
Google Sheets visualization query client.

Public spreadsheets can be read through the ``gviz/tq`` endpoint, which returns
a JSON table wrapped in an anti-hijacking prefix::

    )]}'
    {"version":"0.6","status":"ok","table":{"cols":[...],"rows":[{"c":[{"v":1.0,"f":"1"}, null]}]}}

The client performs one GET per fetch, strips the prefix, decodes the JSON and
returns the ``table.rows`` array untouched. Typing individual cells is left to
:mod:`sheets_fdw.mapping`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, List, Optional

from ..config import DEFAULT_BASE_URL
from ..core.logging import get_logger
from ..errors import ConnectorError, FormatError
from .base import DataSourceAdapter, VerificationResult
from .http import HttpRequest, HttpTransport, HttpxTransport, Method

QUERY_PATH = "gviz/tq?tqx=out:json"
RESPONSE_PREFIX = ")]}'\n"
ROWS_POINTER = "/table/rows"
USER_AGENT = "Sheets FDW"
DEFAULT_HEADERS = (
    ("user-agent", USER_AGENT),
    # asks the endpoint for a plain JSON body instead of a JSONP callback
    ("x-datasource-auth", "true"),
)


def resolve_pointer(document: Any, pointer: str) -> Optional[Any]:
    """
    Resolve an RFC 6901 JSON pointer against a decoded document.

    Returns ``None`` when any step is missing. A JSON ``null`` at the target is
    also returned as ``None``; callers that must tell the two apart should walk
    the document themselves.
    """

    if pointer == "":
        return document
    if not pointer.startswith("/"):
        return None
    current = document
    for token in pointer[1:].split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if token not in current:
                return None
            current = current[token]
        elif isinstance(current, list):
            if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
                return None
            index = int(token)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def decode_rows(body: str) -> List[Any]:
    """
    Turn a raw ``gviz`` response body into the list of source rows.

    Raises
    ------
    FormatError
        When the prefix is missing, the JSON is malformed, or ``table.rows`` is
        not an array.
    """

    if not body.startswith(RESPONSE_PREFIX):
        raise FormatError("invalid response")
    try:
        payload = json.loads(body[len(RESPONSE_PREFIX) :], parse_constant=_reject_constant)
    except ValueError as exc:
        raise FormatError(str(exc)) from exc

    rows = resolve_pointer(payload, ROWS_POINTER)
    if not isinstance(rows, list):
        raise FormatError("cannot get rows from response")
    return rows


@dataclass(slots=True)
class SheetsClient:
    """
    Fetcher for a single spreadsheet document.

    Parameters
    ----------
    base_url:
        Root of the spreadsheet endpoint. The sheet id and query path are
        appended to it.
    transport:
        HTTP collaborator. Defaults to :class:`HttpxTransport`.
    """

    base_url: str = DEFAULT_BASE_URL
    transport: HttpTransport = field(default_factory=HttpxTransport)
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(
            f"{self.__class__.__module__}.{self.__class__.__name__}",
            extra={"base_url": self.base_url},
        )

    def build_url(self, sheet_id: str) -> str:
        return f"{self.base_url}/{sheet_id}/{QUERY_PATH}"

    def build_request(self, sheet_id: str) -> HttpRequest:
        return HttpRequest(method=Method.GET, url=self.build_url(sheet_id), headers=DEFAULT_HEADERS, body="")

    def fetch_rows(self, sheet_id: str) -> List[Any]:
        """Fetch the document once and return its raw rows in source order."""

        response = self.transport.send(self.build_request(sheet_id))
        return decode_rows(response.body)


@dataclass(slots=True)
class SheetsAdapter(DataSourceAdapter):
    """Connectivity check for one spreadsheet document."""

    sheet_id: str
    client: SheetsClient = field(default_factory=SheetsClient)

    def verify(self) -> VerificationResult:
        try:
            rows = self.client.fetch_rows(self.sheet_id)
        except ConnectorError as exc:
            return VerificationResult(success=False, message=f"Sheets verification failed: {exc}")

        message = "Spreadsheet reachable." if rows else "Spreadsheet reachable but returned no rows."
        return VerificationResult(
            success=True,
            message=message,
            details={
                "sheet_id": self.sheet_id,
                "url": self.client.build_url(self.sheet_id),
                "rows": len(rows),
            },
        )
