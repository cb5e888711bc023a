"""
Error taxonomy surfaced to the host query engine.

Every lifecycle call either succeeds or raises exactly one
:class:`ConnectorError` subclass. The message is what the host shows to the
user, so it is kept short and descriptive.
"""

from __future__ import annotations


class ConnectorError(RuntimeError):
    """Base class for all failures reported by the connector."""


class MissingOption(ConnectorError):
    """Raised when a required foreign server or table option is absent."""

    def __init__(self, option: str) -> None:
        super().__init__(f"required option '{option}' is not specified")
        self.option = option


class TransportError(ConnectorError):
    """Raised when the HTTP request to the remote source cannot be completed."""


class FormatError(ConnectorError):
    """Raised when the remote response cannot be decoded into source rows."""


class UnsupportedType(ConnectorError):
    """Raised when a target column requests a type with no mapping rule."""

    def __init__(self, column: str) -> None:
        super().__init__(f"column {column} data type is not supported")
        self.column = column


class UnsupportedOperation(ConnectorError):
    """Raised for lifecycle calls the connector refuses (re-scan, modify)."""
