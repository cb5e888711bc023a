"""
Adapters for the remote spreadsheet source and its HTTP transport.
"""

from .base import DataSourceAdapter, VerificationResult
from .http import HttpRequest, HttpResponse, HttpTransport, HttpxTransport, Method
from .sheets import SheetsAdapter, SheetsClient, decode_rows, resolve_pointer

__all__ = [
    "DataSourceAdapter",
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "HttpxTransport",
    "Method",
    "SheetsAdapter",
    "SheetsClient",
    "VerificationResult",
    "decode_rows",
    "resolve_pointer",
]
