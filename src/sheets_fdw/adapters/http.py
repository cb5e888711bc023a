"""
HTTP collaborator used by the fetcher.

The connector describes a request as a plain :class:`HttpRequest` and hands it
to an :class:`HttpTransport`. The default transport is a thin HTTPX wrapper that
sends exactly one request: no retries, and HTTPX's default timeout. Response
status codes are passed through untouched; callers decide what a usable body
looks like.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from logging import LoggerAdapter
from typing import Optional, Protocol, Sequence, Tuple

import httpx

from ..core.logging import get_logger, log_progress
from ..errors import TransportError


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(slots=True, frozen=True)
class HttpRequest:
    """Outbound request: method, absolute URL, header pairs and body."""

    method: Method
    url: str
    headers: Sequence[Tuple[str, str]] = ()
    body: str = ""


@dataclass(slots=True, frozen=True)
class HttpResponse:
    """Inbound response: status code and decoded body text."""

    status_code: int
    body: str
    headers: Sequence[Tuple[str, str]] = ()


class HttpTransport(Protocol):
    """Anything able to turn an :class:`HttpRequest` into an :class:`HttpResponse`."""

    def send(self, request: HttpRequest) -> HttpResponse:
        """Send ``request`` once and return the response, or raise :class:`TransportError`."""


@dataclass(slots=True)
class HttpxTransport:
    """
    :class:`HttpTransport` backed by :class:`httpx.Client`.

    Parameters
    ----------
    transport:
        Optional low-level HTTPX transport, e.g. :class:`httpx.MockTransport`
        in tests.
    """

    transport: Optional[httpx.BaseTransport] = None
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def _build_client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport, follow_redirects=True)

    def send(self, request: HttpRequest) -> HttpResponse:
        log_progress(
            self.logger,
            "HTTP request",
            level=logging.DEBUG,
            extra={"method": request.method.value, "url": request.url},
        )
        try:
            with self._build_client() as client:
                response = client.request(
                    request.method.value,
                    request.url,
                    headers=list(request.headers),
                    content=request.body or None,
                )
        except httpx.HTTPError as exc:
            log_progress(
                self.logger,
                "HTTP error during request",
                level=logging.ERROR,
                extra={"method": request.method.value, "url": request.url, "error": str(exc)},
            )
            raise TransportError(f"HTTP error while calling {request.method.value} {request.url}: {exc}") from exc

        log_progress(
            self.logger,
            "HTTP response",
            level=logging.DEBUG,
            extra={"status_code": response.status_code, "url": str(response.url)},
        )
        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            headers=tuple(response.headers.items()),
        )
