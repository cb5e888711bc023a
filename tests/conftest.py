from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest
from typer.testing import CliRunner

from sheets_fdw.adapters.http import HttpRequest, HttpResponse
from sheets_fdw.cli.main import app
from sheets_fdw.errors import TransportError

PREFIX = ")]}'\n"

SAMPLE_ROWS: List[Any] = [
    {"c": [{"v": 1.0, "f": "1"}, {"v": "Erlich Bachman"}, {"v": "Date(2023,5,10)", "f": "6/10/2023"}]},
    {"c": [{"v": 2.0, "f": "2"}, {"v": "Richard Hendricks"}, None]},
    {"c": [{"v": 3.0, "f": "3"}]},
]


def gviz_body(rows: List[Any]) -> str:
    payload = {"version": "0.6", "status": "ok", "table": {"cols": [], "rows": rows}}
    return PREFIX + json.dumps(payload)


class FakeTransport:
    """Records requests and replays canned bodies, one per call."""

    def __init__(self, *bodies: str, error: Optional[Exception] = None) -> None:
        self.bodies = list(bodies)
        self.error = error
        self.requests: List[HttpRequest] = []

    def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        body = self.bodies.pop(0) if len(self.bodies) > 1 else self.bodies[0]
        return HttpResponse(status_code=200, body=body)


@pytest.fixture()
def gviz() -> Callable[[List[Any]], str]:
    return gviz_body


@pytest.fixture()
def sample_rows() -> List[Any]:
    return json.loads(json.dumps(SAMPLE_ROWS))


@pytest.fixture()
def make_transport() -> Callable[..., FakeTransport]:
    return FakeTransport


@pytest.fixture()
def sample_transport() -> FakeTransport:
    return FakeTransport(gviz_body(SAMPLE_ROWS))


@pytest.fixture()
def failing_transport() -> FakeTransport:
    return FakeTransport(error=TransportError("HTTP error while calling GET https://example.test: boom"))


@pytest.fixture()
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "tables.yaml"
    path.write_text(
        """
server:
  base_url: https://sheets.example.test/d
tables:
  - name: people
    description: Pied Piper staff
    options:
      sheet_id: sheet-123
    columns:
      - {name: id, type: bigint}
      - {name: name, type: text}
      - {name: born, type: date}
""".lstrip(),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_app():
    return app
