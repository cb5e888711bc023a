from __future__ import annotations

import json
from unittest.mock import patch

from typer.testing import CliRunner

from sheets_fdw.adapters.base import VerificationResult
from sheets_fdw.cli.main import app
from sheets_fdw.errors import FormatError

SCAN_ROWS = [
    {"id": 1, "name": "Erlich Bachman", "born": None},
    {"id": 2, "name": None, "born": None},
]


def invoke(cli_runner: CliRunner, args: list[str]):
    return cli_runner.invoke(app, args)


def test_tables_list(cli_runner, catalog_file):
    result = invoke(cli_runner, ["--catalog", str(catalog_file), "tables", "list"])

    assert result.exit_code == 0
    assert "people" in result.stdout
    assert "sheet-123" in result.stdout


def test_tables_list_without_catalog(cli_runner):
    result = invoke(cli_runner, ["tables", "list"])

    assert result.exit_code == 0
    assert "No foreign tables declared" in result.stdout


def test_tables_describe_json(cli_runner, catalog_file):
    result = invoke(cli_runner, ["--catalog", str(catalog_file), "tables", "describe", "people", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["name"] == "people"
    assert [column["type"] for column in payload["columns"]] == ["i64", "string", "date"]


def test_tables_describe_text(cli_runner, catalog_file):
    result = invoke(cli_runner, ["--catalog", str(catalog_file), "tables", "describe", "people"])

    assert result.exit_code == 0
    assert "Option sheet_id: sheet-123" in result.stdout
    assert "born date" in result.stdout


def test_tables_describe_unknown(cli_runner, catalog_file):
    result = invoke(cli_runner, ["--catalog", str(catalog_file), "tables", "describe", "nope"])

    assert result.exit_code == 1


def test_invalid_catalog_exits(cli_runner, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("tables: 3\n", encoding="utf-8")

    result = invoke(cli_runner, ["--catalog", str(path), "tables", "list"])

    assert result.exit_code == 1


def test_scan_prints_table(cli_runner, catalog_file):
    with patch("sheets_fdw.cli.main.QueryService.scan_table", return_value=SCAN_ROWS) as scan_table:
        result = invoke(cli_runner, ["--catalog", str(catalog_file), "scan", "people", "--limit", "5"])

    assert result.exit_code == 0
    assert "Erlich Bachman" in result.stdout
    assert "(2 rows)" in result.stdout
    scan_table.assert_called_once_with("people", limit=5)


def test_scan_json_output(cli_runner, catalog_file):
    with patch("sheets_fdw.cli.main.QueryService.scan_table", return_value=SCAN_ROWS):
        result = invoke(cli_runner, ["--catalog", str(catalog_file), "scan", "people", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == SCAN_ROWS


def test_scan_reports_connector_errors(cli_runner, catalog_file):
    with patch("sheets_fdw.cli.main.QueryService.scan_table", side_effect=FormatError("invalid response")):
        result = invoke(cli_runner, ["--catalog", str(catalog_file), "scan", "people"])

    assert result.exit_code == 1
    assert "invalid response" in result.output


def test_query_parses_columns(cli_runner):
    with patch("sheets_fdw.cli.main.QueryService.scan", return_value=[{"id": 7}]) as scan:
        result = invoke(cli_runner, ["query", "sheet-1", "-C", "id:bigint", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [{"id": 7}]
    options, columns = scan.call_args.args
    assert options == {"sheet_id": "sheet-1"}
    assert [(column.num, column.name, column.type_oid.value) for column in columns] == [(1, "id", "i64")]


def test_query_rejects_bad_column_spec(cli_runner):
    result = invoke(cli_runner, ["query", "sheet-1", "-C", "id"])

    assert result.exit_code != 0


def test_verify_success(cli_runner):
    with patch(
        "sheets_fdw.cli.main.QueryService.verify",
        return_value=VerificationResult(success=True, message="Spreadsheet reachable.", details={"rows": 3}),
    ):
        result = invoke(cli_runner, ["verify", "sheet-1"])

    assert result.exit_code == 0
    assert "Spreadsheet reachable." in result.stdout


def test_verify_failure_sets_exit_code(cli_runner):
    with patch(
        "sheets_fdw.cli.main.QueryService.verify",
        return_value=VerificationResult(success=False, message="Sheets verification failed: invalid response"),
    ):
        result = invoke(cli_runner, ["verify", "sheet-1"])

    assert result.exit_code == 1
    assert "invalid response" in result.stdout
