"""
Typer application for reading Google Sheets foreign tables from the shell.

Commands mirror what a database host would do with the wrapper: ``scan`` runs
the full begin/iterate/end lifecycle for a catalogue table, ``query`` does the
same for an ad-hoc column list, and ``verify`` checks that a sheet is reachable.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import typer

from ..config import BASE_URL_OPTION, SHEET_ID_OPTION
from ..core import CatalogLoadError, Column, TableCatalog, TypeOid, configure_logging
from ..errors import ConnectorError
from ..services import QueryService

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Read public Google Sheets documents as typed tables.\n\n"
        "Command groups:\n"
        "- tables: list and describe foreign tables declared in a catalogue.\n"
        "- scan / query: run a read-only scan and print the rows.\n"
        "- verify: check that a sheet can be fetched and decoded."
    ),
)
tables_app = typer.Typer(help="Inspect foreign tables declared in the YAML catalogue.")
app.add_typer(tables_app, name="tables")


def _load_catalog(catalog_file: Optional[Path]) -> TableCatalog:
    if catalog_file:
        return TableCatalog.from_yaml(catalog_file)
    return TableCatalog()


def _require_catalog(ctx: typer.Context) -> TableCatalog:
    state = ctx.ensure_object(dict)
    catalog = state.get("catalog")
    if not isinstance(catalog, TableCatalog):
        raise typer.Exit(code=2)
    return catalog


def _parse_columns(values: Optional[List[str]]) -> List[Column]:
    columns: List[Column] = []
    for index, entry in enumerate(values or [], start=1):
        if ":" not in entry:
            raise typer.BadParameter(f"Column '{entry}' must use name:type format.")
        name, type_name = entry.split(":", 1)
        name = name.strip()
        if not name:
            raise typer.BadParameter(f"Column '{entry}' is missing a name.")
        try:
            type_oid = TypeOid.from_sql(type_name)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from None
        columns.append(Column(num=index, name=name, type_oid=type_oid))
    if not columns:
        raise typer.BadParameter("At least one --column is required.")
    return columns


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _emit_rows(columns: Sequence[Column], rows: List[Dict[str, Any]], output_json: bool) -> None:
    if output_json:
        typer.echo(json.dumps(rows, ensure_ascii=False, indent=2, default=_json_default))
        return

    names = [column.name for column in columns]
    widths = {name: max([len(name)] + [len(_render_value(row.get(name))) for row in rows]) for name in names}
    header = " | ".join(f"{name:<{widths[name]}}" for name in names)
    typer.echo(header)
    typer.echo("-" * len(header))
    for row in rows:
        typer.echo(" | ".join(f"{_render_value(row.get(name)):<{widths[name]}}" for name in names))
    typer.echo(f"({len(rows)} row{'s' if len(rows) != 1 else ''})")


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    catalog_file: Optional[Path] = typer.Option(
        None,
        "--catalog",
        "-c",
        help="YAML catalogue declaring the server options and foreign tables.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (defaults to SHEETS_FDW_LOG_LEVEL or INFO)."),
) -> None:
    """
    Load the catalogue and store it in Typer's state for child commands.
    """

    configure_logging(log_level, force=log_level is not None)
    try:
        catalog = _load_catalog(catalog_file)
    except CatalogLoadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    state = ctx.ensure_object(dict)
    state["catalog"] = catalog


@tables_app.command("list")
def tables_list(ctx: typer.Context) -> None:
    """List foreign tables declared in the catalogue."""

    catalog = _require_catalog(ctx)
    tables = catalog.list()
    if not tables:
        typer.echo("No foreign tables declared. Pass --catalog with a YAML catalogue.")
        raise typer.Exit(code=0)

    header = f"{'Name':<20} {'Columns':<7} Sheet"
    typer.echo(header)
    typer.echo("-" * len(header))
    for table in tables:
        typer.echo(f"{table.name:<20} {len(table.columns):<7} {table.options.get(SHEET_ID_OPTION, '-')}")


@tables_app.command("describe")
def tables_describe(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Foreign table name."),
    output_json: bool = typer.Option(False, "--json", help="Emit the declaration as JSON."),
) -> None:
    """Show options and columns of one foreign table."""

    catalog = _require_catalog(ctx)
    table = catalog.get(name)
    if not table:
        typer.echo(f"Foreign table '{name}' is not declared.", err=True)
        raise typer.Exit(code=1)

    if output_json:
        typer.echo(table.to_json())
        return

    typer.echo(f"Name: {table.name}")
    if table.description:
        typer.echo(f"Description: {table.description}")
    for key, value in table.options.items():
        typer.echo(f"Option {key}: {value}")
    typer.echo(f"Base URL: {catalog.server_options.get(BASE_URL_OPTION, '(default)')}")
    for column in table.columns:
        typer.echo(f"  {column.num:>2}. {column.name} {column.type_oid.value}")


@app.command("scan")
def scan(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Foreign table name."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Stop after this many rows."),
    output_json: bool = typer.Option(False, "--json", help="Emit rows as a JSON array."),
) -> None:
    """Scan a catalogue table and print its rows."""

    catalog = _require_catalog(ctx)
    table = catalog.get(name)
    if not table:
        typer.echo(f"Foreign table '{name}' is not declared.", err=True)
        raise typer.Exit(code=1)

    service = QueryService(catalog=catalog, tags=("cli.scan",))
    try:
        rows = service.scan_table(name, limit=limit)
    except ConnectorError as exc:
        typer.echo(f"Scan failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _emit_rows(table.columns, rows, output_json)


@app.command("query")
def query(
    ctx: typer.Context,
    sheet_id: str = typer.Argument(..., help="Spreadsheet document id."),
    column: Optional[List[str]] = typer.Option(None, "--column", "-C", help="Column as name:type, in sheet order. Can be repeated."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the spreadsheet endpoint."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=0, help="Stop after this many rows."),
    output_json: bool = typer.Option(False, "--json", help="Emit rows as a JSON array."),
) -> None:
    """Scan a sheet by id with an ad-hoc column list."""

    catalog = _require_catalog(ctx)
    columns = _parse_columns(column)
    server_options = dict(catalog.server_options)
    if base_url:
        server_options[BASE_URL_OPTION] = base_url

    service = QueryService(catalog=TableCatalog(server_options=server_options), tags=("cli.query",))
    try:
        rows = service.scan({SHEET_ID_OPTION: sheet_id}, columns, limit=limit)
    except ConnectorError as exc:
        typer.echo(f"Query failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _emit_rows(columns, rows, output_json)


@app.command("verify")
def verify(
    ctx: typer.Context,
    sheet_id: str = typer.Argument(..., help="Spreadsheet document id."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the spreadsheet endpoint."),
) -> None:
    """Check that a sheet can be fetched and its rows decoded."""

    catalog = _require_catalog(ctx)
    server_options = dict(catalog.server_options)
    if base_url:
        server_options[BASE_URL_OPTION] = base_url

    service = QueryService(catalog=TableCatalog(server_options=server_options), tags=("cli.verify",))
    result = service.verify(sheet_id)
    typer.echo(result.message)
    if result.details:
        typer.echo(json.dumps(dict(result.details), ensure_ascii=False, indent=2))
    if not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
