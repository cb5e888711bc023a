#!/usr/bin/env python3
"""
Drive :class:`sheets_fdw.SheetsFdw` through one scan the way a database host does.

Example usage::

    python scripts/examples/run_scan.py 1AbC... \\
        --column id:bigint --column name:text --column born:date \\
        --base-url https://docs.google.com/spreadsheets/d
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from sheets_fdw import Column, ConnectorError, Row, ScanContext, SheetsFdw, TypeOid
from sheets_fdw.core import configure_logging


def parse_column(raw: str, num: int) -> Column:
    """Parse a ``name:type`` argument into the column at position ``num``."""

    if ":" not in raw:
        raise ValueError(f"Expected name:type in --column argument, got {raw!r}")
    name, type_name = raw.split(":", 1)
    return Column(num=num, name=name.strip(), type_oid=TypeOid.from_sql(type_name))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("sheet_id", help="Spreadsheet document id.")
    parser.add_argument("--column", action="append", default=[], help="Column as name:type, in sheet order.")
    parser.add_argument("--base-url", default=None, help="Override the spreadsheet endpoint.")
    parser.add_argument("--log-level", default=None, help="Logging level.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, force=args.log_level is not None)

    try:
        columns = [parse_column(raw, num) for num, raw in enumerate(args.column, start=1)]
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 2

    ctx = ScanContext.build(
        server_options={"base_url": args.base_url} if args.base_url else {},
        table_options={"sheet_id": args.sheet_id},
        columns=columns,
        tags=("script.run_scan",),
    )
    try:
        fdw = SheetsFdw.init(ctx)
        fdw.begin_scan(ctx)
        try:
            while True:
                row = Row()
                if fdw.iter_scan(ctx, row) is None:
                    break
                values = [cell.to_python() if cell is not None else None for cell in row.cells]
                print(json.dumps(dict(zip((column.name for column in columns), values)), default=str))
        finally:
            fdw.end_scan(ctx)
    except ConnectorError as exc:
        print(f"Scan failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
