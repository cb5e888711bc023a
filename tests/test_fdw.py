from __future__ import annotations

import logging
from datetime import date

import pytest

from sheets_fdw import SheetsFdw
from sheets_fdw.core import Cell, Column, ConnectorState, Row, ScanContext, ScanPhase, TypeOid
from sheets_fdw.errors import FormatError, MissingOption, TransportError, UnsupportedOperation, UnsupportedType
from sheets_fdw.fdw import HOST_VERSION_REQUIREMENT

COLUMNS = (
    Column(num=1, name="id", type_oid=TypeOid.I64),
    Column(num=2, name="name", type_oid=TypeOid.STRING),
    Column(num=3, name="born", type_oid=TypeOid.DATE),
)


def _context(sheet_id="sheet-123", columns=COLUMNS, **server):
    return ScanContext.build(server_options=server, table_options={"sheet_id": sheet_id} if sheet_id else {}, columns=columns)


def _drain(fdw, ctx):
    rows = []
    while True:
        row = Row()
        if fdw.iter_scan(ctx, row) is None:
            return rows
        rows.append(row.cells)


def test_init_resolves_base_url(sample_transport):
    fdw = SheetsFdw.init(_context(base_url="https://sheets.example.test/d"), transport=sample_transport)

    assert fdw.state.base_url == "https://sheets.example.test/d"
    assert fdw.phase is ScanPhase.IDLE


def test_init_uses_default_endpoint(sample_transport):
    fdw = SheetsFdw.init(_context(), transport=sample_transport)

    assert fdw.state.base_url == "https://docs.google.com/spreadsheets/d"


def test_host_version_requirement():
    assert SheetsFdw.host_version_requirement() == HOST_VERSION_REQUIREMENT == "^0.1.0"


def test_scan_produces_each_row_then_signals_end(sample_transport):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)
    fdw.begin_scan(ctx)

    rows = _drain(fdw, ctx)

    assert rows == [
        [Cell.i64(1), Cell.string("Erlich Bachman"), Cell.date(date(2023, 6, 11))],
        [Cell.i64(2), Cell.string("Richard Hendricks"), None],
        [Cell.i64(3), None, None],
    ]
    assert fdw.state.cursor == 3
    assert fdw.phase is ScanPhase.EXHAUSTED


def test_exhaustion_is_idempotent_and_leaves_row_untouched(sample_transport):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)
    fdw.begin_scan(ctx)
    _drain(fdw, ctx)

    row = Row()
    row.push(Cell.string("sentinel"))
    for _ in range(3):
        assert fdw.iter_scan(ctx, row) is None
    assert row.cells == [Cell.string("sentinel")]
    assert fdw.state.cursor == 3


def test_iter_scan_returns_zero_for_produced_row(sample_transport):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)
    fdw.begin_scan(ctx)

    assert fdw.iter_scan(ctx, Row()) == 0
    assert fdw.state.cursor == 1


def test_begin_scan_logs_row_count(sample_transport, caplog):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)

    with caplog.at_level(logging.INFO):
        fdw.begin_scan(ctx)

    assert "We got response array length: 3" in caplog.text


def test_end_then_begin_refetches_and_rewinds(make_transport, gviz):
    transport = make_transport(
        gviz([{"c": [{"v": 1.0}]}, {"c": [{"v": 2.0}]}]),
        gviz([{"c": [{"v": 10.0}]}]),
    )
    ctx = _context(columns=(Column(num=1, name="id", type_oid=TypeOid.I64),))
    fdw = SheetsFdw.init(ctx, transport=transport)

    fdw.begin_scan(ctx)
    assert _drain(fdw, ctx) == [[Cell.i64(1)], [Cell.i64(2)]]
    fdw.end_scan(ctx)
    assert fdw.state.source_rows == []
    assert fdw.phase is ScanPhase.ENDED

    fdw.begin_scan(ctx)
    assert fdw.state.cursor == 0
    assert _drain(fdw, ctx) == [[Cell.i64(10)]]
    assert len(transport.requests) == 2


def test_begin_scan_replaces_open_scan(make_transport, gviz):
    transport = make_transport(gviz([{"c": [{"v": 1.0}]}, {"c": [{"v": 2.0}]}]), gviz([{"c": [{"v": 5.0}]}]))
    ctx = _context(columns=(Column(num=1, name="id", type_oid=TypeOid.I64),))
    fdw = SheetsFdw.init(ctx, transport=transport)

    fdw.begin_scan(ctx)
    fdw.iter_scan(ctx, Row())
    fdw.begin_scan(ctx)

    assert fdw.state.cursor == 0
    assert _drain(fdw, ctx) == [[Cell.i64(5)]]


def test_empty_sheet_is_immediately_exhausted(make_transport, gviz):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=make_transport(gviz([])))

    fdw.begin_scan(ctx)

    assert fdw.phase is ScanPhase.EXHAUSTED
    assert fdw.iter_scan(ctx, Row()) is None


def test_missing_prefix_fails_and_leaves_store_empty(make_transport, gviz, sample_rows):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=make_transport(gviz(sample_rows)[5:]))

    with pytest.raises(FormatError, match="invalid response"):
        fdw.begin_scan(ctx)

    assert fdw.state.source_rows == []
    assert fdw.state.cursor == 0
    row = Row()
    assert fdw.iter_scan(ctx, row) is None
    assert row.cells == []


def test_failed_rescan_drops_previous_rows(make_transport, gviz):
    transport = make_transport(gviz([{"c": [{"v": 1.0}]}]), ")]}'\n{broken")
    ctx = _context(columns=(Column(num=1, name="id", type_oid=TypeOid.I64),))
    fdw = SheetsFdw.init(ctx, transport=transport)
    fdw.begin_scan(ctx)

    with pytest.raises(FormatError):
        fdw.begin_scan(ctx)

    assert fdw.state.source_rows == []
    assert fdw.phase is ScanPhase.ENDED
    assert fdw.iter_scan(ctx, Row()) is None


def test_begin_scan_requires_sheet_id(sample_transport):
    ctx = _context(sheet_id=None)
    fdw = SheetsFdw.init(ctx, transport=sample_transport)

    with pytest.raises(MissingOption) as excinfo:
        fdw.begin_scan(ctx)

    assert excinfo.value.option == "sheet_id"
    assert "sheet_id" in str(excinfo.value)
    assert sample_transport.requests == []


def test_begin_scan_surfaces_transport_errors(failing_transport):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=failing_transport)

    with pytest.raises(TransportError):
        fdw.begin_scan(ctx)
    assert fdw.phase is ScanPhase.IDLE


def test_unsupported_column_type_aborts_scan(sample_transport):
    ctx = _context(columns=(Column(num=1, name="id", type_oid=TypeOid.I64), Column(num=2, name="name", type_oid=TypeOid.JSON)))
    fdw = SheetsFdw.init(ctx, transport=sample_transport)
    fdw.begin_scan(ctx)

    with pytest.raises(UnsupportedType, match="column name data type is not supported"):
        fdw.iter_scan(ctx, Row())
    assert fdw.state.cursor == 0


def test_iter_scan_before_begin_behaves_as_exhausted(sample_transport):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)

    assert fdw.iter_scan(ctx, Row()) is None
    assert sample_transport.requests == []


@pytest.mark.parametrize("stage", ["idle", "scanning", "exhausted", "ended"])
def test_re_scan_always_unsupported(sample_transport, stage):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)
    if stage != "idle":
        fdw.begin_scan(ctx)
    if stage in ("exhausted", "ended"):
        _drain(fdw, ctx)
    if stage == "ended":
        fdw.end_scan(ctx)
    before = (list(fdw.state.source_rows), fdw.state.cursor, fdw.phase)

    with pytest.raises(UnsupportedOperation, match="re_scan on foreign table is not supported"):
        fdw.re_scan(ctx)

    assert (list(fdw.state.source_rows), fdw.state.cursor, fdw.phase) == before


def test_end_scan_is_idempotent(sample_transport):
    ctx = _context()
    fdw = SheetsFdw.init(ctx, transport=sample_transport)

    fdw.end_scan(ctx)
    fdw.begin_scan(ctx)
    fdw.end_scan(ctx)
    fdw.end_scan(ctx)

    assert fdw.state.source_rows == []
    assert fdw.phase is ScanPhase.ENDED


def test_begin_modify_is_refused():
    fdw = SheetsFdw.init(_context(), transport=None)

    with pytest.raises(UnsupportedOperation, match="modify on foreign table is not supported"):
        fdw.begin_modify(_context())


def test_write_calls_are_silent_no_ops():
    state = ConnectorState(base_url="https://sheets.example.test/d", source_rows=[{"c": []}], cursor=1, phase=ScanPhase.EXHAUSTED)
    fdw = SheetsFdw(state=state, client=SheetsFdw.init(_context()).client)
    ctx = _context()
    row = Row([Cell.i64(1)])

    assert fdw.insert(ctx, row) is None
    assert fdw.update(ctx, Cell.i64(1), row) is None
    assert fdw.delete(ctx, Cell.i64(1)) is None
    assert fdw.end_modify(ctx) is None

    assert state.source_rows == [{"c": []}]
    assert state.cursor == 1
    assert state.phase is ScanPhase.EXHAUSTED
    assert row.cells == [Cell.i64(1)]
