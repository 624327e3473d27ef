"""Tests for text and CSV reporting."""
from __future__ import annotations

import io

import pytest

from microbench.measurement import Marker, Measurement, Unit
from microbench.procedure import FunctionProcedure
from microbench.reporter import (
    display_grid,
    format_cell,
    format_table,
    parse_cell,
    parse_grid,
    read_csv,
    write_csv,
)
from microbench.results import ResultTable


@pytest.fixture
def table() -> ResultTable:
    procs = [
        FunctionProcedure("sqrt", step=lambda c, s: None, problem_size=lambda c: c),
        FunctionProcedure("exp_long_name", step=lambda c, s: None, problem_size=lambda c: c),
    ]
    table = ResultTable(procs, [16, 1024])
    table.record("sqrt", 16, Measurement(repetitions=1000, elapsed_ns=1_000_000))
    table.record("sqrt", 1024, Measurement(repetitions=10, elapsed_ns=0))
    table.record("exp_long_name", 16, None)
    table.record("exp_long_name", 1024, Measurement(repetitions=3, elapsed_ns=1_000_000_000))
    table.freeze()
    return table


class TestFormatCell:
    """Test single-cell formatting."""

    def test_number(self) -> None:
        """Numbers use fixed precision."""
        assert format_cell(1.23456789) == "1.2346"
        assert format_cell(2.0, precision=2) == "2.00"

    def test_markers(self) -> None:
        """Absent is blank; undefined is distinguishable from zero."""
        assert format_cell(Marker.ABSENT) == ""
        assert format_cell(Marker.UNDEFINED) == "n/a"
        assert format_cell(0.0) == "0.0000"

    def test_parse_cell(self) -> None:
        """Formatted cells parse back."""
        assert parse_cell("") is Marker.ABSENT
        assert parse_cell("n/a") is Marker.UNDEFINED
        assert parse_cell("1.5000") == 1.5


class TestDisplayGrid:
    """Test the logical grid."""

    def test_grid_layout(self, table: ResultTable) -> None:
        """Header row of configurations, one row per procedure."""
        grid = display_grid(table, Unit.MICROSECONDS)

        assert grid[0] == ["procedure", "16", "1024"]
        assert grid[1] == ["sqrt", "1.0000", "n/a"]
        assert grid[2] == ["exp_long_name", "", "333333.3333"]

    def test_grid_throughput(self, table: ResultTable) -> None:
        """Throughput cells derive from problem size."""
        grid = display_grid(table, Unit.MILLION_ITEMS_PER_SECOND)

        # 1000 runs * 16 items / 1 ms = 16e6 items/s
        assert grid[1][1] == "16.0000"


class TestFormatTable:
    """Test text rendering."""

    def test_title_states_unit(self, table: ResultTable) -> None:
        """First line names the unit."""
        text = format_table(table, Unit.MILLISECONDS)

        assert text.splitlines()[0] == Unit.MILLISECONDS.label

    def test_rows_and_alignment(self, table: ResultTable) -> None:
        """Columns are aligned across rows."""
        lines = format_table(table, Unit.MICROSECONDS).splitlines()

        assert len(lines) == 4
        assert lines[1].startswith("procedure")
        assert lines[2].startswith("sqrt")
        assert lines[3].startswith("exp_long_name")
        # Right-aligned value columns end at the same offset
        assert lines[1].index("1024") + len("1024") == len(lines[3])
        assert lines[2].index("n/a") + len("n/a") == len(lines[3])


class TestCsv:
    """Test CSV export."""

    def test_write_csv(self, table: ResultTable) -> None:
        """CSV holds the same grid."""
        sink = io.BytesIO()

        write_csv(table, Unit.MICROSECONDS, sink)

        lines = sink.getvalue().decode("utf-8").splitlines()
        assert lines == [
            "procedure,16,1024",
            "sqrt,1.0000,n/a",
            "exp_long_name,,333333.3333",
        ]

    def test_sink_left_open(self, table: ResultTable) -> None:
        """The caller's sink stays usable."""
        sink = io.BytesIO()

        write_csv(table, Unit.SECONDS, sink)
        sink.write(b"# trailer\n")

        assert not sink.closed

    def test_round_trip(self, table: ResultTable) -> None:
        """Re-parsing the CSV reconstructs the displayed grid."""
        sink = io.BytesIO()
        write_csv(table, Unit.NANOSECONDS, sink)
        sink.seek(0)

        assert read_csv(sink) == display_grid(table, Unit.NANOSECONDS)

    def test_parse_grid(self, table: ResultTable) -> None:
        """Parsed grid exposes values and markers per procedure."""
        values = parse_grid(display_grid(table, Unit.MICROSECONDS))

        assert values["sqrt"] == [1.0, Marker.UNDEFINED]
        assert values["exp_long_name"][0] is Marker.ABSENT
