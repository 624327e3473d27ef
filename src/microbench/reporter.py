"""
Result Reporting

Renders a ResultTable as an aligned text grid or as CSV. Rows are
procedures and columns are configurations. All numeric derivation
happens in the table; this module only formats.
"""
from __future__ import annotations

import csv
import io
from typing import BinaryIO, Iterable

from microbench.measurement import CellValue, Marker, Unit
from microbench.results import ResultTable

ABSENT_TEXT = ""
UNDEFINED_TEXT = "n/a"
HEADER_LABEL = "procedure"


def format_cell(value: CellValue, precision: int = 4) -> str:
    """Format one cell value.

    Args:
        value: Float or Marker.
        precision: Decimal places for numbers.

    Returns:
        Fixed-precision number, blank for absent, "n/a" for undefined.
    """
    if value is Marker.ABSENT:
        return ABSENT_TEXT
    if value is Marker.UNDEFINED:
        return UNDEFINED_TEXT
    return f"{value:.{precision}f}"


def parse_cell(text: str) -> CellValue:
    """Inverse of format_cell (up to the formatted precision)."""
    if text == ABSENT_TEXT:
        return Marker.ABSENT
    if text == UNDEFINED_TEXT:
        return Marker.UNDEFINED
    return float(text)


def display_grid(table: ResultTable, unit: Unit, precision: int = 4) -> list[list[str]]:
    """Displayed values of a table as rows of strings.

    The first row is the header (``procedure`` followed by configuration
    values); each following row is a procedure name and its cells.
    """
    grid = [[HEADER_LABEL] + [str(cfg) for cfg in table.configurations]]
    for name in table.procedure_names:
        grid.append([name] + [format_cell(v, precision) for v in table.row(name, unit)])
    return grid


def format_table(table: ResultTable, unit: Unit, precision: int = 4) -> str:
    """Render a table as aligned text.

    Args:
        table: Table to render.
        unit: Display unit, stated in the title line.
        precision: Decimal places for numbers.

    Returns:
        Multi-line string: title, header row, one row per procedure.

    Example output::

        Time per run [us]
        procedure        16        64
        double       1.2345    4.5678
    """
    grid = display_grid(table, unit, precision)
    widths = [max(len(row[i]) for row in grid) for i in range(len(grid[0]))]

    lines = [unit.label]
    for row in grid:
        cells = [row[0].ljust(widths[0])]
        cells.extend(cell.rjust(width) for cell, width in zip(row[1:], widths[1:]))
        lines.append("  ".join(cells).rstrip())
    return "\n".join(lines)


def write_csv(table: ResultTable, unit: Unit, sink: BinaryIO, precision: int = 4) -> None:
    """Write a table as CSV to a binary sink.

    The sink is flushed but not closed.

    Args:
        table: Table to export.
        unit: Display unit.
        sink: Writable byte stream (file opened with "wb", BytesIO, ...).
        precision: Decimal places for numbers.
    """
    text = io.TextIOWrapper(sink, encoding="utf-8", newline="")
    try:
        writer = csv.writer(text)
        writer.writerows(display_grid(table, unit, precision))
        text.flush()
    finally:
        # Hand the sink back to the caller open
        text.detach()


def read_csv(source: BinaryIO) -> list[list[str]]:
    """Read a CSV written by write_csv back into a string grid."""
    text = io.TextIOWrapper(source, encoding="utf-8", newline="")
    try:
        return list(csv.reader(text))
    finally:
        text.detach()


def parse_grid(rows: Iterable[list[str]]) -> dict[str, list[CellValue]]:
    """Convert a string grid (minus header) to values per procedure."""
    rows = list(rows)
    return {row[0]: [parse_cell(cell) for cell in row[1:]] for row in rows[1:]}
