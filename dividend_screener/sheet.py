"""Sheet ingestion for dividend_screener.

Turns one named sheet of a dividend list workbook into a pandas DataFrame:
* classify_cell – decide what kind of value a raw cell holds.
* ColumnBuilder – collect classified cells into aligned, typed columns.
* ingest – find the sheet, read its header row and assemble the table.
* read_workbook – load every sheet of an ``.xlsx`` file with openpyxl.

The workbooks start with two banner rows, the third row holds the column
names and every following row describes one company.
"""

import logging
import numbers
from datetime import date, datetime, time, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.datetime import to_excel

from .errors import CategoryNotFound, TableConstructionError

logger = logging.getLogger(__name__)

BANNER_ROWS = 2
# Merged or blank header cells hold the "blended" figures of the list.
BLENDED_HEADER = "Blended"

Rows = Iterable[Sequence[Any]]


class CellKind(Enum):
    NUMERIC = "numeric"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    EMPTY = "empty"
    UNKNOWN = "unknown"


def classify_cell(value: Any) -> Tuple[CellKind, Any]:
    """Return ``(kind, value)`` for one raw cell.

    Numbers come back as ``float``.  Timestamps are converted to Excel serial
    day numbers so that they can live in a numeric column, the same way the
    spreadsheet stores them.  Blank strings are treated as empty cells.
    """
    if value is None:
        return CellKind.EMPTY, None
    if isinstance(value, bool):
        return CellKind.UNKNOWN, value
    if isinstance(value, numbers.Real):
        return CellKind.NUMERIC, float(value)
    if isinstance(value, str):
        if not value.strip():
            return CellKind.EMPTY, None
        return CellKind.TEXT, value
    if isinstance(value, (datetime, date, time, timedelta)):
        return CellKind.TIMESTAMP, float(to_excel(value))
    return CellKind.UNKNOWN, value


def header_label(value: Any) -> str:
    """Column name for a header-row cell (blank headers become ``Blended``)."""
    kind, converted = classify_cell(value)
    if kind is CellKind.EMPTY:
        return BLENDED_HEADER
    if kind is CellKind.TEXT:
        return value.strip()
    if kind is CellKind.NUMERIC:
        return format(converted, "g")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class ColumnBuilder:
    """Accumulate classified cells, row by row, into typed columns.

    Call :meth:`add` for the cells of a row and :meth:`end_row` once the row
    is complete.  The first non-empty cell of a column fixes its type.  Cells
    that are empty, of the wrong type, unrecognised or simply absent from a
    short row become missing slots so every column keeps one entry per row.
    """

    def __init__(self, names: Optional[Sequence[str]] = None):
        self._names = list(names or [])
        self._kinds: Dict[int, Optional[CellKind]] = {}
        self._values: Dict[int, List[Any]] = {}
        self._filled = set()
        self._rows = 0

    @property
    def row_count(self) -> int:
        return self._rows

    def _name(self, index: int) -> str:
        if index < len(self._names):
            return self._names[index]
        return f"#{index}"

    def add(self, index: int, kind: CellKind, value: Any) -> None:
        if index in self._filled:
            logger.warning("Column %s received two cells in row %d; keeping the first",
                           self._name(index), self._rows)
            return
        if kind is CellKind.UNKNOWN:
            logger.debug("Ignoring unrecognised cell %r in column %s", value, self._name(index))
            return

        values = self._values.get(index)
        if values is None:
            # Rows before the first cell of this column are missing
            values = self._values[index] = [None] * self._rows
            self._kinds[index] = None
        self._filled.add(index)

        if kind is CellKind.EMPTY:
            logger.warning("Missing data in column %s, row %d", self._name(index), self._rows)
            values.append(None)
            return

        column_kind = CellKind.TEXT if kind is CellKind.TEXT else CellKind.NUMERIC
        fixed = self._kinds[index]
        if fixed is None:
            self._kinds[index] = column_kind
        elif fixed is not column_kind:
            logger.warning("Column %s holds %s data, got %r in row %d; stored as missing",
                           self._name(index), fixed.value, value, self._rows)
            values.append(None)
            return
        values.append(value)

    def end_row(self) -> None:
        self._rows += 1
        for values in self._values.values():
            if len(values) < self._rows:
                values.append(None)
        self._filled.clear()

    def build(self) -> Dict[int, pd.Series]:
        """Return ``{column index: Series}``; numeric columns use NaN for missing."""
        columns = {}
        for index, values in self._values.items():
            if len(values) != self._rows:
                raise TableConstructionError(
                    f"Column {self._name(index)} has {len(values)} values, expected {self._rows}"
                )
            if self._kinds[index] is CellKind.NUMERIC:
                columns[index] = pd.Series(values, dtype="float64")
            else:
                # Never saw a value: keep it as an all-missing text column
                columns[index] = pd.Series(values, dtype=object)
        return columns


def _column_labels(header: Sequence[Any]) -> Tuple[List[str], int]:
    """Return the labels of every header cell and how many of them are named.

    Blank cells at the end of the header only become columns when data sits
    below them, which :func:`ingest` decides once the rows are read.
    """
    cells = list(header)
    named = len(cells)
    while named and classify_cell(cells[named - 1])[0] is CellKind.EMPTY:
        named -= 1

    labels = []
    counts: Dict[str, int] = {}
    for cell in cells:
        label = header_label(cell)
        seen = counts.get(label, 0)
        counts[label] = seen + 1
        labels.append(label if seen == 0 else f"{label}.{seen}")
    return labels, named


def ingest(sheets: Mapping[str, Rows], category: str) -> pd.DataFrame:
    """Build the company table from the sheet named ``category``.

    ``sheets`` maps sheet names to their rows of raw cells (see
    :func:`read_workbook`).  Raises :class:`CategoryNotFound` when there is no
    such sheet and :class:`TableConstructionError` when the rows cannot be
    turned into an aligned table.
    """
    logger.info("Processing category: %s", category)
    names = list(sheets.keys())
    logger.info("Available categories: %s", names)
    if category not in sheets:
        raise CategoryNotFound(category, names)

    rows = iter(sheets[category])
    for _ in range(BANNER_ROWS):
        next(rows, None)

    header = next(rows, None)
    if header is None:
        raise TableConstructionError(f"Sheet '{category}' has no header row")
    labels, named = _column_labels(header)
    if not named:
        raise TableConstructionError(f"Sheet '{category}' has an empty header row")

    width = len(labels)
    builder = ColumnBuilder(labels)
    # Sheet rows are 1-based; data starts right after the header
    for row_number, row in enumerate(rows, start=BANNER_ROWS + 2):
        cells = [classify_cell(value) for value in row]
        if all(kind is CellKind.EMPTY for kind, _ in cells):
            continue
        for index, (kind, value) in enumerate(cells):
            if index < width:
                builder.add(index, kind, value)
            elif kind is not CellKind.EMPTY:
                raise TableConstructionError(
                    f"Row {row_number}: value {value!r} in column {index + 1} has no header"
                )
        builder.end_row()

    columns = builder.build()
    empty = pd.Series([None] * builder.row_count, dtype=object)
    # Trailing blank headers with nothing below them are sheet padding
    while width > named and columns.get(width - 1, empty).isna().all():
        width -= 1
    logger.info("Columns: %s", labels[:width])

    data = {}
    for index, label in enumerate(labels[:width]):
        data[label] = columns.get(index, empty)
    table = pd.DataFrame(data)
    logger.info("Loaded %d companies from '%s'", len(table), category)
    return table


def read_workbook(path: Union[str, Path]) -> Dict[str, List[Tuple[Any, ...]]]:
    """Read every sheet of an ``.xlsx`` workbook as rows of cell values."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")
    workbook = load_workbook(filename=path, read_only=True, data_only=True)
    try:
        return {
            name: list(workbook[name].iter_rows(values_only=True))
            for name in workbook.sheetnames
        }
    finally:
        workbook.close()
