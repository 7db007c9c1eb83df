"""Consolidated row workbook: the nine-column hand-off between stages.

Stage one writes it; stage two (possibly after manual edits) reads it back.
Both .xlsx and .csv renditions carry the same header and column order.
"""

import csv
import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

import openpyxl
from openpyxl.comments import Comment
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from formsmith.errors import UnsupportedFileFormatError
from formsmith.kernel.consolidate import DEFAULT_PLAN_TYPE, ConsolidatedRow

logger = logging.getLogger(__name__)

SHEET_TITLE = "Consolidated Fields"
COMMENT_AUTHOR = "formsmith"

# (header, row attribute, column width)
COLUMNS = (
    ("Section", "section", 20),
    ("Subsection", "subsection", 20),
    ("Field Name", "field_name", 30),
    ("Order", "order", 10),
    ("Screen Name", "screen_name", 15),
    ("DB Mapping", "db_mapping", 30),
    ("Is Computed", "is_computed", 12),
    ("Formula", "formula", 40),
    ("Plan Type", "plan_type", 20),
)
HEADERS = [header for header, _, _ in COLUMNS]

DB_MAPPING_COLUMN = 6
IS_COMPUTED_COLUMN = 7
FORMULA_COLUMN = 8

HEADER_FONT = Font(bold=True, color="FFFFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF4472C4")
MISSING_FILL = PatternFill(fill_type="solid", fgColor="FFFFCCCC")
COMPUTED_FILL = PatternFill(fill_type="solid", fgColor="FFFFEB9C")

LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def _row_values(row: ConsolidatedRow) -> List[Any]:
    return [getattr(row, attribute) for _, attribute, _ in COLUMNS]


def write_consolidated_workbook(rows: Sequence[ConsolidatedRow], path: Union[str, Path]) -> Path:
    """Write rows to .xlsx (highlighting diagnostics) or .csv, by extension."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _write_csv(rows, path)
    if suffix not in (".xlsx", ".xlsm"):
        raise UnsupportedFileFormatError(f"Unsupported consolidated row format: {path.suffix or path.name}")

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    sheet.append(HEADERS)
    for index, (_, _, width) in enumerate(COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width
        header_cell = sheet.cell(row=1, column=index)
        header_cell.font = HEADER_FONT
        header_cell.fill = HEADER_FILL

    for row_number, row in enumerate(rows, start=2):
        sheet.append(_row_values(row))
        # Store "=..." values as text, not live formulas
        for cell in sheet[row_number]:
            if isinstance(cell.value, str):
                cell.data_type = "s"

        if not row.db_mapping:
            cell = sheet.cell(row=row_number, column=DB_MAPPING_COLUMN)
            cell.fill = MISSING_FILL
            cell.comment = Comment("Missing DB Mapping", COMMENT_AUTHOR)

        if row.is_computed == "YES":
            sheet.cell(row=row_number, column=IS_COMPUTED_COLUMN).fill = COMPUTED_FILL
            if not row.formula:
                cell = sheet.cell(row=row_number, column=FORMULA_COLUMN)
                cell.fill = MISSING_FILL
                cell.comment = Comment("Missing Formula for Computed Field", COMMENT_AUTHOR)

    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    logger.info("Wrote %d consolidated rows to %s", len(rows), path)
    return path


def _write_csv(rows: Sequence[ConsolidatedRow], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(HEADERS)
        for row in rows:
            writer.writerow(_row_values(row))
    logger.info("Wrote %d consolidated rows to %s", len(rows), path)
    return path


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_order(value: Any) -> int:
    """Parse the Order cell: leading integer, 0 on failure, never negative."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0)
    match = LEADING_INT_PATTERN.match(_text(value))
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def row_from_cells(cells: Sequence[Any]) -> Optional[ConsolidatedRow]:
    """Build a row from nine positional cells; None when Field Name is empty."""
    cells = list(cells) + [None] * (len(COLUMNS) - len(cells))
    field_name = _text(cells[2])
    if not field_name:
        return None
    return ConsolidatedRow(
        section=_text(cells[0]),
        subsection=_text(cells[1]),
        field_name=field_name,
        order=parse_order(cells[3]),
        screen_name=_text(cells[4]) or "create",
        db_mapping=_text(cells[5]),
        is_computed=_text(cells[6]) or "NO",
        formula=_text(cells[7]),
        plan_type=_text(cells[8]) or DEFAULT_PLAN_TYPE,
    )


def _rows_from_records(records: Iterable[Sequence[Any]]) -> List[ConsolidatedRow]:
    rows = []
    for cells in records:
        row = row_from_cells(cells)
        if row is not None:
            rows.append(row)
    return rows


def read_consolidated_workbook(path: Union[str, Path]) -> List[ConsolidatedRow]:
    """Read consolidated rows from .xlsx or .csv. Row 1 is the header."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".xlsx", ".xlsm", ".csv"):
        raise UnsupportedFileFormatError(f"Unsupported consolidated row format: {path.suffix or path.name}")
    if not path.exists():
        raise FileNotFoundError(f"Consolidated row file not found: {path}")

    if suffix == ".csv":
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            records = list(csv.reader(f))
        rows = _rows_from_records(records[1:])
    else:
        workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
        try:
            rows = _rows_from_records(workbook.worksheets[0].iter_rows(min_row=2, values_only=True))
        finally:
            workbook.close()

    logger.info("Read %d consolidated rows from %s", len(rows), path)
    return rows
