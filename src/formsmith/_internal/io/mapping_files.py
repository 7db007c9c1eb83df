"""Readers for DB-mapping and computed-field input files.

Every reader yields (field name, value) pairs with both parts trimmed and
non-empty; records missing either part are dropped.
"""

import csv
import logging
import re
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Sequence, Tuple, Union

import docx
import openpyxl

from formsmith.errors import UnsupportedFileFormatError
from formsmith.kernel.consolidate import ComputedField, DBMapping

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]

DELIMITER_PATTERN = re.compile(r"[\t,|]")

# Binary formats with no reader
UNSUPPORTED_EXTENSIONS = (".pdf", ".doc", ".xls")

NAME_HEADERS = ("field_name", "fieldName", "Field Name")
DB_COLUMN_HEADERS = ("db_column", "dbColumn", "DB Column")
FORMULA_HEADERS = ("formula", "Formula")


def _cell_text(value) -> str:
    return "" if value is None else str(value).strip()


def _clean_pairs(pairs: Iterator[Pair]) -> Iterator[Pair]:
    for name, value in pairs:
        name, value = _cell_text(name), _cell_text(value)
        if name and value:
            yield name, value


def _read_xlsx(path: Path, value_headers: Sequence[str]) -> Iterator[Pair]:
    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        for row in sheet.iter_rows(min_row=2, values_only=True):
            if len(row) >= 2:
                yield row[0], row[1]
    finally:
        workbook.close()


def _first_present(record: Dict[str, str], headers: Sequence[str]) -> str:
    for header in headers:
        value = record.get(header)
        if value and value.strip():
            return value
    return ""


def _read_csv(path: Path, value_headers: Sequence[str]) -> Iterator[Pair]:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        for record in csv.DictReader(f):
            yield _first_present(record, NAME_HEADERS), _first_present(record, value_headers)


def _split_lines(lines: Iterator[str]) -> Iterator[Pair]:
    for line in lines:
        parts = [part.strip() for part in DELIMITER_PATTERN.split(line)]
        # Header lines repeat the column names
        if len(parts) >= 2 and parts[0] not in NAME_HEADERS:
            yield parts[0], parts[1]


def _read_text(path: Path, value_headers: Sequence[str]) -> Iterator[Pair]:
    with open(path, "r", encoding="utf-8") as f:
        yield from _split_lines(f)


def _read_docx(path: Path, value_headers: Sequence[str]) -> Iterator[Pair]:
    document = docx.Document(str(path))
    if document.tables:
        for table in document.tables:
            for row in table.rows[1:]:
                cells = row.cells
                if len(cells) >= 2:
                    yield cells[0].text, cells[1].text
        return
    yield from _split_lines(paragraph.text for paragraph in document.paragraphs)


READERS: Dict[str, Callable[[Path, Sequence[str]], Iterator[Pair]]] = {
    ".xlsx": _read_xlsx,
    ".xlsm": _read_xlsx,
    ".csv": _read_csv,
    ".tsv": _read_text,
    ".txt": _read_text,
    ".docx": _read_docx,
}


def read_pairs(path: Union[str, Path], value_headers: Sequence[str], kind: str) -> List[Pair]:
    """Read (field name, value) pairs from any supported file format."""
    path = Path(path)
    reader = READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedFileFormatError(
            f"Unsupported file format for {kind}: {path.suffix or path.name} "
            f"(expected one of {', '.join(sorted(READERS))}; "
            f"{', '.join(UNSUPPORTED_EXTENSIONS)} are intentionally unsupported)"
        )
    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")

    pairs = list(_clean_pairs(reader(path, value_headers)))
    logger.info("Read %d %s records from %s", len(pairs), kind, path)
    return pairs


def read_db_mappings(path: Union[str, Path]) -> List[DBMapping]:
    return [
        DBMapping(field_name=name, db_column=column)
        for name, column in read_pairs(path, DB_COLUMN_HEADERS, "DB mapping")
    ]


def read_computed_fields(path: Union[str, Path]) -> List[ComputedField]:
    return [
        ComputedField(field_name=name, formula=formula)
        for name, formula in read_pairs(path, FORMULA_HEADERS, "computed field")
    ]
