"""Tests for DB-mapping and computed-field file readers."""

import docx
import openpyxl
import pytest

from formsmith.errors import UnsupportedFileFormatError
from formsmith._internal.io.mapping_files import (
    read_computed_fields,
    read_db_mappings,
    read_pairs,
)


def _pairs(mappings):
    return [(m.field_name, m.db_column) for m in mappings]


def test_csv_with_snake_case_headers(mapping_csv):
    assert _pairs(read_db_mappings(mapping_csv)) == [
        ("Plan Name", "Plan.Name"),
        ("effective date", "Plan.EffectiveDate"),
        ("Monthly Premium Amount", "EmpValue.PremiumBalance"),
        ("Annual Deductible", "Coverage.DeductibleBalance"),
    ]


def test_csv_header_aliases_and_blank_records(tmp_path):
    path = tmp_path / "mapping.csv"
    path.write_text(
        "Field Name,DB Column\n"
        " Plan Name , Plan.Name \n"
        "Email Address,\n"
        ",Orphan.Column\n",
        encoding="utf-8",
    )
    assert _pairs(read_db_mappings(path)) == [("Plan Name", "Plan.Name")]


def test_csv_camel_case_formula_headers(tmp_path):
    path = tmp_path / "computed.csv"
    path.write_text("fieldName,Formula\nTotal,a + b\n", encoding="utf-8")
    computed = read_computed_fields(path)
    assert [(c.field_name, c.formula) for c in computed] == [("Total", "a + b")]


def test_xlsx_first_two_columns(tmp_path):
    path = tmp_path / "mapping.xlsx"
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["Field Name", "DB Column", "Notes"])
    sheet.append(["Plan Name", "Plan.Name", "ignored"])
    sheet.append(["Group Number", 1234, None])
    sheet.append([None, None, None])
    workbook.save(path)

    assert _pairs(read_db_mappings(path)) == [("Plan Name", "Plan.Name"), ("Group Number", "1234")]


@pytest.mark.parametrize("content", [
    "field_name\tdb_column\nPlan Name\tPlan.Name\nEmail Address\tMember.Email\n",
    "Plan Name|Plan.Name\nEmail Address|Member.Email\n",
    "Field Name,DB Column\nPlan Name, Plan.Name\n\nEmail Address,Member.Email\n",
])
def test_delimited_text(tmp_path, content):
    path = tmp_path / "mapping.txt"
    path.write_text(content, encoding="utf-8")
    assert _pairs(read_db_mappings(path)) == [("Plan Name", "Plan.Name"), ("Email Address", "Member.Email")]


def test_tsv_extension(tmp_path):
    path = tmp_path / "mapping.tsv"
    path.write_text("Plan Name\tPlan.Name\n", encoding="utf-8")
    assert _pairs(read_db_mappings(path)) == [("Plan Name", "Plan.Name")]


def test_docx_table(tmp_path):
    path = tmp_path / "mapping.docx"
    document = docx.Document()
    table = document.add_table(rows=3, cols=2)
    for row, (name, column) in zip(table.rows, [("Field Name", "DB Column"),
                                                ("Plan Name", "Plan.Name"),
                                                ("Email Address", "Member.Email")]):
        row.cells[0].text = name
        row.cells[1].text = column
    document.save(str(path))

    assert _pairs(read_db_mappings(path)) == [("Plan Name", "Plan.Name"), ("Email Address", "Member.Email")]


def test_docx_paragraphs_without_tables(tmp_path):
    path = tmp_path / "computed.docx"
    document = docx.Document()
    document.add_paragraph("Computed fields")
    document.add_paragraph("Total Premium\tmonthly * 12")
    document.save(str(path))

    computed = read_computed_fields(path)
    assert [(c.field_name, c.formula) for c in computed] == [("Total Premium", "monthly * 12")]


def test_unsupported_extension(tmp_path):
    path = tmp_path / "mapping.pdf"
    path.write_bytes(b"%PDF-1.4")
    with pytest.raises(UnsupportedFileFormatError, match="Unsupported file format"):
        read_pairs(path, ("db_column",), "DB mapping")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_db_mappings(tmp_path / "absent.csv")


@pytest.mark.parametrize("suffix", [".pdf", ".doc", ".xls"])
def test_legacy_formats_are_named_as_unsupported(tmp_path, suffix):
    path = tmp_path / f"mapping{suffix}"
    path.write_bytes(b"\x00")
    with pytest.raises(UnsupportedFileFormatError) as excinfo:
        read_db_mappings(path)
    message = str(excinfo.value)
    assert suffix in message
    assert ".pdf, .doc, .xls are intentionally unsupported" in message
