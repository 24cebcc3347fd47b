"""
Blank import templates users fill in and upload.

Spreadsheet: "Headers" and "Lines" sheets with a bold label row.
Delimited text: the flat label row plus one example row.
"""

from __future__ import annotations

import csv
import io

from invoice_ingestion.domain.columns import (
    CSV_TEMPLATE_COLUMNS,
    HEADER_COLUMNS,
    HEADERS_SHEET,
    LINE_COLUMNS,
    LINES_SHEET,
)
from invoice_ingestion.domain.types import SourceKind

_SUFFIX_ALIASES = {
    "xlsx": SourceKind.SPREADSHEET,
    "csv": SourceKind.DELIMITED_TEXT,
}

CSV_EXAMPLE_ROW: tuple[str, ...] = (
    "INV-2024-001",
    "PT. Example Company",
    "01.234.567.8-901.000",
    "2024-01-15",
    "John Doe",
    "A12345678",
    "Consulting",
    "Monthly consulting services",
    "1",
    "5000000",
    "5000000",
)


def _xlsx_template() -> bytes:
    try:
        from openpyxl import Workbook
        from openpyxl.styles import Font
    except ImportError as e:
        raise ImportError("XLSX support requires openpyxl. Install with: pip install openpyxl") from e

    wb = Workbook()
    headers = wb.active
    headers.title = HEADERS_SHEET
    lines = wb.create_sheet(LINES_SHEET)

    bold = Font(bold=True)
    for sheet, columns in ((headers, HEADER_COLUMNS), (lines, LINE_COLUMNS)):
        for col, label in enumerate(columns, start=1):
            cell = sheet.cell(row=1, column=col, value=label)
            cell.font = bold

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _csv_template() -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_TEMPLATE_COLUMNS)
    writer.writerow(CSV_EXAMPLE_ROW)
    return buffer.getvalue().encode("utf-8")


def generate_import_template(kind: SourceKind | str) -> bytes:
    """
    Template file content for ``kind``.

    Raises:
        ValueError: for an unsupported kind.
    """
    if isinstance(kind, str) and kind.lower() in _SUFFIX_ALIASES:
        kind = _SUFFIX_ALIASES[kind.lower()]
    try:
        kind = SourceKind(kind)
    except ValueError:
        raise ValueError(f"Unsupported template kind: {kind!r}") from None

    if kind == SourceKind.SPREADSHEET:
        return _xlsx_template()
    if kind == SourceKind.DELIMITED_TEXT:
        return _csv_template()
    raise ValueError(f"Unsupported template kind: {kind!r}")
