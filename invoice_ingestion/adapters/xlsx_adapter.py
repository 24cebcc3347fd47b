"""
XLSX source adapter for two-sheet invoice workbooks.

Layout:
  - "Headers" sheet (by name, else the first sheet): one row per invoice.
  - "Lines" sheet (by name, else the next sheet): one row per invoice line.
  - Row 1 of each sheet is a label row; data starts at row 2 and columns
    are read in the fixed order of HEADER_COLUMNS / LINE_COLUMNS.
  - The Headers label row must name REQUIRED_HEADER_COLUMNS (any case,
    any position) and at least one data row must follow it.
  - Fully blank rows are skipped, rows after them are still read.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Any

from invoice_config.schema import CsvOptions
from invoice_kernel.exceptions import SourceStructureError

from invoice_ingestion.adapters.base import (
    ExtractedSource,
    InvoiceSource,
    Section,
    is_blank,
)
from invoice_ingestion.domain.columns import (
    HEADER_COLUMNS,
    HEADERS_SHEET,
    LINE_COLUMNS,
    LINES_SHEET,
    REQUIRED_HEADER_COLUMNS,
    fixed_positions,
    positions_from_labels,
)
from invoice_ingestion.domain.types import SourceKind, SourceRow

NO_WORKSHEETS = "Excel file contains no worksheets"
HEADERS_EMPTY = "Headers worksheet is empty or has no data"
LINES_NOT_FOUND = "Lines worksheet not found"
MISSING_COLUMNS = "Missing required columns"

_FIRST_DATA_ROW = 2


def load_workbook(source: Path | str | IO[bytes]) -> Any:
    """Open a workbook read-only with cached formula values."""
    try:
        import openpyxl
    except ImportError as e:
        raise ImportError("XLSX support requires openpyxl. Install with: pip install openpyxl") from e

    return openpyxl.load_workbook(source, read_only=True, data_only=True)


def _clean(value: Any) -> Any:
    """Normalize a raw cell value: strip text, blank text -> None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _has_data(sheet: Any) -> bool:
    for values in sheet.iter_rows(min_row=_FIRST_DATA_ROW, values_only=True):
        if any(not is_blank(v) for v in values):
            return True
    return False


def _labels(sheet: Any) -> list[str]:
    for values in sheet.iter_rows(min_row=1, max_row=1, values_only=True):
        return [str(v) if v is not None else "" for v in values]
    return []


def _data_rows(sheet: Any) -> tuple[SourceRow, ...]:
    rows: list[SourceRow] = []
    for row_number, values in enumerate(
        sheet.iter_rows(min_row=_FIRST_DATA_ROW, values_only=True),
        start=_FIRST_DATA_ROW,
    ):
        cleaned = tuple(_clean(v) for v in values)
        if all(v is None for v in cleaned):
            continue
        rows.append(SourceRow(row_number=row_number, values=cleaned))
    return tuple(rows)


class XlsxSourceAdapter:
    """Read Headers/Lines workbooks into two sections."""

    kind = SourceKind.SPREADSHEET

    def headers_sheet(self, workbook: Any) -> Any:
        if HEADERS_SHEET in workbook.sheetnames:
            return workbook[HEADERS_SHEET]
        return workbook.worksheets[0]

    def lines_sheet(self, workbook: Any, headers: Any) -> Any | None:
        if LINES_SHEET in workbook.sheetnames and workbook[LINES_SHEET] is not headers:
            return workbook[LINES_SHEET]
        others = [ws for ws in workbook.worksheets if ws is not headers]
        return others[0] if others else None

    def check_structure(self, source: InvoiceSource, options: CsvOptions) -> None:
        workbook = source.workbook
        if workbook is None or not workbook.worksheets:
            raise SourceStructureError(NO_WORKSHEETS)
        headers = self.headers_sheet(workbook)
        if not _has_data(headers):
            raise SourceStructureError(HEADERS_EMPTY)
        positions = positions_from_labels(_labels(headers), HEADER_COLUMNS)
        missing = [c for c in REQUIRED_HEADER_COLUMNS if c not in positions]
        if missing:
            raise SourceStructureError(f"{MISSING_COLUMNS}: {', '.join(missing)}")
        if self.lines_sheet(workbook, headers) is None:
            raise SourceStructureError(LINES_NOT_FOUND)

    def extract(self, source: InvoiceSource, options: CsvOptions) -> ExtractedSource:
        workbook = source.workbook
        headers = self.headers_sheet(workbook)
        lines = self.lines_sheet(workbook, headers)
        return ExtractedSource(
            headers=Section(
                name=HEADERS_SHEET,
                rows=_data_rows(headers),
                positions=fixed_positions(HEADER_COLUMNS),
            ),
            lines=Section(
                name=LINES_SHEET,
                rows=_data_rows(lines),
                positions=fixed_positions(LINE_COLUMNS),
            ),
        )

    def estimate_records(self, source: InvoiceSource, options: CsvOptions) -> int:
        return len(_data_rows(self.headers_sheet(source.workbook)))
