"""
CSV source adapter for flat invoice files (one row per invoice line).

Uses csv.reader. Configurable: delimiter, encoding, has_header. Handles BOM
via utf-8-sig when encoding is utf-8. With a label row, columns are located
by case-insensitive label; without one, the fixed FLAT_COLUMNS order applies.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path

from invoice_config.schema import CsvOptions
from invoice_kernel.exceptions import SourceStructureError

from invoice_ingestion.adapters.base import (
    ExtractedSource,
    InvoiceSource,
    Section,
    is_blank,
)
from invoice_ingestion.domain.columns import (
    FLAT_COLUMNS,
    REQUIRED_FLAT_COLUMNS,
    fixed_positions,
    positions_from_labels,
)
from invoice_ingestion.domain.types import SourceKind, SourceRow, invoice_number_key

CSV_EMPTY = "CSV file is empty"

_BOM = "\ufeff"


def _get_encoding(options: CsvOptions) -> str:
    if options.encoding.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return options.encoding


def read_text(source_path: Path, options: CsvOptions) -> str:
    """Decode a CSV file using the configured encoding."""
    with source_path.open("r", encoding=_get_encoding(options), newline="") as f:
        return f.read()


def _records(text: str, options: CsvOptions) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text.lstrip(_BOM)), delimiter=options.delimiter)
    return list(reader)


class CsvSourceAdapter:
    """Read delimited text into a single flat section."""

    kind = SourceKind.DELIMITED_TEXT

    def check_structure(self, source: InvoiceSource, options: CsvOptions) -> None:
        text = source.text or ""
        if not text.lstrip(_BOM).strip():
            raise SourceStructureError(CSV_EMPTY)
        if options.has_header:
            records = _records(text, options)
            labels = records[0] if records else []
            positions = positions_from_labels(labels, FLAT_COLUMNS)
            missing = [c for c in REQUIRED_FLAT_COLUMNS if c not in positions]
            if missing:
                raise SourceStructureError(
                    f"CSV header is missing required columns: {', '.join(missing)}"
                )

    def extract(self, source: InvoiceSource, options: CsvOptions) -> ExtractedSource:
        records = _records(source.text or "", options)
        if options.has_header:
            labels = records[0] if records else []
            positions = positions_from_labels(labels, FLAT_COLUMNS)
            body = records[1:]
            first_row = 2
        else:
            positions = fixed_positions(FLAT_COLUMNS)
            body = records
            first_row = 1

        rows: list[SourceRow] = []
        for row_number, values in enumerate(body, start=first_row):
            if all(is_blank(v) for v in values):
                continue
            cleaned = tuple(v.strip() if v.strip() else None for v in values)
            rows.append(SourceRow(row_number=row_number, values=cleaned))

        return ExtractedSource(
            flat=Section(name="CSV", rows=tuple(rows), positions=positions),
        )

    def estimate_records(self, source: InvoiceSource, options: CsvOptions) -> int:
        section = self.extract(source, options).flat
        numbers = {
            invoice_number_key(section.value(row, "InvoiceNumber") or "")
            for row in section.rows
        }
        return len(numbers)
