"""Source adapters for invoice import (file I/O only, no DB)."""

from __future__ import annotations

from pathlib import Path

from invoice_config.schema import CsvOptions
from invoice_kernel.exceptions import SourceStructureError

from invoice_ingestion.adapters.base import (
    ExtractedSource,
    InvoiceSource,
    Section,
    SourceAdapter,
    SourceProbe,
    source_kind_for,
)
from invoice_ingestion.adapters.csv_adapter import CsvSourceAdapter, read_text
from invoice_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter, load_workbook
from invoice_ingestion.domain.types import SourceKind


def default_adapters() -> dict[SourceKind, SourceAdapter]:
    return {
        SourceKind.SPREADSHEET: XlsxSourceAdapter(),
        SourceKind.DELIMITED_TEXT: CsvSourceAdapter(),
    }


def open_source(path: Path | str, options: CsvOptions | None = None) -> InvoiceSource:
    """Open a file as an InvoiceSource, choosing the kind from its suffix.

    The caller owns the returned source and must close() it.
    """
    path = Path(path)
    kind = source_kind_for(path)
    if kind == SourceKind.SPREADSHEET:
        return InvoiceSource.from_workbook(path.name, load_workbook(path))
    return InvoiceSource.from_text(path.name, read_text(path, options or CsvOptions()))


def probe_source(
    source: InvoiceSource,
    options: CsvOptions | None = None,
    adapters: dict[SourceKind, SourceAdapter] | None = None,
) -> SourceProbe:
    """Check a source's structure and estimate its record count without importing."""
    options = options or CsvOptions()
    adapter = (adapters or default_adapters())[source.kind]
    try:
        adapter.check_structure(source, options)
    except SourceStructureError as e:
        return SourceProbe(
            file_name=source.file_name,
            file_kind=source.kind,
            is_valid=False,
            errors=(e.reason,),
        )
    return SourceProbe(
        file_name=source.file_name,
        file_kind=source.kind,
        is_valid=True,
        estimated_records=adapter.estimate_records(source, options),
    )


__all__ = [
    "CsvSourceAdapter",
    "ExtractedSource",
    "InvoiceSource",
    "Section",
    "SourceAdapter",
    "SourceProbe",
    "XlsxSourceAdapter",
    "default_adapters",
    "load_workbook",
    "open_source",
    "probe_source",
    "read_text",
    "source_kind_for",
]
