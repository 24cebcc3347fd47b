"""
Source adapter protocol and the DTOs adapters exchange with the parser.

Contract:
    SourceAdapter.check_structure() raises SourceStructureError when the
        source cannot be imported at all.
    SourceAdapter.extract() returns the populated data rows of each section
        together with the position of every known column.
    SourceAdapter.estimate_records() counts importable invoices without
        parsing cell values.

Architecture: invoice_ingestion/adapters. File I/O only, no DB imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable

from invoice_config.schema import CsvOptions

from invoice_ingestion.domain.types import SourceKind, SourceRow

_SUFFIX_KINDS = {
    ".xlsx": SourceKind.SPREADSHEET,
    ".xlsm": SourceKind.SPREADSHEET,
    ".csv": SourceKind.DELIMITED_TEXT,
    ".txt": SourceKind.DELIMITED_TEXT,
}


def source_kind_for(path: Path | str) -> SourceKind:
    """Source kind from a file suffix.

    Raises:
        ValueError: for an unsupported suffix.
    """
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_KINDS[suffix]
    except KeyError:
        raise ValueError(
            f"Unsupported import file type {suffix!r}; expected .xlsx or .csv"
        ) from None


@dataclass(frozen=True)
class InvoiceSource:
    """An opened import source.

    Exactly one of ``workbook`` (an openpyxl Workbook, for SPREADSHEET) or
    ``text`` (decoded file content, for DELIMITED_TEXT) is set.
    """

    file_name: str
    kind: SourceKind
    workbook: Any = None
    text: str | None = None

    @classmethod
    def from_workbook(cls, file_name: str, workbook: Any) -> "InvoiceSource":
        return cls(file_name=file_name, kind=SourceKind.SPREADSHEET, workbook=workbook)

    @classmethod
    def from_text(cls, file_name: str, text: str) -> "InvoiceSource":
        return cls(file_name=file_name, kind=SourceKind.DELIMITED_TEXT, text=text)

    def close(self) -> None:
        if self.workbook is not None:
            self.workbook.close()


@dataclass(frozen=True)
class Section:
    """Populated data rows of one sheet (or the whole CSV)."""

    name: str
    rows: tuple[SourceRow, ...]
    positions: Mapping[str, int] = field(default_factory=dict)

    def value(self, row: SourceRow, label: str) -> Any:
        return row.get(self.positions.get(label))


@dataclass(frozen=True)
class ExtractedSource:
    """Sections read from a source.

    Spreadsheets fill ``headers`` and ``lines``; delimited text fills
    ``flat``.
    """

    headers: Section | None = None
    lines: Section | None = None
    flat: Section | None = None


@dataclass(frozen=True)
class SourceProbe:
    """Result of checking a source without importing it."""

    file_name: str
    file_kind: SourceKind
    is_valid: bool
    errors: tuple[str, ...] = ()
    estimated_records: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "file_kind": self.file_kind.value,
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "estimated_records": self.estimated_records,
        }


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading an opened invoice source into sections."""

    kind: SourceKind

    def check_structure(self, source: InvoiceSource, options: CsvOptions) -> None:
        """Raise SourceStructureError if the source cannot be imported."""
        ...

    def extract(self, source: InvoiceSource, options: CsvOptions) -> ExtractedSource:
        """Populated rows of every section. Assumes check_structure passed."""
        ...

    def estimate_records(self, source: InvoiceSource, options: CsvOptions) -> int:
        """Number of invoices the source would produce."""
        ...


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
