"""
invoice_ingestion.domain.types -- Pure frozen dataclasses for the import system.

ZERO I/O. Imports only from invoice_kernel/domain/ and invoice_kernel/models
enums.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from invoice_kernel.models.invoice import InvoiceStatus

DEFAULT_VAT_PERCENTAGE = Decimal("11.00")


def invoice_number_key(number: str) -> str:
    """Matching key for invoice numbers; comparison ignores case."""
    return (number or "").casefold()


# =============================================================================
# Enums
# =============================================================================


class SourceKind(str, Enum):
    """Physical format of an import source."""

    SPREADSHEET = "spreadsheet"  # XLSX workbook with Headers/Lines sheets
    DELIMITED_TEXT = "delimited_text"  # CSV, one row per invoice line


class ImportBatchStatus(str, Enum):
    """Batch-level lifecycle status."""

    RUNNING = "running"
    FINISHED = "finished"


class ImportErrorSeverity(str, Enum):
    """Severity of a reported import error."""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"  # Batch-level, nothing was imported


# =============================================================================
# Raw tabular rows
# =============================================================================


@dataclass(frozen=True)
class SourceRow:
    """One populated row of a sheet or CSV file (row_number is 1-indexed)."""

    row_number: int
    values: tuple[Any, ...]

    def get(self, index: int | None) -> Any:
        if index is None or index >= len(self.values):
            return None
        return self.values[index]


# =============================================================================
# Parsed records (pre-resolution)
# =============================================================================


@dataclass(frozen=True)
class ImportInvoiceHeader:
    """Top-level invoice fields as read from the source."""

    row_number: int
    invoice_number: str
    company_name: str
    company_tax_id: str
    invoice_date: date
    due_date: date | None = None
    notes: str | None = None
    vat_percentage: Decimal = DEFAULT_VAT_PERCENTAGE


@dataclass(frozen=True)
class ImportInvoiceLine:
    """One invoice line as read from the source."""

    row_number: int
    invoice_number: str
    baris: int = 1
    worker_name: str = ""
    worker_passport: str = ""
    job_name: str = ""
    job_description: str = ""
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")  # Taken as imported, never recomputed


# =============================================================================
# Resolved aggregate
# =============================================================================


@dataclass(frozen=True)
class ResolvedInvoiceLine:
    """Invoice line with its worker and job resolved to storage ids."""

    baris: int
    line_order: int
    worker_id: UUID
    job_description_id: UUID
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    row_number: int
    custom_job_name: str | None = None
    custom_job_description: str | None = None


@dataclass(frozen=True)
class ResolvedInvoice:
    """Fully assembled invoice ready to be queued for persistence."""

    invoice_number: str
    company_id: UUID
    invoice_date: date
    due_date: date | None
    notes: str | None
    vat_percentage: Decimal
    lines: tuple[ResolvedInvoiceLine, ...]
    subtotal: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    batch_id: UUID
    imported_from: str
    created_by: UUID
    created_at: datetime
    source_row: int
    company_name: str = ""


# =============================================================================
# Errors, statistics, batch
# =============================================================================


@dataclass(frozen=True)
class ImportRecordError:
    """A single reported failure (record-level or batch-level).

    Skipped headers are reported with the same shape and WARNING severity.
    """

    row_number: int
    field: str
    message: str
    value: str | None = None
    error_code: str = "IMPORT_ERROR"
    severity: ImportErrorSeverity = ImportErrorSeverity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_number": self.row_number,
            "field": self.field,
            "message": self.message,
            "value": self.value,
            "error_code": self.error_code,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ImportStatistics:
    """Counts of what a committed batch added to storage."""

    new_companies: int = 0
    new_workers: int = 0
    new_job_descriptions: int = 0
    new_invoices: int = 0
    total_imported_amount: Decimal = Decimal("0")
    company_breakdown: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "new_companies": self.new_companies,
            "new_workers": self.new_workers,
            "new_job_descriptions": self.new_job_descriptions,
            "new_invoices": self.new_invoices,
            "total_imported_amount": str(self.total_imported_amount),
            "company_breakdown": dict(self.company_breakdown),
        }


@dataclass(frozen=True)
class ImportBatch:
    """Immutable snapshot of an import batch."""

    batch_id: UUID
    file_name: str
    file_kind: SourceKind
    initiated_by: UUID
    status: ImportBatchStatus
    started_at: datetime
    finished_at: datetime | None = None
    total_records: int = 0
    succeeded_records: int = 0
    failed_records: int = 0
    skipped_records: int = 0
    errors: tuple[ImportRecordError, ...] = ()
    warnings: tuple[ImportRecordError, ...] = ()

    @property
    def success(self) -> bool:
        # A fatal structure error reports zero failed records but one error.
        # Warnings (skipped headers) never affect success.
        return self.failed_records == 0 and not self.errors
