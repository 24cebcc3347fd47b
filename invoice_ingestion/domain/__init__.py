"""Pure domain types, coercion and validators for the import engine. ZERO I/O."""

from invoice_ingestion.domain.types import (
    DEFAULT_VAT_PERCENTAGE,
    ImportBatch,
    ImportBatchStatus,
    ImportErrorSeverity,
    ImportInvoiceHeader,
    ImportInvoiceLine,
    ImportRecordError,
    ImportStatistics,
    ResolvedInvoice,
    ResolvedInvoiceLine,
    SourceKind,
    SourceRow,
)

__all__ = [
    "DEFAULT_VAT_PERCENTAGE",
    "ImportBatch",
    "ImportBatchStatus",
    "ImportErrorSeverity",
    "ImportInvoiceHeader",
    "ImportInvoiceLine",
    "ImportRecordError",
    "ImportStatistics",
    "ResolvedInvoice",
    "ResolvedInvoiceLine",
    "SourceKind",
    "SourceRow",
]
