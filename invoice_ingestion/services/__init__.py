"""Invoice import services (assemble, orchestrate, report, templates)."""

from invoice_ingestion.services.assembler import InvoiceAssembler, group_lines
from invoice_ingestion.services.import_service import ImportService
from invoice_ingestion.services.reporter import (
    ERROR_SUMMARY_LIMIT,
    ImportReporter,
    ImportResult,
)
from invoice_ingestion.services.store import InvoiceStore, SqlAlchemyInvoiceStore
from invoice_ingestion.services.templates import generate_import_template

__all__ = [
    "ERROR_SUMMARY_LIMIT",
    "ImportReporter",
    "ImportResult",
    "ImportService",
    "InvoiceAssembler",
    "InvoiceStore",
    "SqlAlchemyInvoiceStore",
    "generate_import_template",
    "group_lines",
]
