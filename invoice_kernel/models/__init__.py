"""Domain models for the invoice kernel."""

from invoice_kernel.models.company import IMPORTED_ADDRESS_PLACEHOLDER, Company
from invoice_kernel.models.import_log import ImportLog
from invoice_kernel.models.invoice import Invoice, InvoiceLine, InvoiceStatus
from invoice_kernel.models.job_description import IMPORTED_SORT_ORDER, JobDescription
from invoice_kernel.models.worker import IMPORTED_DIVISION, Gender, Worker

__all__ = [
    "Company",
    "IMPORTED_ADDRESS_PLACEHOLDER",
    "Worker",
    "Gender",
    "IMPORTED_DIVISION",
    "JobDescription",
    "IMPORTED_SORT_ORDER",
    "Invoice",
    "InvoiceLine",
    "InvoiceStatus",
    "ImportLog",
]
