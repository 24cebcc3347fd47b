"""
Typed exception hierarchy for the invoice kernel and import engine.

Every exception carries a class-level ``code`` (machine-readable, API-safe)
and a ``field`` tag naming the source column or section it refers to. The
import orchestrator turns record-level exceptions into structured error
entries using exactly these two attributes, so callers never parse messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InvoiceKernelError (base)
    |
    +-- InvoiceImportError
        +-- SourceStructureError            (fatal, batch-level)
        +-- RecordImportError               (isolated to one invoice header)
        |   +-- MissingFieldError
        |   +-- NoLinesFoundError
        |   +-- DuplicateInvoiceNumberError
        |   +-- DuplicateInvoiceError
        |   +-- EntityNotFoundError
        |       +-- CompanyNotFoundError
        |       +-- WorkerNotFoundError
        |       +-- JobDescriptionNotFoundError
        +-- CommitFailedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                        | Field          | When Raised
----------------------------|----------------|---------------------------------
SOURCE_STRUCTURE_INVALID    | File           | No worksheets / empty headers / empty CSV
MISSING_REQUIRED_FIELD      | (column)       | Required header cell is blank
NO_LINES_FOUND              | Lines          | Header has no matching line rows
DUPLICATE_INVOICE_NUMBER    | InvoiceNumber  | Two header rows share a number
INVOICE_ALREADY_EXISTS      | InvoiceNumber  | Number already stored (warning, skipped)
COMPANY_NOT_FOUND           | CompanyNPWP    | Unknown tax id, creation disabled
WORKER_NOT_FOUND            | TKAPassport    | Unknown passport, creation disabled
JOB_DESCRIPTION_NOT_FOUND   | JobName        | Unknown job, creation disabled
COMMIT_FAILED               | Commit         | Final commit raised
"""


class InvoiceKernelError(Exception):
    """
    Base exception for all invoice kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVOICE_KERNEL_ERROR"
    field: str = "General"


class InvoiceImportError(InvoiceKernelError):
    """Base exception for import-engine errors."""

    code: str = "IMPORT_ERROR"


# Batch-level


class SourceStructureError(InvoiceImportError):
    """Source file cannot be processed at all (fatal for the batch)."""

    code: str = "SOURCE_STRUCTURE_INVALID"
    field: str = "File"

    def __init__(self, message: str):
        self.reason = message
        super().__init__(message)


class CommitFailedError(InvoiceImportError):
    """The single post-loop commit failed; queued invoices are not durable."""

    code: str = "COMMIT_FAILED"
    field: str = "Commit"

    def __init__(self, invoice_number: str, cause: str):
        self.invoice_number = invoice_number
        self.cause = cause
        super().__init__(f"Invoice {invoice_number} was not saved: {cause}")


# Record-level


class RecordImportError(InvoiceImportError):
    """An invoice header failed to assemble. The batch continues."""

    code: str = "RECORD_IMPORT_ERROR"


class MissingFieldError(RecordImportError):
    """A required header cell is blank."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is required")


class NoLinesFoundError(RecordImportError):
    """No line rows reference the header's invoice number."""

    code: str = "NO_LINES_FOUND"
    field: str = "Lines"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"No lines found for invoice {invoice_number}")


class DuplicateInvoiceNumberError(RecordImportError):
    """More than one header row in the same source uses this invoice number."""

    code: str = "DUPLICATE_INVOICE_NUMBER"
    field: str = "InvoiceNumber"

    def __init__(self, invoice_number: str, row_numbers: tuple[int, ...]):
        self.invoice_number = invoice_number
        self.row_numbers = row_numbers
        rows = ", ".join(str(r) for r in row_numbers)
        super().__init__(
            f"Invoice number {invoice_number} appears on more than one header row ({rows})"
        )


class DuplicateInvoiceError(RecordImportError):
    """Invoice number already exists in storage; the header is skipped, not failed."""

    code: str = "INVOICE_ALREADY_EXISTS"
    field: str = "InvoiceNumber"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice {invoice_number} already exists and will be skipped")


class EntityNotFoundError(RecordImportError):
    """Referenced master entity is absent and creation is disabled."""

    code: str = "ENTITY_NOT_FOUND"
    entity_type: str = "entity"

    def __init__(self, natural_key: str, message: str | None = None):
        self.natural_key = natural_key
        super().__init__(message or f"{self.entity_type} {natural_key!r} not found")


class CompanyNotFoundError(EntityNotFoundError):
    code: str = "COMPANY_NOT_FOUND"
    field: str = "CompanyNPWP"
    entity_type: str = "company"

    def __init__(self, tax_id: str):
        super().__init__(tax_id, f"Company with NPWP {tax_id} not found")


class WorkerNotFoundError(EntityNotFoundError):
    code: str = "WORKER_NOT_FOUND"
    field: str = "TKAPassport"
    entity_type: str = "worker"

    def __init__(self, passport: str):
        super().__init__(passport, f"TKA worker with passport {passport} not found")


class JobDescriptionNotFoundError(EntityNotFoundError):
    code: str = "JOB_DESCRIPTION_NOT_FOUND"
    field: str = "JobName"
    entity_type: str = "job_description"

    def __init__(self, job_name: str):
        super().__init__(job_name, f"Job description '{job_name}' not found for company")
