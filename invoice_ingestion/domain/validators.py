"""
Pre-assembly validators for parsed invoice headers.

Cross-record checks (batch uniqueness) are pure. Checks against storage
(invoice number already stored) need the store and live in the assembler.

Architecture: invoice_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from invoice_kernel.exceptions import (
    DuplicateInvoiceNumberError,
    MissingFieldError,
    RecordImportError,
)

from invoice_ingestion.domain.types import ImportInvoiceHeader, invoice_number_key


def validate_header_fields(header: ImportInvoiceHeader) -> list[RecordImportError]:
    """Required header cells must be present."""
    errors: list[RecordImportError] = []
    if not header.invoice_number:
        errors.append(MissingFieldError("InvoiceNumber"))
    return errors


def validate_batch_uniqueness(
    headers: Sequence[ImportInvoiceHeader],
) -> dict[int, DuplicateInvoiceNumberError]:
    """
    Invoice numbers must be unique across the header rows of one source.

    Returns header index -> error for EVERY row that shares a number, not
    just the second and later occurrences. Numbers are compared without
    case. Blank numbers are left to validate_header_fields.
    """
    number_to_indices: dict[str, list[int]] = defaultdict(list)
    for i, header in enumerate(headers):
        if header.invoice_number:
            number_to_indices[invoice_number_key(header.invoice_number)].append(i)

    result: dict[int, DuplicateInvoiceNumberError] = {}
    for indices in number_to_indices.values():
        if len(indices) > 1:
            rows = tuple(headers[i].row_number for i in indices)
            for i in indices:
                result[i] = DuplicateInvoiceNumberError(headers[i].invoice_number, rows)
    return result
