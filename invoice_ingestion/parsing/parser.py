"""
Record parser: sections of raw rows -> ordered header and line records.

Pure transformation over adapter output. Every cell goes through the
lenient coercers in invoice_ingestion.domain.coercion, so a malformed cell
takes its documented default instead of failing the row:

    InvoiceDate    -> today (from the injected clock)
    DueDate        -> None
    VATPercentage  -> 11.00
    Baris/Quantity -> 1
    UnitPrice/LineTotal -> 0
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from invoice_kernel.domain.clock import Clock

from invoice_ingestion.adapters.base import ExtractedSource, Section
from invoice_ingestion.domain.coercion import (
    coerce_date,
    coerce_decimal,
    coerce_int,
    coerce_optional_str,
    coerce_str,
)
from invoice_ingestion.domain.types import (
    DEFAULT_VAT_PERCENTAGE,
    ImportInvoiceHeader,
    ImportInvoiceLine,
    SourceRow,
    invoice_number_key,
)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class ParsedSource:
    """Header and line records in input order."""

    headers: tuple[ImportInvoiceHeader, ...]
    lines: tuple[ImportInvoiceLine, ...]


def _header_from_row(section: Section, row: SourceRow, clock: Clock) -> ImportInvoiceHeader:
    get = section.value
    return ImportInvoiceHeader(
        row_number=row.row_number,
        invoice_number=coerce_str(get(row, "InvoiceNumber")),
        company_name=coerce_str(get(row, "CompanyName")),
        company_tax_id=coerce_str(get(row, "CompanyNPWP")),
        invoice_date=coerce_date(get(row, "InvoiceDate"), clock.today()),
        due_date=coerce_date(get(row, "DueDate"), None),
        notes=coerce_optional_str(get(row, "Notes")),
        vat_percentage=coerce_decimal(get(row, "VATPercentage"), DEFAULT_VAT_PERCENTAGE),
    )


def _line_from_row(section: Section, row: SourceRow) -> ImportInvoiceLine:
    get = section.value
    return ImportInvoiceLine(
        row_number=row.row_number,
        invoice_number=coerce_str(get(row, "InvoiceNumber")),
        baris=coerce_int(get(row, "Baris")),
        worker_name=coerce_str(get(row, "TKAName")),
        worker_passport=coerce_str(get(row, "TKAPassport")),
        job_name=coerce_str(get(row, "JobName")),
        job_description=coerce_str(get(row, "JobDescription")),
        quantity=coerce_int(get(row, "Quantity")),
        unit_price=coerce_decimal(get(row, "UnitPrice"), _ZERO),
        line_total=coerce_decimal(get(row, "LineTotal"), _ZERO),
    )


def parse_headers(section: Section, clock: Clock) -> list[ImportInvoiceHeader]:
    """One header record per populated row of the headers section."""
    return [_header_from_row(section, row, clock) for row in section.rows]


def parse_lines(section: Section) -> list[ImportInvoiceLine]:
    """One line record per populated row of the lines section."""
    return [_line_from_row(section, row) for row in section.rows]


def parse_flat_rows(
    section: Section,
    clock: Clock,
) -> tuple[list[ImportInvoiceHeader], list[ImportInvoiceLine]]:
    """
    Split single-table rows into headers and lines.

    Every row yields one line. The header of an invoice is read from the
    first row carrying its number; headers come out in order of first
    appearance. Header fields on later rows of the same invoice are ignored.
    """
    headers: list[ImportInvoiceHeader] = []
    seen: set[str] = set()
    lines: list[ImportInvoiceLine] = []
    for row in section.rows:
        line = _line_from_row(section, row)
        lines.append(line)
        key = invoice_number_key(line.invoice_number)
        if key not in seen:
            seen.add(key)
            headers.append(_header_from_row(section, row, clock))
    return headers, lines


def parse_extracted(extracted: ExtractedSource, clock: Clock) -> ParsedSource:
    """Parse whichever sections an adapter produced."""
    if extracted.flat is not None:
        headers, lines = parse_flat_rows(extracted.flat, clock)
    else:
        headers = parse_headers(extracted.headers, clock) if extracted.headers else []
        lines = parse_lines(extracted.lines) if extracted.lines else []
    return ParsedSource(headers=tuple(headers), lines=tuple(lines))
