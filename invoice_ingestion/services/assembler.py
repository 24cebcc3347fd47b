"""
InvoiceAssembler -- one parsed header plus its lines -> ResolvedInvoice.

Resolves the company, then every line's worker and job, computes the
invoice totals and returns the finished aggregate. Any failure raises a
RecordImportError subclass; the orchestrator isolates it to this header.
The assembler never writes to the store: entity creations are staged in
the HeaderScope passed as ``cache`` and the orchestrator applies them
together with the invoice once assembly succeeded.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from invoice_config.schema import ImportOptions
from invoice_kernel.domain.clock import Clock
from invoice_kernel.domain.rounding import compute_invoice_totals
from invoice_kernel.exceptions import DuplicateInvoiceError, NoLinesFoundError
from invoice_kernel.logging_config import get_logger
from invoice_kernel.models.invoice import InvoiceStatus

from invoice_ingestion.domain.types import (
    ImportBatch,
    ImportInvoiceHeader,
    ImportInvoiceLine,
    ResolvedInvoice,
    ResolvedInvoiceLine,
    invoice_number_key,
)
from invoice_ingestion.domain.validators import validate_header_fields
from invoice_ingestion.resolvers import (
    COMPANY,
    JOB_DESCRIPTION,
    WORKER,
    EntityResolver,
    HeaderScope,
    default_resolver_registry,
)
from invoice_ingestion.services.store import InvoiceStore

logger = get_logger("ingestion.assembler")


def group_lines(
    lines: Iterable[ImportInvoiceLine],
) -> dict[str, list[ImportInvoiceLine]]:
    """Invoice number key -> its lines, in input order.

    Keys come from invoice_number_key, so "INV-1" and "inv-1" share a group.
    """
    grouped: dict[str, list[ImportInvoiceLine]] = defaultdict(list)
    for line in lines:
        grouped[invoice_number_key(line.invoice_number)].append(line)
    return dict(grouped)


def _override(imported: str, canonical: str | None) -> str | None:
    """Imported text when it differs from the catalogue text, else None.

    Comparison is case-sensitive. Blank imported text never overrides.
    """
    if not imported:
        return None
    if imported == (canonical or ""):
        return None
    return imported


class InvoiceAssembler:
    """Builds ResolvedInvoice aggregates for one batch."""

    def __init__(
        self,
        store: InvoiceStore,
        clock: Clock,
        resolvers: dict[str, EntityResolver] | None = None,
    ):
        self._store = store
        self._clock = clock
        self._resolvers = resolvers or default_resolver_registry(store)

    def assemble(
        self,
        header: ImportInvoiceHeader,
        lines_by_number: dict[str, list[ImportInvoiceLine]],
        batch: ImportBatch,
        options: ImportOptions,
        cache: HeaderScope,
    ) -> ResolvedInvoice:
        """
        Assemble one invoice.

        Raises:
            MissingFieldError: blank invoice number.
            DuplicateInvoiceError: number already stored and duplicates
                are not allowed. The caller skips the header.
            NoLinesFoundError: no line references the header.
            EntityNotFoundError: a company, worker or job is unknown and
                creation is disabled (or its key is blank).
        """
        field_errors = validate_header_fields(header)
        if field_errors:
            raise field_errors[0]

        number = header.invoice_number
        if not options.allow_duplicates and self._store.invoice_number_exists(number):
            raise DuplicateInvoiceError(number)

        lines = lines_by_number.get(invoice_number_key(number)) or []
        if not lines:
            raise NoLinesFoundError(number)

        allow_create = options.create_missing_entities

        company = self._resolvers[COMPANY].resolve(
            header.company_tax_id,
            {"company_name": header.company_name},
            allow_create,
            cache,
        )
        if not company.success:
            raise company.error

        resolved_lines: list[ResolvedInvoiceLine] = []
        for order, line in enumerate(sorted(lines, key=lambda l: l.baris), start=1):
            worker = self._resolvers[WORKER].resolve(
                line.worker_passport,
                {"worker_name": line.worker_name},
                allow_create,
                cache,
            )
            if not worker.success:
                raise worker.error

            job = self._resolvers[JOB_DESCRIPTION].resolve(
                (company.entity_id, line.job_name),
                {
                    "job_description": line.job_description,
                    "unit_price": line.unit_price,
                },
                allow_create,
                cache,
            )
            if not job.success:
                raise job.error

            resolved_lines.append(
                ResolvedInvoiceLine(
                    baris=line.baris,
                    line_order=order,
                    worker_id=worker.entity_id,
                    job_description_id=job.entity_id,
                    custom_job_name=_override(line.job_name, job.record.job_name),
                    custom_job_description=_override(
                        line.job_description, job.record.job_description
                    ),
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                    row_number=line.row_number,
                )
            )

        totals = compute_invoice_totals(
            (line.line_total for line in resolved_lines),
            header.vat_percentage,
        )

        invoice = ResolvedInvoice(
            invoice_number=number,
            company_id=company.entity_id,
            company_name=company.record.company_name,
            invoice_date=header.invoice_date,
            due_date=header.due_date,
            notes=header.notes,
            vat_percentage=totals.vat_percentage,
            lines=tuple(resolved_lines),
            subtotal=totals.subtotal,
            vat_amount=totals.vat_amount,
            total_amount=totals.total_amount,
            status=InvoiceStatus.DRAFT if options.import_as_draft else InvoiceStatus.FINALIZED,
            batch_id=batch.batch_id,
            imported_from=batch.file_name,
            created_by=batch.initiated_by,
            created_at=self._clock.now(),
            source_row=header.row_number,
        )
        logger.debug(
            "invoice_assembled",
            extra={
                "invoice_number": number,
                "line_count": len(resolved_lines),
                "subtotal": totals.subtotal,
                "total_amount": totals.total_amount,
            },
        )
        return invoice
