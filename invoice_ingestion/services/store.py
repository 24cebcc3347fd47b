"""
InvoiceStore -- the storage boundary of the import engine.

The engine reads master entities and queues new rows only through this
protocol. Everything queued by add_* becomes durable in the single
commit() issued after all headers were processed; add_import_log() is
the exception and persists on its own.

SqlAlchemyInvoiceStore is the shipped implementation over a Session.
Lookups run with autoflush disabled so that queued rows are never
flushed mid-batch: a constraint violation surfaces at commit(), where
the orchestrator handles it, and not inside an unrelated lookup.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from invoice_kernel.domain.clock import Clock
from invoice_kernel.logging_config import get_logger
from invoice_kernel.models.company import Company
from invoice_kernel.models.import_log import ImportLog
from invoice_kernel.models.invoice import Invoice, InvoiceLine
from invoice_kernel.models.job_description import JobDescription
from invoice_kernel.models.worker import Gender, Worker

from invoice_ingestion.domain.records import (
    CompanyRecord,
    ImportLogEntry,
    JobRecord,
    WorkerRecord,
)
from invoice_ingestion.domain.types import ResolvedInvoice

logger = get_logger("ingestion.store")


# =============================================================================
# Protocol
# =============================================================================


class InvoiceStore(Protocol):
    """Storage operations the import engine depends on."""

    def find_company_by_tax_id(self, tax_id: str) -> CompanyRecord | None: ...

    def find_worker_by_passport(self, passport: str) -> WorkerRecord | None: ...

    def find_job_by_name_in_company(
        self, company_id: UUID, job_name: str
    ) -> JobRecord | None:
        """Case-insensitive match on job name within one company."""
        ...

    def invoice_number_exists(self, invoice_number: str) -> bool: ...

    def add_company(self, company: CompanyRecord) -> None: ...

    def add_worker(self, worker: WorkerRecord) -> None: ...

    def add_job_description(self, job: JobRecord) -> None: ...

    def add_invoice(self, invoice: ResolvedInvoice) -> None: ...

    def commit(self) -> None:
        """Make everything queued durable, atomically."""
        ...

    def rollback(self) -> None: ...

    def add_import_log(self, entry: ImportLogEntry) -> None:
        """Persist the audit entry immediately (independent of commit())."""
        ...


# =============================================================================
# SQLAlchemy implementation
# =============================================================================


class SqlAlchemyInvoiceStore:
    """InvoiceStore over a SQLAlchemy Session.

    Args:
        session: Session the whole batch runs in.
        actor_id: Written to created_by_id of every row.
        clock: Stamps created_at/updated_at of queued rows, so every row of
            a batch carries the batch clock rather than the database time.
    """

    def __init__(self, session: Session, actor_id: UUID, clock: Clock):
        self._session = session
        self._actor_id = actor_id
        self._clock = clock

    @property
    def session(self) -> Session:
        return self._session

    def _stamp(self) -> dict[str, datetime]:
        now = self._clock.now()
        return {"created_at": now, "updated_at": now}

    # -- lookups --------------------------------------------------------------

    def find_company_by_tax_id(self, tax_id: str) -> CompanyRecord | None:
        with self._session.no_autoflush:
            company = self._session.scalars(
                select(Company).where(Company.npwp == tax_id)
            ).first()
        if company is None:
            return None
        return CompanyRecord(
            id=company.id,
            company_name=company.company_name,
            npwp=company.npwp,
            idtku=company.idtku,
            address=company.address,
        )

    def find_worker_by_passport(self, passport: str) -> WorkerRecord | None:
        with self._session.no_autoflush:
            worker = self._session.scalars(
                select(Worker).where(Worker.passport == passport)
            ).first()
        if worker is None:
            return None
        return WorkerRecord(
            id=worker.id,
            name=worker.name,
            passport=worker.passport,
            division=worker.division,
            gender=Gender(worker.gender),
        )

    def find_job_by_name_in_company(
        self, company_id: UUID, job_name: str
    ) -> JobRecord | None:
        stmt = (
            select(JobDescription)
            .where(JobDescription.company_id == company_id)
            .where(func.lower(JobDescription.job_name) == job_name.lower())
            .order_by(JobDescription.sort_order)
        )
        with self._session.no_autoflush:
            job = self._session.scalars(stmt).first()
        if job is None:
            return None
        return JobRecord(
            id=job.id,
            company_id=job.company_id,
            job_name=job.job_name,
            job_description=job.job_description,
            price=job.price,
            sort_order=job.sort_order,
        )

    def invoice_number_exists(self, invoice_number: str) -> bool:
        with self._session.no_autoflush:
            found = self._session.scalars(
                select(Invoice.id).where(Invoice.invoice_number == invoice_number)
            ).first()
        return found is not None

    # -- queued writes --------------------------------------------------------

    def add_company(self, company: CompanyRecord) -> None:
        self._session.add(
            Company(
                id=company.id,
                company_name=company.company_name,
                npwp=company.npwp,
                idtku=company.idtku,
                address=company.address,
                is_active=True,
                created_by_id=self._actor_id,
                **self._stamp(),
            )
        )

    def add_worker(self, worker: WorkerRecord) -> None:
        self._session.add(
            Worker(
                id=worker.id,
                name=worker.name,
                passport=worker.passport,
                division=worker.division,
                gender=worker.gender.value,
                is_active=True,
                created_by_id=self._actor_id,
                **self._stamp(),
            )
        )

    def add_job_description(self, job: JobRecord) -> None:
        self._session.add(
            JobDescription(
                id=job.id,
                company_id=job.company_id,
                job_name=job.job_name,
                job_description=job.job_description,
                price=job.price,
                sort_order=job.sort_order,
                is_active=True,
                created_by_id=self._actor_id,
                **self._stamp(),
            )
        )

    def add_invoice(self, invoice: ResolvedInvoice) -> None:
        row = Invoice(
            invoice_number=invoice.invoice_number,
            company_id=invoice.company_id,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            subtotal=invoice.subtotal,
            vat_percentage=invoice.vat_percentage,
            vat_amount=invoice.vat_amount,
            total_amount=invoice.total_amount,
            status=invoice.status.value,
            notes=invoice.notes,
            imported_from=invoice.imported_from,
            import_batch_id=invoice.batch_id,
            created_by_id=invoice.created_by,
            **self._stamp(),
        )
        for line in invoice.lines:
            row.lines.append(
                InvoiceLine(
                    baris=line.baris,
                    line_order=line.line_order,
                    worker_id=line.worker_id,
                    job_description_id=line.job_description_id,
                    custom_job_name=line.custom_job_name,
                    custom_job_description=line.custom_job_description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                    created_by_id=invoice.created_by,
                    **self._stamp(),
                )
            )
        self._session.add(row)

    # -- transaction ----------------------------------------------------------

    def commit(self) -> None:
        self._session.commit()
        logger.debug("store_committed")

    def rollback(self) -> None:
        self._session.rollback()
        logger.debug("store_rolled_back")

    def add_import_log(self, entry: ImportLogEntry) -> None:
        self._session.add(
            ImportLog(
                id=entry.id,
                import_batch_id=entry.import_batch_id,
                file_name=entry.file_name,
                file_type=entry.file_type,
                total_records=entry.total_records,
                success_records=entry.success_records,
                failed_records=entry.failed_records,
                skipped_records=entry.skipped_records,
                imported_by=entry.imported_by,
                start_time=entry.start_time,
                end_time=entry.end_time,
                error_summary=entry.error_summary,
                import_options=entry.import_options,
                created_by_id=self._actor_id,
                **self._stamp(),
            )
        )
        self._session.commit()
