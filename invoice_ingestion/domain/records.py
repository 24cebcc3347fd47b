"""
invoice_ingestion.domain.records -- Storage-neutral master entity records.

What an InvoiceStore returns from lookups and receives for creation. Ids
are assigned when the record is built, so an entity staged during an
import already has the identity its invoice lines will reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from invoice_kernel.models.company import IMPORTED_ADDRESS_PLACEHOLDER
from invoice_kernel.models.job_description import IMPORTED_SORT_ORDER
from invoice_kernel.models.worker import IMPORTED_DIVISION, Gender


@dataclass(frozen=True)
class CompanyRecord:
    id: UUID
    company_name: str
    npwp: str
    idtku: str | None = None
    address: str = IMPORTED_ADDRESS_PLACEHOLDER


@dataclass(frozen=True)
class WorkerRecord:
    id: UUID
    name: str
    passport: str
    division: str = IMPORTED_DIVISION
    gender: Gender = Gender.MALE


@dataclass(frozen=True)
class JobRecord:
    id: UUID
    company_id: UUID
    job_name: str
    job_description: str | None = None
    price: Decimal = Decimal("0")
    sort_order: int = IMPORTED_SORT_ORDER


@dataclass(frozen=True)
class ImportLogEntry:
    """Audit record handed to the store once per batch."""

    import_batch_id: UUID
    file_name: str
    file_type: str
    total_records: int
    success_records: int
    failed_records: int
    imported_by: UUID
    start_time: datetime
    end_time: datetime | None
    skipped_records: int = 0
    error_summary: str | None = None
    import_options: str | None = None
    id: UUID = field(default_factory=uuid4)
