"""
Job description resolver: (company, job name) -> JobDescription.

Names match case-insensitively within one company, so "Consulting" and
"CONSULTING" under the same company are the same job. A created job takes
the imported unit price as its default price and is appended to the end
of the company's catalogue.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from invoice_kernel.exceptions import JobDescriptionNotFoundError
from invoice_kernel.logging_config import get_logger
from invoice_kernel.models.job_description import IMPORTED_SORT_ORDER

from invoice_ingestion.domain.records import JobRecord
from invoice_ingestion.resolvers.base import (
    JOB_DESCRIPTION,
    HeaderScope,
    Resolution,
    _optional_str,
)

if TYPE_CHECKING:
    from invoice_ingestion.services.store import InvoiceStore

logger = get_logger("ingestion.resolvers.job")


class JobDescriptionResolver:
    """Resolves job descriptions by name within a company. Entity type: job_description.

    natural_key is a (company_id, job_name) pair.
    """

    entity_type: str = JOB_DESCRIPTION

    def __init__(self, store: InvoiceStore):
        self._store = store

    def resolve(
        self,
        natural_key: Any,
        data: dict[str, Any],
        allow_create: bool,
        cache: HeaderScope,
    ) -> Resolution:
        company_id, job_name = natural_key
        job_name = str(job_name or "").strip()
        if not job_name:
            return Resolution(error=JobDescriptionNotFoundError(job_name))

        key = (JOB_DESCRIPTION, (company_id, job_name.lower()))
        cached = cache.get(key)
        if cached is not None:
            return Resolution(entity_id=cached.id, record=cached)

        existing = self._store.find_job_by_name_in_company(company_id, job_name)
        if existing is not None:
            cache.remember(key, existing)
            return Resolution(entity_id=existing.id, record=existing)

        if not allow_create:
            return Resolution(error=JobDescriptionNotFoundError(job_name))

        record = JobRecord(
            id=uuid4(),
            company_id=_as_uuid(company_id),
            job_name=job_name,
            job_description=_optional_str(data, "job_description"),
            price=data.get("unit_price") or Decimal("0"),
            sort_order=IMPORTED_SORT_ORDER,
        )
        cache.stage(key, JOB_DESCRIPTION, record)
        logger.info(
            "job_description_staged",
            extra={
                "job_name": job_name,
                "company_id": str(company_id),
                "entity_id": str(record.id),
            },
        )
        return Resolution(entity_id=record.id, created=True, record=record)


def _as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
