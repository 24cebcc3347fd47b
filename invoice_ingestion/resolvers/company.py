"""
Company resolver: NPWP -> Company.

Lookup by exact tax id. A created company takes the imported display name,
uses the tax id as its secondary id (idtku) and gets the placeholder
address until someone completes it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from invoice_kernel.exceptions import CompanyNotFoundError
from invoice_kernel.logging_config import get_logger

from invoice_ingestion.domain.records import CompanyRecord
from invoice_ingestion.resolvers.base import COMPANY, HeaderScope, Resolution, _str

if TYPE_CHECKING:
    from invoice_ingestion.services.store import InvoiceStore

logger = get_logger("ingestion.resolvers.company")


class CompanyResolver:
    """Resolves companies by tax id. Entity type: company."""

    entity_type: str = COMPANY

    def __init__(self, store: InvoiceStore):
        self._store = store

    def resolve(
        self,
        natural_key: Any,
        data: dict[str, Any],
        allow_create: bool,
        cache: HeaderScope,
    ) -> Resolution:
        tax_id = str(natural_key or "").strip()
        if not tax_id:
            return Resolution(error=CompanyNotFoundError(tax_id))

        key = (COMPANY, tax_id)
        cached = cache.get(key)
        if cached is not None:
            return Resolution(entity_id=cached.id, record=cached)

        existing = self._store.find_company_by_tax_id(tax_id)
        if existing is not None:
            cache.remember(key, existing)
            return Resolution(entity_id=existing.id, record=existing)

        if not allow_create:
            return Resolution(error=CompanyNotFoundError(tax_id))

        record = CompanyRecord(
            id=uuid4(),
            company_name=_str(data, "company_name") or tax_id,
            npwp=tax_id,
            idtku=tax_id,
        )
        cache.stage(key, COMPANY, record)
        logger.info(
            "company_staged",
            extra={"npwp": tax_id, "entity_id": str(record.id)},
        )
        return Resolution(entity_id=record.id, created=True, record=record)
