"""
Worker resolver: passport -> Worker (TKA).

Created workers land in the "Imported" division with the default gender;
the import file carries neither.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from invoice_kernel.exceptions import WorkerNotFoundError
from invoice_kernel.logging_config import get_logger
from invoice_kernel.models.worker import IMPORTED_DIVISION, Gender

from invoice_ingestion.domain.records import WorkerRecord
from invoice_ingestion.resolvers.base import WORKER, HeaderScope, Resolution, _str

if TYPE_CHECKING:
    from invoice_ingestion.services.store import InvoiceStore

logger = get_logger("ingestion.resolvers.worker")


class WorkerResolver:
    """Resolves workers by passport. Entity type: worker."""

    entity_type: str = WORKER

    def __init__(self, store: InvoiceStore):
        self._store = store

    def resolve(
        self,
        natural_key: Any,
        data: dict[str, Any],
        allow_create: bool,
        cache: HeaderScope,
    ) -> Resolution:
        passport = str(natural_key or "").strip()
        if not passport:
            return Resolution(error=WorkerNotFoundError(passport))

        key = (WORKER, passport)
        cached = cache.get(key)
        if cached is not None:
            return Resolution(entity_id=cached.id, record=cached)

        existing = self._store.find_worker_by_passport(passport)
        if existing is not None:
            cache.remember(key, existing)
            return Resolution(entity_id=existing.id, record=existing)

        if not allow_create:
            return Resolution(error=WorkerNotFoundError(passport))

        record = WorkerRecord(
            id=uuid4(),
            name=_str(data, "worker_name") or passport,
            passport=passport,
            division=IMPORTED_DIVISION,
            gender=Gender.MALE,
        )
        cache.stage(key, WORKER, record)
        logger.info(
            "worker_staged",
            extra={"passport": passport, "entity_id": str(record.id)},
        )
        return Resolution(entity_id=record.id, created=True, record=record)
