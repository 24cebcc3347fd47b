"""Entity resolvers: natural key -> existing or newly staged master entity."""

from __future__ import annotations

from typing import TYPE_CHECKING

from invoice_ingestion.resolvers.base import (
    COMPANY,
    JOB_DESCRIPTION,
    WORKER,
    EntityResolver,
    HeaderScope,
    Resolution,
    ResolutionCache,
)
from invoice_ingestion.resolvers.company import CompanyResolver
from invoice_ingestion.resolvers.job import JobDescriptionResolver
from invoice_ingestion.resolvers.worker import WorkerResolver

if TYPE_CHECKING:
    from invoice_ingestion.services.store import InvoiceStore


def default_resolver_registry(store: InvoiceStore) -> dict[str, EntityResolver]:
    """Return a dict of entity_type -> resolver bound to ``store``."""
    return {
        COMPANY: CompanyResolver(store),
        WORKER: WorkerResolver(store),
        JOB_DESCRIPTION: JobDescriptionResolver(store),
    }


__all__ = [
    "COMPANY",
    "JOB_DESCRIPTION",
    "WORKER",
    "CompanyResolver",
    "EntityResolver",
    "HeaderScope",
    "JobDescriptionResolver",
    "Resolution",
    "ResolutionCache",
    "WorkerResolver",
    "default_resolver_registry",
]
