"""
EntityResolver protocol, Resolution result and the per-batch ResolutionCache.

Resolvers map a natural key to an existing master entity or, when allowed,
to a newly created one. Creations are never written directly: they are
staged in a HeaderScope and reach the store only when the whole invoice
header assembled successfully (HeaderScope.apply). A failed header's scope
is simply dropped, together with every entity it would have created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Hashable, Protocol
from uuid import UUID

from invoice_kernel.exceptions import EntityNotFoundError

if TYPE_CHECKING:
    from invoice_ingestion.services.store import InvoiceStore

COMPANY = "company"
WORKER = "worker"
JOB_DESCRIPTION = "job_description"

CacheKey = tuple[str, Hashable]


def _str(d: dict[str, Any], key: str, default: str = "") -> str:
    v = d.get(key)
    return str(v).strip() if v is not None else default


def _optional_str(d: dict[str, Any], key: str) -> str | None:
    v = d.get(key)
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return str(v).strip()


@dataclass(frozen=True)
class Resolution:
    """Result of resolving one natural key."""

    entity_id: UUID | None = None
    created: bool = False
    error: EntityNotFoundError | None = None
    record: Any = None

    @property
    def success(self) -> bool:
        return self.error is None


class ResolutionCache:
    """Natural key -> resolved record, for one batch call only."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def get(self, key: CacheKey) -> Any | None:
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)

    def scope(self) -> "HeaderScope":
        """Staging area for the resolutions of one invoice header."""
        return HeaderScope(self)

    def _merge(self, entries: dict[CacheKey, Any]) -> None:
        self._entries.update(entries)


@dataclass
class HeaderScope:
    """Resolutions and pending creations of one header, not yet applied."""

    parent: ResolutionCache
    entries: dict[CacheKey, Any] = field(default_factory=dict)
    pending: list[tuple[str, Any]] = field(default_factory=list)

    def get(self, key: CacheKey) -> Any | None:
        if key in self.entries:
            return self.entries[key]
        return self.parent.get(key)

    def remember(self, key: CacheKey, record: Any) -> None:
        self.entries[key] = record

    def stage(self, key: CacheKey, entity_type: str, record: Any) -> None:
        self.entries[key] = record
        self.pending.append((entity_type, record))

    def created_count(self, entity_type: str) -> int:
        return sum(1 for t, _ in self.pending if t == entity_type)

    def apply(self, store: InvoiceStore) -> None:
        """Queue staged creations in the store and publish entries to the batch cache.

        Companies are queued before the jobs that reference them.
        """
        order = {COMPANY: 0, WORKER: 1, JOB_DESCRIPTION: 2}
        for entity_type, record in sorted(self.pending, key=lambda p: order[p[0]]):
            if entity_type == COMPANY:
                store.add_company(record)
            elif entity_type == WORKER:
                store.add_worker(record)
            else:
                store.add_job_description(record)
        self.parent._merge(self.entries)


class EntityResolver(Protocol):
    """Protocol for find-or-create of one master entity type."""

    @property
    def entity_type(self) -> str: ...

    def resolve(
        self,
        natural_key: Any,
        data: dict[str, Any],
        allow_create: bool,
        cache: HeaderScope,
    ) -> Resolution:
        """Existing or staged entity for the key, or a not-found error."""
        ...


__all__ = [
    "COMPANY",
    "WORKER",
    "JOB_DESCRIPTION",
    "EntityResolver",
    "HeaderScope",
    "Resolution",
    "ResolutionCache",
]
