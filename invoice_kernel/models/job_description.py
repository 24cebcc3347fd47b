"""
Module: invoice_kernel.models.job_description
Responsibility: ORM persistence for the per-company catalogue of billable
    jobs. Invoice lines reference a job description and may override its
    name or description text.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - A job description belongs to exactly one company.
    - Lookup by name is case-insensitive within a company (enforced by the
      store query, not by a constraint).
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoice_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from invoice_kernel.models.company import Company

# Sort position for jobs created by an import (after curated entries).
IMPORTED_SORT_ORDER = 999


class JobDescription(TrackedBase):
    """Billable job offered to a company."""

    __tablename__ = "job_descriptions"

    __table_args__ = (
        Index("idx_job_company", "company_id"),
        Index("idx_job_company_name", "company_id", "job_name"),
    )

    company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )

    job_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    job_description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Default unit price
    price: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal("0"),
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=IMPORTED_SORT_ORDER,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    company: Mapped["Company"] = relationship()

    def __repr__(self) -> str:
        return f"<JobDescription {self.job_name} company={self.company_id}>"
