"""
Module: invoice_kernel.models.company
Responsibility: ORM persistence for client companies that invoices are
    issued to. A company is identified by its NPWP (Indonesian tax id).
Architecture position: Kernel > Models. May import from db/base.py only.
    MUST NOT import from services/, ingestion, or outer layers.

Invariants enforced:
    - npwp is unique (uq_company_npwp). It is the natural key used by the
      importer's company resolver.

Failure modes:
    - IntegrityError on duplicate npwp, typically surfaced at batch commit
      when two concurrent imports create the same company.

Audit relevance:
    Companies created by an import carry the placeholder address
    IMPORTED_ADDRESS_PLACEHOLDER and the importing actor in created_by_id,
    so imported records can be found and completed later.
"""

from sqlalchemy import Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from invoice_kernel.db.base import TrackedBase

IMPORTED_ADDRESS_PLACEHOLDER = "Imported - Address not provided"


class Company(TrackedBase):
    """
    Client company invoices are billed to.

    Guarantees:
        - npwp is globally unique.
        - idtku defaults to the npwp for imported companies.
    """

    __tablename__ = "companies"

    __table_args__ = (
        UniqueConstraint("npwp", name="uq_company_npwp"),
        Index("idx_company_active", "is_active"),
    )

    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Tax identifier (natural key)
    npwp: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    # Secondary tax-registry identifier
    idtku: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    address: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=IMPORTED_ADDRESS_PLACEHOLDER,
    )

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<Company {self.npwp}: {self.company_name}>"
