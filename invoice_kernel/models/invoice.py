"""
Module: invoice_kernel.models.invoice
Responsibility: ORM persistence for invoices and their lines.
Architecture position: Kernel > Models. May import from db/base.py only.
    MUST NOT import from services/, ingestion, or outer layers.

Invariants enforced:
    - subtotal equals the sum of line_total over the invoice's lines.
    - vat_amount = subtotal * vat_percentage / 100, 2 decimal places.
    - total_amount is subtotal + vat_amount rounded to a whole currency unit.
    These are computed by invoice_kernel.domain.rounding before the row is
    written; the model stores the results and does not recompute them.

Failure modes:
    - IntegrityError on a line referencing a missing worker or job.

Audit relevance:
    imported_from and import_batch_id link an imported invoice to the
    ImportLog row of the batch that created it.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoice_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from invoice_kernel.models.company import Company
    from invoice_kernel.models.job_description import JobDescription
    from invoice_kernel.models.worker import Worker


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status.

    Imported invoices start as DRAFT unless the batch asked for FINALIZED.
    """

    DRAFT = "draft"
    FINALIZED = "finalized"


class Invoice(TrackedBase):
    """
    Invoice issued to a company.

    Guarantees:
        - lines are ordered by line_order.
        - status is DRAFT or FINALIZED.

    Non-goals:
        - Invoice numbers are not unique at the schema level; duplicate
          rejection is an import option enforced by the ingestion layer.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_number", "invoice_number"),
        Index("idx_invoice_company", "company_id"),
        Index("idx_invoice_batch", "import_batch_id"),
    )

    invoice_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )

    invoice_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    due_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    # Amounts
    subtotal: Mapped[Decimal] = mapped_column(nullable=False)

    vat_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
    )

    vat_amount: Mapped[Decimal] = mapped_column(nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(nullable=False)

    status: Mapped[InvoiceStatus] = mapped_column(
        String(20),
        nullable=False,
        default=InvoiceStatus.DRAFT.value,
    )

    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Import provenance
    imported_from: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    import_batch_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    lines: Mapped[list["InvoiceLine"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="InvoiceLine.line_order",
    )

    company: Mapped["Company"] = relationship()

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number} status={self.status}>"


class InvoiceLine(TrackedBase):
    """
    Billed line within an invoice.

    Guarantees:
        - line_total is stored as imported; it is never derived from
          quantity x unit_price.
        - custom_job_name / custom_job_description are set only when the
          text differs from the referenced job description.
    """

    __tablename__ = "invoice_lines"

    __table_args__ = (
        Index("idx_invoice_line_invoice", "invoice_id"),
        Index("idx_invoice_line_worker", "worker_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id"),
        nullable=False,
    )

    # Line group number within the invoice
    baris: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    line_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    worker_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("workers.id"),
        nullable=False,
    )

    job_description_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("job_descriptions.id"),
        nullable=False,
    )

    custom_job_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    custom_job_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    unit_price: Mapped[Decimal] = mapped_column(nullable=False)

    line_total: Mapped[Decimal] = mapped_column(nullable=False)

    invoice: Mapped["Invoice"] = relationship(
        back_populates="lines",
    )

    worker: Mapped["Worker"] = relationship()

    job_description: Mapped["JobDescription"] = relationship()

    def __repr__(self) -> str:
        return f"<InvoiceLine {self.line_order} invoice={self.invoice_id}>"
