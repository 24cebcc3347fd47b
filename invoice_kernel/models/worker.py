"""
Module: invoice_kernel.models.worker
Responsibility: ORM persistence for foreign workers (TKA) that invoice lines
    bill for. A worker is identified by passport number.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - passport is unique (uq_worker_passport).

Failure modes:
    - IntegrityError on duplicate passport.
"""

from enum import Enum

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from invoice_kernel.db.base import TrackedBase

IMPORTED_DIVISION = "Imported"


class Gender(str, Enum):
    """Worker gender as recorded on the work permit."""

    MALE = "male"
    FEMALE = "female"


class Worker(TrackedBase):
    """
    Foreign worker (TKA) referenced by invoice lines.

    Guarantees:
        - passport is globally unique.
        - Workers created by an import land in the IMPORTED_DIVISION.
    """

    __tablename__ = "workers"

    __table_args__ = (
        UniqueConstraint("passport", name="uq_worker_passport"),
        Index("idx_worker_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Passport number (natural key)
    passport: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    division: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=IMPORTED_DIVISION,
    )

    gender: Mapped[Gender] = mapped_column(
        String(10),
        nullable=False,
        default=Gender.MALE.value,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        return f"<Worker {self.passport}: {self.name}>"
