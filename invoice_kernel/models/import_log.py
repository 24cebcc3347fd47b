"""
Module: invoice_kernel.models.import_log
Responsibility: ORM persistence for the per-batch import audit record.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - Exactly one ImportLog row per import batch (uq_import_log_batch).
    - error_summary holds at most the first ten errors as JSON text; the
      full error list lives only in the returned import result.

Audit relevance:
    The log is written after the batch commit attempt, so its counters
    reflect the authoritative commit outcome.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from invoice_kernel.db.base import TrackedBase, UUIDString


class ImportLog(TrackedBase):
    """Audit record of one import batch."""

    __tablename__ = "import_logs"

    __table_args__ = (
        UniqueConstraint("import_batch_id", name="uq_import_log_batch"),
        Index("idx_import_log_start", "start_time"),
    )

    import_batch_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # "spreadsheet" or "delimited_text"
    file_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    total_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    success_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    imported_by: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # JSON text
    error_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    import_options: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ImportLog {self.import_batch_id} "
            f"{self.success_records}/{self.total_records}>"
        )
