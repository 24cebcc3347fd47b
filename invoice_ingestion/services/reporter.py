"""
Import result value and the per-batch audit log entry.

ImportResult is what import_invoices() returns: counters, the full error
and warning lists and creation statistics. The audit log written through
the store keeps the same counters but only the first ERROR_SUMMARY_LIMIT
errors.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from invoice_config.schema import ImportOptions
from invoice_kernel.logging_config import get_logger

from invoice_ingestion.domain.records import ImportLogEntry
from invoice_ingestion.domain.types import (
    ImportBatch,
    ImportRecordError,
    ImportStatistics,
    SourceKind,
)
from invoice_ingestion.services.store import InvoiceStore

logger = get_logger("ingestion.reporter")

ERROR_SUMMARY_LIMIT = 10


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one import batch."""

    batch_id: UUID
    file_name: str
    file_kind: SourceKind
    initiated_by: UUID
    total_records: int
    succeeded_records: int
    failed_records: int
    started_at: datetime
    finished_at: datetime
    success: bool
    skipped_records: int = 0
    errors: tuple[ImportRecordError, ...] = ()
    warnings: tuple[ImportRecordError, ...] = ()
    statistics: ImportStatistics = field(default_factory=ImportStatistics)

    @property
    def processing_time(self) -> float:
        """Seconds between start and finish."""
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def success_rate(self) -> float:
        """Percentage of records imported, 0.0 for an empty batch."""
        if self.total_records == 0:
            return 0.0
        return round(self.succeeded_records * 100.0 / self.total_records, 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch_id": str(self.batch_id),
            "file_name": self.file_name,
            "file_kind": self.file_kind.value,
            "initiated_by": str(self.initiated_by),
            "total_records": self.total_records,
            "succeeded_records": self.succeeded_records,
            "failed_records": self.failed_records,
            "skipped_records": self.skipped_records,
            "success": self.success,
            "success_rate": self.success_rate,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "processing_time": self.processing_time,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "statistics": self.statistics.to_dict(),
        }

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


class ImportReporter:
    """Builds results and writes the audit log for finished batches."""

    def build_result(
        self,
        batch: ImportBatch,
        statistics: ImportStatistics | None = None,
    ) -> ImportResult:
        if batch.finished_at is None:
            raise ValueError(f"Batch {batch.batch_id} has not finished")
        return ImportResult(
            batch_id=batch.batch_id,
            file_name=batch.file_name,
            file_kind=batch.file_kind,
            initiated_by=batch.initiated_by,
            total_records=batch.total_records,
            succeeded_records=batch.succeeded_records,
            failed_records=batch.failed_records,
            skipped_records=batch.skipped_records,
            started_at=batch.started_at,
            finished_at=batch.finished_at,
            success=batch.success,
            errors=batch.errors,
            warnings=batch.warnings,
            statistics=statistics or ImportStatistics(),
        )

    def build_log_entry(
        self,
        result: ImportResult,
        options: ImportOptions,
    ) -> ImportLogEntry:
        summary = None
        if result.errors:
            summary = json.dumps(
                [e.to_dict() for e in result.errors[:ERROR_SUMMARY_LIMIT]]
            )
        return ImportLogEntry(
            import_batch_id=result.batch_id,
            file_name=result.file_name,
            file_type=result.file_kind.value,
            total_records=result.total_records,
            success_records=result.succeeded_records,
            failed_records=result.failed_records,
            skipped_records=result.skipped_records,
            imported_by=result.initiated_by,
            start_time=result.started_at,
            end_time=result.finished_at,
            error_summary=summary,
            import_options=json.dumps(options.to_dict(), sort_keys=True),
        )

    def write_audit_log(
        self,
        store: InvoiceStore,
        result: ImportResult,
        options: ImportOptions,
    ) -> ImportLogEntry:
        """Persist exactly one audit entry for the batch."""
        entry = self.build_log_entry(result, options)
        store.add_import_log(entry)
        logger.info(
            "audit_log_written",
            extra={
                "batch_id": str(result.batch_id),
                "error_count": len(result.errors),
                "warning_count": len(result.warnings),
                "summarized_errors": min(len(result.errors), ERROR_SUMMARY_LIMIT),
            },
        )
        return entry
