"""
Import service: open -> validate structure -> parse -> assemble -> commit -> report.

Orchestrates source adapters, the record parser, the invoice assembler and
the reporter for one batch. Uses structured logging (LogContext,
get_logger("ingestion.*")).

Failure isolation:
    - A structurally invalid source ends the batch with a single "File"
      error and zero records. The audit log is still written.
    - Each invoice header is assembled inside its own failure boundary.
      A failure is recorded and the loop continues; entities staged for
      the failed header are discarded.
    - A header whose number is already stored is skipped: it counts as
      skipped, not failed, and is reported as a WARNING.
    - Successful invoices are queued and made durable by ONE commit after
      the loop. If that commit fails, every invoice counted as succeeded
      is reported as failed with a "Commit" error and statistics are
      zeroed: the returned counters always match what was stored.
    - Nothing raises out of import_invoices().
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID, uuid4

from invoice_config.schema import ImportOptions
from invoice_kernel.domain.clock import Clock, SystemClock
from invoice_kernel.exceptions import (
    CommitFailedError,
    DuplicateInvoiceError,
    InvoiceImportError,
    SourceStructureError,
)
from invoice_kernel.logging_config import LogContext, get_logger

from invoice_ingestion.adapters import (
    InvoiceSource,
    SourceAdapter,
    SourceProbe,
    default_adapters,
    open_source,
    probe_source,
    source_kind_for,
)
from invoice_ingestion.domain.types import (
    ImportBatch,
    ImportBatchStatus,
    ImportErrorSeverity,
    ImportInvoiceHeader,
    ImportRecordError,
    ImportStatistics,
    ResolvedInvoice,
    SourceKind,
)
from invoice_ingestion.domain.validators import validate_batch_uniqueness
from invoice_ingestion.parsing.parser import ParsedSource, parse_extracted
from invoice_ingestion.resolvers import (
    COMPANY,
    JOB_DESCRIPTION,
    WORKER,
    EntityResolver,
    HeaderScope,
    ResolutionCache,
)
from invoice_ingestion.services.assembler import InvoiceAssembler, group_lines
from invoice_ingestion.services.reporter import ImportReporter, ImportResult
from invoice_ingestion.services.store import InvoiceStore

logger = get_logger("ingestion.import_service")

_FILE_FIELD = "File"
_GENERAL_FIELD = "General"
_GENERAL_CODE = "IMPORT_ERROR"


def _record_error(
    header: ImportInvoiceHeader,
    exc: Exception,
    severity: ImportErrorSeverity = ImportErrorSeverity.ERROR,
) -> ImportRecordError:
    """Convert an exception raised while assembling ``header`` into an error entry."""
    if isinstance(exc, InvoiceImportError):
        field_name, code = exc.field, exc.code
    else:
        field_name, code = _GENERAL_FIELD, _GENERAL_CODE
    return ImportRecordError(
        row_number=header.row_number,
        field=field_name,
        message=str(exc) or type(exc).__name__,
        value=header.invoice_number,
        error_code=code,
        severity=severity,
    )


@dataclass
class _Progress:
    """Mutable accumulator behind the frozen ImportBatch snapshots."""

    batch_id: UUID
    file_name: str
    file_kind: SourceKind
    initiated_by: UUID
    started_at: datetime
    total_records: int = 0
    errors: list[ImportRecordError] = field(default_factory=list)
    succeeded: list[ResolvedInvoice] = field(default_factory=list)
    failed_records: int = 0
    warnings: list[ImportRecordError] = field(default_factory=list)
    status: ImportBatchStatus = ImportBatchStatus.RUNNING
    finished_at: datetime | None = None

    def snapshot(self) -> ImportBatch:
        return ImportBatch(
            batch_id=self.batch_id,
            file_name=self.file_name,
            file_kind=self.file_kind,
            initiated_by=self.initiated_by,
            status=self.status,
            started_at=self.started_at,
            finished_at=self.finished_at,
            total_records=self.total_records,
            succeeded_records=len(self.succeeded),
            failed_records=self.failed_records,
            skipped_records=len(self.warnings),
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
        )

    def fail(self, error: ImportRecordError) -> None:
        self.failed_records += 1
        self.errors.append(error)

    def skip(self, warning: ImportRecordError) -> None:
        self.warnings.append(warning)


@dataclass
class _Statistics:
    new_companies: int = 0
    new_workers: int = 0
    new_job_descriptions: int = 0
    breakdown: Counter = field(default_factory=Counter)

    def add(self, scope: HeaderScope, invoice: ResolvedInvoice) -> None:
        self.new_companies += scope.created_count(COMPANY)
        self.new_workers += scope.created_count(WORKER)
        self.new_job_descriptions += scope.created_count(JOB_DESCRIPTION)
        self.breakdown[invoice.company_name or str(invoice.company_id)] += 1

    def freeze(self, invoices: list[ResolvedInvoice]) -> ImportStatistics:
        return ImportStatistics(
            new_companies=self.new_companies,
            new_workers=self.new_workers,
            new_job_descriptions=self.new_job_descriptions,
            new_invoices=len(invoices),
            total_imported_amount=sum(
                (inv.total_amount for inv in invoices), Decimal("0")
            ),
            company_breakdown=dict(self.breakdown),
        )


class ImportService:
    """
    Batch invoice import against an InvoiceStore.

    Args:
        store: Storage boundary; receives queued rows and the single commit.
        clock: Time source for batch timestamps and default invoice dates.
        adapters: SourceKind -> adapter (defaults to XLSX and CSV).
        resolvers: entity type -> resolver (defaults bound to ``store``).
        reporter: Builds the result and writes the audit log.
    """

    def __init__(
        self,
        store: InvoiceStore,
        clock: Clock | None = None,
        adapters: dict[SourceKind, SourceAdapter] | None = None,
        resolvers: dict[str, EntityResolver] | None = None,
        reporter: ImportReporter | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._adapters = adapters or default_adapters()
        self._assembler = InvoiceAssembler(store, self._clock, resolvers)
        self._reporter = reporter or ImportReporter()

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def import_file(
        self,
        path: Path | str,
        initiated_by: UUID,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """Open ``path`` (kind from its suffix) and import it.

        Raises:
            ValueError: for an unsupported file suffix.
        """
        options = options or ImportOptions()
        path = Path(path)
        kind = source_kind_for(path)
        try:
            source = open_source(path, options.csv)
        except Exception as exc:
            logger.warning(
                "source_open_failed",
                extra={"file_name": path.name, "error": str(exc)},
            )
            return self._fatal(
                InvoiceSource(file_name=path.name, kind=kind),
                initiated_by,
                options,
                ImportRecordError(
                    row_number=0,
                    field=_FILE_FIELD,
                    message=f"Import failed: {exc}",
                    error_code=_GENERAL_CODE,
                    severity=ImportErrorSeverity.CRITICAL,
                ),
            )
        try:
            return self.import_invoices(source, initiated_by, options)
        finally:
            source.close()

    def probe(self, source: InvoiceSource, options: ImportOptions | None = None) -> SourceProbe:
        """Structure check and record estimate without importing."""
        options = options or ImportOptions()
        return probe_source(source, options.csv, self._adapters)

    def import_invoices(
        self,
        source: InvoiceSource,
        initiated_by: UUID,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """Import every invoice of ``source``; never raises."""
        options = options or ImportOptions()
        progress = self._start(source, initiated_by)

        with LogContext.bind(
            correlation_id=str(progress.batch_id),
            producer="ingestion",
            actor_id=str(initiated_by),
        ):
            logger.info(
                "batch_started",
                extra={
                    "file_name": source.file_name,
                    "file_kind": source.kind.value,
                    "create_missing_entities": options.create_missing_entities,
                    "import_as_draft": options.import_as_draft,
                },
            )

            try:
                parsed = self._read(source, options)
            except SourceStructureError as exc:
                logger.warning("source_structure_invalid", extra={"reason": exc.reason})
                progress.errors.append(
                    ImportRecordError(
                        row_number=0,
                        field=exc.field,
                        message=exc.reason,
                        error_code=exc.code,
                        severity=ImportErrorSeverity.CRITICAL,
                    )
                )
                return self._finish(progress, options, ImportStatistics())
            except Exception as exc:
                logger.error("source_read_failed", extra={"error": str(exc)}, exc_info=True)
                progress.errors.append(
                    ImportRecordError(
                        row_number=0,
                        field=_FILE_FIELD,
                        message=f"Import failed: {exc}",
                        error_code=_GENERAL_CODE,
                        severity=ImportErrorSeverity.CRITICAL,
                    )
                )
                return self._finish(progress, options, ImportStatistics())

            statistics = self._process_headers(parsed, progress, options)
            frozen = self._commit(progress, statistics)
            return self._finish(progress, options, frozen)

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _start(self, source: InvoiceSource, initiated_by: UUID) -> _Progress:
        return _Progress(
            batch_id=uuid4(),
            file_name=source.file_name,
            file_kind=source.kind,
            initiated_by=initiated_by,
            started_at=self._clock.now(),
        )

    def _read(self, source: InvoiceSource, options: ImportOptions) -> ParsedSource:
        adapter = self._adapters.get(source.kind)
        if adapter is None:
            raise ValueError(f"No adapter for source kind {source.kind.value!r}")
        adapter.check_structure(source, options.csv)
        parsed = parse_extracted(adapter.extract(source, options.csv), self._clock)
        logger.info(
            "source_parsed",
            extra={"headers": len(parsed.headers), "lines": len(parsed.lines)},
        )
        return parsed

    def _process_headers(
        self,
        parsed: ParsedSource,
        progress: _Progress,
        options: ImportOptions,
    ) -> _Statistics:
        progress.total_records = len(parsed.headers)
        duplicates = validate_batch_uniqueness(parsed.headers)
        lines_by_number = group_lines(parsed.lines)
        cache = ResolutionCache()
        statistics = _Statistics()

        for index, header in enumerate(parsed.headers):
            with LogContext.bind(invoice_number=header.invoice_number or None):
                if index in duplicates:
                    self._record_failure(progress, header, duplicates[index])
                    continue

                scope = cache.scope()
                try:
                    invoice = self._assembler.assemble(
                        header, lines_by_number, progress.snapshot(), options, scope
                    )
                    scope.apply(self._store)
                    self._store.add_invoice(invoice)
                except DuplicateInvoiceError as exc:
                    self._record_skip(progress, header, exc)
                    continue
                except Exception as exc:
                    self._record_failure(progress, header, exc)
                    continue

                progress.succeeded.append(invoice)
                statistics.add(scope, invoice)
                logger.info(
                    "record_imported",
                    extra={
                        "source_row": header.row_number,
                        "line_count": len(invoice.lines),
                        "total_amount": invoice.total_amount,
                    },
                )

        return statistics

    def _record_failure(
        self,
        progress: _Progress,
        header: ImportInvoiceHeader,
        exc: Exception,
    ) -> None:
        error = _record_error(header, exc)
        progress.fail(error)
        logger.warning(
            "record_failed",
            extra={
                "source_row": header.row_number,
                "error_code": error.error_code,
                "field": error.field,
                "error_msg": error.message,
            },
        )

    def _record_skip(
        self,
        progress: _Progress,
        header: ImportInvoiceHeader,
        exc: DuplicateInvoiceError,
    ) -> None:
        warning = _record_error(header, exc, ImportErrorSeverity.WARNING)
        progress.skip(warning)
        logger.info(
            "record_skipped",
            extra={"source_row": header.row_number, "error_code": warning.error_code},
        )

    def _commit(self, progress: _Progress, statistics: _Statistics) -> ImportStatistics:
        try:
            self._store.commit()
        except Exception as exc:
            logger.error(
                "batch_commit_failed",
                extra={"queued_invoices": len(progress.succeeded), "error": str(exc)},
                exc_info=True,
            )
            self._store.rollback()
            for invoice in progress.succeeded:
                err = CommitFailedError(invoice.invoice_number, str(exc))
                progress.fail(
                    ImportRecordError(
                        row_number=invoice.source_row,
                        field=err.field,
                        message=str(err),
                        value=invoice.invoice_number,
                        error_code=err.code,
                        severity=ImportErrorSeverity.ERROR,
                    )
                )
            progress.succeeded.clear()
            return ImportStatistics()

        logger.info("batch_committed", extra={"invoices": len(progress.succeeded)})
        return statistics.freeze(progress.succeeded)

    def _finish(
        self,
        progress: _Progress,
        options: ImportOptions,
        statistics: ImportStatistics,
    ) -> ImportResult:
        progress.status = ImportBatchStatus.FINISHED
        progress.finished_at = self._clock.now()
        result = self._reporter.build_result(progress.snapshot(), statistics)

        try:
            self._reporter.write_audit_log(self._store, result, options)
        except Exception as exc:
            logger.error("audit_log_failed", extra={"error": str(exc)}, exc_info=True)
            self._store.rollback()

        logger.info(
            "batch_finished",
            extra={
                "total": result.total_records,
                "succeeded": result.succeeded_records,
                "failed": result.failed_records,
                "skipped": result.skipped_records,
                "success": result.success,
                "duration_ms": int(result.processing_time * 1000),
            },
        )
        return result

    def _fatal(
        self,
        source: InvoiceSource,
        initiated_by: UUID,
        options: ImportOptions,
        error: ImportRecordError,
    ) -> ImportResult:
        progress = self._start(source, initiated_by)
        with LogContext.bind(
            correlation_id=str(progress.batch_id),
            producer="ingestion",
            actor_id=str(initiated_by),
        ):
            progress.errors.append(error)
            return self._finish(progress, options, ImportStatistics())
