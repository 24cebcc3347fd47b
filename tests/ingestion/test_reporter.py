"""Tests for ImportResult and ImportReporter."""

import json
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from invoice_config.schema import ImportOptions

from invoice_ingestion.domain.types import (
    ImportBatch,
    ImportBatchStatus,
    ImportErrorSeverity,
    ImportRecordError,
    ImportStatistics,
    SourceKind,
)
from invoice_ingestion.services.reporter import ERROR_SUMMARY_LIMIT, ImportReporter


def _batch(clock, actor, total=4, succeeded=3, failed=1, errors=(), finished=True):
    started = clock.now()
    return ImportBatch(
        batch_id=uuid4(),
        file_name="invoices.csv",
        file_kind=SourceKind.DELIMITED_TEXT,
        initiated_by=actor,
        status=ImportBatchStatus.FINISHED if finished else ImportBatchStatus.RUNNING,
        started_at=started,
        finished_at=started + timedelta(seconds=2, milliseconds=500) if finished else None,
        total_records=total,
        succeeded_records=succeeded,
        failed_records=failed,
        errors=errors,
    )


def _error(i):
    return ImportRecordError(row_number=i + 2, field="Lines", message=f"error {i}", value=f"INV-{i}")


class TestImportResult:

    def test_rates_and_timing(self, deterministic_clock, test_actor_id):
        result = ImportReporter().build_result(
            _batch(deterministic_clock, test_actor_id, errors=(_error(0),))
        )

        assert result.success_rate == 75.0
        assert result.processing_time == 2.5
        assert result.success is False

    def test_empty_batch_rate(self, deterministic_clock, test_actor_id):
        result = ImportReporter().build_result(
            _batch(deterministic_clock, test_actor_id, total=0, succeeded=0, failed=0)
        )
        assert result.success_rate == 0.0
        assert result.success is True

    def test_to_json(self, deterministic_clock, test_actor_id):
        stats = ImportStatistics(new_invoices=3, total_imported_amount=Decimal("5550000"))
        result = ImportReporter().build_result(
            _batch(deterministic_clock, test_actor_id, errors=(_error(0),)), stats
        )

        payload = json.loads(result.to_json())
        assert payload["file_kind"] == "delimited_text"
        assert payload["statistics"]["total_imported_amount"] == "5550000"
        assert payload["errors"][0]["severity"] == "error"
        assert payload["errors"][0]["value"] == "INV-0"

    def test_warnings_do_not_affect_success(self, deterministic_clock, test_actor_id):
        warning = ImportRecordError(
            row_number=2,
            field="InvoiceNumber",
            message="Invoice INV-0 already exists and will be skipped",
            value="INV-0",
            error_code="INVOICE_ALREADY_EXISTS",
            severity=ImportErrorSeverity.WARNING,
        )
        batch = replace(
            _batch(deterministic_clock, test_actor_id, total=2, succeeded=1, failed=0),
            skipped_records=1,
            warnings=(warning,),
        )
        reporter = ImportReporter()
        result = reporter.build_result(batch)

        assert result.success is True
        assert result.skipped_records == 1
        assert result.to_dict()["warnings"][0]["severity"] == "warning"
        assert reporter.build_log_entry(result, ImportOptions()).skipped_records == 1

    def test_unfinished_batch_rejected(self, deterministic_clock, test_actor_id):
        with pytest.raises(ValueError, match="not finished"):
            ImportReporter().build_result(
                _batch(deterministic_clock, test_actor_id, finished=False)
            )


class TestBuildLogEntry:

    def test_summary_keeps_first_errors_only(self, deterministic_clock, test_actor_id):
        errors = tuple(_error(i) for i in range(ERROR_SUMMARY_LIMIT + 5))
        reporter = ImportReporter()
        result = reporter.build_result(
            _batch(deterministic_clock, test_actor_id, total=15, succeeded=0, failed=15, errors=errors)
        )

        entry = reporter.build_log_entry(result, ImportOptions())
        summary = json.loads(entry.error_summary)

        assert len(summary) == ERROR_SUMMARY_LIMIT
        assert [e["value"] for e in summary] == [f"INV-{i}" for i in range(ERROR_SUMMARY_LIMIT)]
        assert entry.failed_records == 15
        assert entry.file_type == "delimited_text"

    def test_no_errors_no_summary(self, deterministic_clock, test_actor_id):
        reporter = ImportReporter()
        result = reporter.build_result(
            _batch(deterministic_clock, test_actor_id, total=1, succeeded=1, failed=0)
        )
        entry = reporter.build_log_entry(result, ImportOptions(allow_duplicates=True))

        assert entry.error_summary is None
        assert json.loads(entry.import_options)["allow_duplicates"] is True
        assert entry.import_batch_id == result.batch_id
        assert entry.end_time == result.finished_at
