"""
Shared fixtures for the invoice import test suite.

Every test that touches storage gets its own in-memory SQLite engine with
the full schema created, so tests never share rows and need no external
database.
"""

import io
import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from invoice_kernel.db.base import Base
from invoice_kernel.domain.clock import DeterministicClock
from invoice_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from invoice_kernel.models.company import Company
from invoice_kernel.models.job_description import JobDescription
from invoice_kernel.models.worker import Worker

from invoice_ingestion.services.store import SqlAlchemyInvoiceStore


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Structured JSON logging at DEBUG for the whole run."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture invoice_kernel log records as parsed JSON dicts.

    Usage:
        def test_x(captured_logs):
            ...
            events = [r["message"] for r in captured_logs()]
    """
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    handler.setLevel(logging.DEBUG)
    logger = logging.getLogger("invoice_kernel")
    logger.addHandler(handler)

    def _records() -> list[dict]:
        return [
            json.loads(line)
            for line in stream.getvalue().splitlines()
            if line.strip()
        ]

    yield _records
    logger.removeHandler(handler)


# ---------------------------------------------------------------------------
# Clock / actor
# ---------------------------------------------------------------------------


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 3, 15, 9, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_actor_id():
    return uuid4()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    sess = factory()
    yield sess
    sess.close()


@pytest.fixture
def store(session, test_actor_id, deterministic_clock):
    return SqlAlchemyInvoiceStore(session, test_actor_id, deterministic_clock)


@pytest.fixture
def existing_company(session, test_actor_id):
    company = Company(
        company_name="PT. Existing Company",
        npwp="01.111.111.1-111.000",
        idtku="01.111.111.1-111.000",
        address="Jl. Sudirman 1, Jakarta",
        is_active=True,
        created_by_id=test_actor_id,
    )
    session.add(company)
    session.commit()
    return company


@pytest.fixture
def existing_worker(session, test_actor_id):
    worker = Worker(
        name="Existing Worker",
        passport="E1234567",
        division="Engineering",
        gender="female",
        is_active=True,
        created_by_id=test_actor_id,
    )
    session.add(worker)
    session.commit()
    return worker


@pytest.fixture
def existing_job(session, existing_company, test_actor_id):
    job = JobDescription(
        company_id=existing_company.id,
        job_name="Consulting",
        job_description="Monthly consulting services",
        price=Decimal("5000000"),
        sort_order=1,
        is_active=True,
        created_by_id=test_actor_id,
    )
    session.add(job)
    session.commit()
    return job


# ---------------------------------------------------------------------------
# Source builders
# ---------------------------------------------------------------------------


def build_workbook(header_rows, line_rows, sheet_names=("Headers", "Lines")):
    """In-memory openpyxl workbook with a label row on every sheet."""
    from openpyxl import Workbook

    from invoice_ingestion.domain.columns import HEADER_COLUMNS, LINE_COLUMNS

    wb = Workbook()
    headers = wb.active
    headers.title = sheet_names[0]
    headers.append(list(HEADER_COLUMNS))
    for row in header_rows:
        headers.append(list(row))

    if len(sheet_names) > 1:
        lines = wb.create_sheet(sheet_names[1])
        lines.append(list(LINE_COLUMNS))
        for row in line_rows:
            lines.append(list(row))
    return wb


@pytest.fixture
def workbook_factory():
    return build_workbook
