"""Tests for entity resolvers and the per-batch resolution cache."""

from decimal import Decimal
from uuid import uuid4

from sqlalchemy import func, select

from invoice_kernel.exceptions import (
    CompanyNotFoundError,
    JobDescriptionNotFoundError,
    WorkerNotFoundError,
)
from invoice_kernel.models.company import IMPORTED_ADDRESS_PLACEHOLDER, Company
from invoice_kernel.models.job_description import IMPORTED_SORT_ORDER, JobDescription
from invoice_kernel.models.worker import IMPORTED_DIVISION, Worker

from invoice_ingestion.resolvers import (
    COMPANY,
    JOB_DESCRIPTION,
    WORKER,
    CompanyResolver,
    JobDescriptionResolver,
    ResolutionCache,
    WorkerResolver,
)


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


class TestCompanyResolver:

    def test_existing_company_found(self, store, existing_company):
        scope = ResolutionCache().scope()
        result = CompanyResolver(store).resolve(
            existing_company.npwp, {"company_name": "Ignored"}, True, scope
        )

        assert result.success
        assert result.created is False
        assert result.entity_id == existing_company.id
        assert result.record.company_name == "PT. Existing Company"
        assert scope.pending == []

    def test_missing_company_staged_not_written(self, store, session):
        scope = ResolutionCache().scope()
        result = CompanyResolver(store).resolve(
            "09.999.999.9-999.000", {"company_name": "PT. New"}, True, scope
        )

        assert result.created is True
        assert result.record.company_name == "PT. New"
        assert result.record.idtku == "09.999.999.9-999.000"
        assert result.record.address == IMPORTED_ADDRESS_PLACEHOLDER
        assert scope.created_count(COMPANY) == 1
        assert _count(session, Company) == 0

    def test_blank_name_falls_back_to_tax_id(self, store):
        scope = ResolutionCache().scope()
        result = CompanyResolver(store).resolve("01.5", {"company_name": ""}, True, scope)
        assert result.record.company_name == "01.5"

    def test_creation_disabled(self, store):
        result = CompanyResolver(store).resolve(
            "09.999", {}, False, ResolutionCache().scope()
        )
        assert not result.success
        assert isinstance(result.error, CompanyNotFoundError)
        assert result.error.field == "CompanyNPWP"

    def test_blank_key_is_not_found_even_with_creation(self, store):
        result = CompanyResolver(store).resolve("  ", {}, True, ResolutionCache().scope())
        assert isinstance(result.error, CompanyNotFoundError)


class TestWorkerResolver:

    def test_existing_worker_found(self, store, existing_worker):
        result = WorkerResolver(store).resolve(
            "E1234567", {"worker_name": "Other"}, True, ResolutionCache().scope()
        )
        assert result.entity_id == existing_worker.id
        assert result.record.division == "Engineering"

    def test_created_worker_defaults(self, store):
        result = WorkerResolver(store).resolve(
            "N7654321", {"worker_name": "New Worker"}, True, ResolutionCache().scope()
        )
        assert result.created
        assert result.record.name == "New Worker"
        assert result.record.division == IMPORTED_DIVISION

    def test_creation_disabled(self, store):
        result = WorkerResolver(store).resolve("N1", {}, False, ResolutionCache().scope())
        assert isinstance(result.error, WorkerNotFoundError)


class TestJobDescriptionResolver:

    def test_name_matched_case_insensitively(self, store, existing_company, existing_job):
        result = JobDescriptionResolver(store).resolve(
            (existing_company.id, "CONSULTING"), {}, True, ResolutionCache().scope()
        )
        assert result.entity_id == existing_job.id
        assert result.record.job_name == "Consulting"

    def test_same_name_other_company_is_new(self, store, existing_job):
        other_company = uuid4()
        result = JobDescriptionResolver(store).resolve(
            (other_company, "Consulting"),
            {"job_description": "Desc", "unit_price": Decimal("750")},
            True,
            ResolutionCache().scope(),
        )
        assert result.created
        assert result.record.company_id == other_company
        assert result.record.price == Decimal("750")
        assert result.record.sort_order == IMPORTED_SORT_ORDER

    def test_creation_disabled(self, store, existing_company):
        result = JobDescriptionResolver(store).resolve(
            (existing_company.id, "Unknown"), {}, False, ResolutionCache().scope()
        )
        assert isinstance(result.error, JobDescriptionNotFoundError)


class TestResolutionCache:

    def test_applied_scope_is_reused_by_later_headers(self, store, session):
        cache = ResolutionCache()
        resolver = WorkerResolver(store)

        first = cache.scope()
        created = resolver.resolve("N1", {"worker_name": "New"}, True, first)
        first.apply(store)

        second = cache.scope()
        again = resolver.resolve("N1", {"worker_name": "New"}, True, second)

        assert again.entity_id == created.entity_id
        assert again.created is False
        assert second.created_count(WORKER) == 0

        store.commit()
        assert _count(session, Worker) == 1

    def test_discarded_scope_creates_nothing(self, store, session):
        cache = ResolutionCache()
        resolver = CompanyResolver(store)

        dropped = cache.scope()
        first = resolver.resolve("09.1", {"company_name": "PT. New"}, True, dropped)
        # Header failed: scope is never applied.

        retry = cache.scope()
        second = resolver.resolve("09.1", {"company_name": "PT. New"}, True, retry)

        assert second.created is True
        assert second.entity_id != first.entity_id
        assert len(cache) == 0

        retry.apply(store)
        store.commit()
        assert _count(session, Company) == 1

    def test_apply_queues_companies_before_jobs(self, store, session):
        scope = ResolutionCache().scope()
        company = CompanyResolver(store).resolve("09.2", {"company_name": "PT. X"}, True, scope)
        JobDescriptionResolver(store).resolve(
            (company.entity_id, "Audit"), {"unit_price": Decimal("10")}, True, scope
        )

        assert scope.created_count(COMPANY) == 1
        assert scope.created_count(JOB_DESCRIPTION) == 1

        scope.apply(store)
        store.commit()
        job = session.scalars(select(JobDescription)).one()
        assert job.company_id == company.entity_id
