"""
Flow tests for the job ledger

All flows run against in-memory storage; async calls are driven
with asyncio.run.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from payshare.audit import AuditLogger
from payshare.engine import compute_advanced, compute_basic
from payshare.ledger import JobLedger, create_app_components
from payshare.models.audit import AuditEventBuilder, AuditEventType
from payshare.models.job import (
    AdvancedPolicy,
    DistributionKind,
    Frequency,
    Intern,
    InternPaymentMode,
    JobRecord,
    JobRequest,
    RoleAssignment,
)
from payshare.queries import QueryExecutionError
from payshare.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryJobStorage,
    NotFoundError,
)
from payshare.validation import JobValidationError


OWNER = "owner-1"
OTHER = "owner-2"


def run(coro):
    return asyncio.run(coro)


def make_request(**overrides):
    fields = {
        "project_name": "Landing page",
        "payment_amount": 1000.0,
        "conversion_rate": 278.0,
        "frequency": Frequency.MONTHLY,
        "roles": RoleAssignment(working_dev="Ali", job_hunter="Sara", communicator="Omar"),
    }
    fields.update(overrides)
    return JobRequest(**fields)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def storage():
    return InMemoryJobStorage()


@pytest.fixture
def ledger(storage, audit_storage):
    return JobLedger(storage=storage, audit_logger=AuditLogger(audit_storage))


class TestCreateJob:

    def test_basic_job_is_stored_with_distribution(self, ledger, storage):
        request = make_request()
        job = run(ledger.create_job(OWNER, request))

        assert job.owner_id == OWNER
        assert job.distribution == compute_basic(1000.0, request.roles)
        assert run(storage.get_job(OWNER, job.id)) == job

    def test_missing_rate_uses_configured_default(self, ledger):
        job = run(ledger.create_job(OWNER, make_request(conversion_rate=None)))
        assert job.request.conversion_rate == 278.0

    def test_advanced_job(self, ledger):
        interns = (Intern(name="Zain", mode=InternPaymentMode.FIXED, local_amount=27800),)
        request = make_request(policy=AdvancedPolicy(), interns=interns)
        job = run(ledger.create_job(OWNER, request))

        assert job.distribution.kind == DistributionKind.ADVANCED
        assert job.distribution.intern == 100.0
        assert job.distribution == compute_advanced(
            1000.0, AdvancedPolicy(), request.roles, interns=interns, conversion_rate=278.0
        )

    def test_advanced_request_gets_configured_policy(self, ledger, monkeypatch):
        monkeypatch.setenv("PAYSHARE_POLICY_COMPANY_PERCENTAGE", "40")
        monkeypatch.setenv("PAYSHARE_POLICY_DEVELOPER_PERCENTAGE", "60")
        interns = (Intern(name="Zain", mode=InternPaymentMode.FIXED, local_amount=2780),)
        job = run(ledger.create_job(
            OWNER, make_request(advanced=True, conversion_rate=None, interns=interns)
        ))

        assert job.request.policy == AdvancedPolicy(
            company_percentage=40, developer_percentage=60
        )
        assert job.request.conversion_rate == 278.0
        assert job.distribution.kind == DistributionKind.ADVANCED
        assert job.distribution.company == 400.0
        assert job.distribution.intern == 10.0

    def test_invalid_request_is_rejected(self, ledger, storage, audit_storage):
        correlation_id = uuid4()
        with pytest.raises(JobValidationError) as exc_info:
            run(ledger.create_job(
                OWNER,
                make_request(payment_amount=0.0),
                correlation_id=correlation_id,
            ))

        assert exc_info.value.result.has_errors
        assert run(storage.count_jobs(OWNER)) == 0
        events = run(audit_storage.get_events_by_correlation_id(correlation_id))
        assert [e.event_type for e in events] == [AuditEventType.VALIDATION_FAILED]

    def test_warnings_do_not_block(self, ledger):
        request = make_request(
            policy=AdvancedPolicy(company_percentage=20, developer_percentage=70),
        )
        job = run(ledger.create_job(OWNER, request))
        assert job.distribution.allocated_total == pytest.approx(900.0)

    def test_audit_trail(self, ledger, audit_storage):
        correlation_id = uuid4()
        job = run(ledger.create_job(OWNER, make_request(), correlation_id=correlation_id))

        events = run(audit_storage.get_events_by_correlation_id(correlation_id))
        assert [e.event_type for e in events] == [
            AuditEventType.DISTRIBUTION_COMPUTED,
            AuditEventType.JOB_CREATED,
        ]
        created = run(audit_storage.get_events_by_entity("job", job.id))
        assert created[0].owner_id == OWNER

    def test_mismatch_and_negative_shares_are_audited(self, ledger, audit_storage):
        correlation_id = uuid4()
        request = make_request(
            payment_amount=100.0,
            policy=AdvancedPolicy(company_percentage=30, developer_percentage=60),
            interns=(Intern(name="Zain", mode=InternPaymentMode.FIXED, local_amount=100000),),
        )
        run(ledger.create_job(OWNER, request, correlation_id=correlation_id))

        types = [
            e.event_type
            for e in run(audit_storage.get_events_by_correlation_id(correlation_id))
        ]
        assert AuditEventType.RECONCILIATION_MISMATCH in types
        assert AuditEventType.NEGATIVE_SHARE_DETECTED in types


class TestCalculate:

    def test_preview_does_not_store(self, ledger, storage):
        result = run(ledger.calculate(make_request()))
        assert result.kind == DistributionKind.BASIC
        assert run(storage.count_jobs(OWNER)) == 0

    def test_preview_validates(self, ledger):
        with pytest.raises(JobValidationError):
            run(ledger.calculate(make_request(roles=RoleAssignment(working_dev=""))))


class TestUpdateJob:

    def test_update_recomputes_and_replaces(self, ledger, audit_storage):
        job = run(ledger.create_job(OWNER, make_request()))
        new_request = make_request(payment_amount=2000.0, policy=AdvancedPolicy())

        updated = run(ledger.update_job(OWNER, job.id, new_request))

        assert updated.id == job.id
        assert updated.created_at == job.created_at
        assert updated.updated_at is not None
        assert updated.distribution.kind == DistributionKind.ADVANCED
        assert updated.distribution.total == 2000.0
        assert updated.distribution == compute_advanced(
            2000.0, AdvancedPolicy(), new_request.roles, conversion_rate=278.0
        )
        assert run(ledger.get_job(OWNER, job.id)) == updated

        events = run(audit_storage.get_events_by_entity("job", job.id))
        update = next(e for e in events if e.event_type == AuditEventType.JOB_UPDATED)
        assert update.details["previous_distribution"]["total"] == 1000.0
        assert update.details["distribution"]["total"] == 2000.0

    def test_update_drops_old_interns(self, ledger):
        interns = (Intern(name="Zain", mode=InternPaymentMode.PERCENTAGE, percentage=10),)
        job = run(ledger.create_job(
            OWNER, make_request(policy=AdvancedPolicy(), interns=interns)
        ))
        updated = run(ledger.update_job(OWNER, job.id, make_request(policy=AdvancedPolicy())))
        assert job.distribution.intern > 0
        assert updated.distribution.intern == 0
        assert updated.distribution.intern_shares == ()

    def test_update_of_other_owners_job(self, ledger):
        job = run(ledger.create_job(OWNER, make_request()))
        with pytest.raises(NotFoundError):
            run(ledger.update_job(OTHER, job.id, make_request()))

    def test_invalid_update_keeps_old_record(self, ledger):
        job = run(ledger.create_job(OWNER, make_request()))
        with pytest.raises(JobValidationError):
            run(ledger.update_job(OWNER, job.id, make_request(payment_amount=-1.0)))
        assert run(ledger.get_job(OWNER, job.id)) == job


class TestGetAndDelete:

    def test_other_owner_cannot_see_job(self, ledger):
        job = run(ledger.create_job(OWNER, make_request()))
        with pytest.raises(NotFoundError):
            run(ledger.get_job(OTHER, job.id))

    def test_delete(self, ledger):
        job = run(ledger.create_job(OWNER, make_request()))
        run(ledger.delete_job(OWNER, job.id))
        with pytest.raises(NotFoundError):
            run(ledger.get_job(OWNER, job.id))
        with pytest.raises(NotFoundError):
            run(ledger.delete_job(OWNER, job.id))

    def test_other_owner_cannot_delete(self, ledger):
        job = run(ledger.create_job(OWNER, make_request()))
        with pytest.raises(NotFoundError):
            run(ledger.delete_job(OTHER, job.id))
        assert run(ledger.get_job(OWNER, job.id)) == job


def stored_job(owner, project, dev, payment, frequency, age_days):
    request = make_request(
        project_name=project,
        payment_amount=payment,
        frequency=frequency,
        roles=RoleAssignment(working_dev=dev),
    )
    return JobRecord(
        owner_id=owner,
        request=request,
        distribution=compute_basic(payment, request.roles),
        created_at=datetime(2026, 1, 31, tzinfo=timezone.utc) - timedelta(days=age_days),
    )


@pytest.fixture
def history(storage):
    jobs = [
        stored_job(OWNER, "Shop redesign", "Ali", 1000.0, Frequency.MONTHLY, 3),
        stored_job(OWNER, "API work", "Sara", 500.0, Frequency.WEEKLY, 2),
        stored_job(OWNER, "Bug fixes", "Ali", 1500.0, Frequency.MONTHLY, 1),
        stored_job(OTHER, "Not mine", "Ali", 9999.0, Frequency.MONTHLY, 0),
    ]
    for job in jobs:
        run(storage.save_job(job))
    return jobs


class TestHistory:

    def test_newest_first_and_scoped(self, ledger, history):
        page = run(ledger.list_jobs(OWNER))
        assert [j.project_name for j in page.jobs] == ["Bug fixes", "API work", "Shop redesign"]
        assert page.total == 3
        assert page.pages == 1

    def test_search_is_case_insensitive(self, ledger, history):
        assert run(ledger.list_jobs(OWNER, search="shop")).total == 1
        assert run(ledger.list_jobs(OWNER, search="SARA")).total == 1

    def test_frequency_filter(self, ledger, history):
        page = run(ledger.list_jobs(OWNER, frequency=Frequency.MONTHLY))
        assert {j.project_name for j in page.jobs} == {"Shop redesign", "Bug fixes"}

    def test_pagination(self, ledger, history):
        page = run(ledger.list_jobs(OWNER, page=2, limit=2))
        assert [j.project_name for j in page.jobs] == ["Shop redesign"]
        assert page.pages == 2
        assert page.page == 2

    def test_bad_page(self, ledger):
        with pytest.raises(QueryExecutionError):
            run(ledger.list_jobs(OWNER, page=0))

    def test_stats(self, ledger, history, audit_storage):
        stats = run(ledger.stats(OWNER))
        assert stats.total_jobs == 3
        assert stats.total_revenue == 3000.0
        assert stats.total_company_earnings == pytest.approx(900.0)
        assert stats.total_developer_earnings == pytest.approx(2100.0)
        assert stats.unique_developers == 2
        assert stats.average_job_value == 1000.0

    def test_stats_without_jobs(self, ledger):
        stats = run(ledger.stats(OWNER))
        assert stats.total_jobs == 0
        assert stats.average_job_value == 0.0

    def test_earnings_by_person(self, ledger):
        interns = (Intern(name="Zain", mode=InternPaymentMode.FIXED, local_amount=2780),)
        run(ledger.create_job(OWNER, make_request()))
        run(ledger.create_job(OWNER, make_request(policy=AdvancedPolicy(), interns=interns)))

        earnings = run(ledger.earnings_by_person(OWNER))
        assert earnings["Sara"] == pytest.approx(50.0 + 35.0)
        assert earnings["Omar"] == pytest.approx(65.0 + 70.0)
        assert earnings["Zain"] == pytest.approx(10.0)
        assert earnings["Ali"] == pytest.approx(585.0 + 585.0)


class TestComponents:

    def test_create_app_components(self):
        ledger, audit_logger = create_app_components()
        job = run(ledger.create_job(OWNER, make_request()))
        assert run(ledger.get_job(OWNER, job.id)).id == job.id
        assert isinstance(audit_logger, AuditLogger)


class FailingAuditStorage(InMemoryAuditStorage):
    async def append_event(self, event):
        raise RuntimeError("audit backend down")


class TestAuditLogger:

    def test_storage_failure_does_not_break_jobs(self, storage):
        ledger = JobLedger(storage=storage, audit_logger=AuditLogger(FailingAuditStorage()))
        job = run(ledger.create_job(OWNER, make_request()))
        assert run(storage.get_job(OWNER, job.id)) is not None

    def test_log_reports_storage_failure(self):
        event = AuditEventBuilder.job_deleted(job_id=uuid4(), owner_id=OWNER)
        assert run(AuditLogger(FailingAuditStorage()).log(event)) is False

    def test_log_without_storage(self):
        event = AuditEventBuilder.system_error("boom", "something failed")
        assert run(AuditLogger().log(event)) is True

    def test_storage_failure_is_audited(self, audit_storage):
        class BrokenJobStorage(InMemoryJobStorage):
            async def save_job(self, job):
                raise DuplicateError(f"Job already exists: {job.id}")

        ledger = JobLedger(storage=BrokenJobStorage(), audit_logger=AuditLogger(audit_storage))
        correlation_id = uuid4()
        with pytest.raises(DuplicateError):
            run(ledger.create_job(OWNER, make_request(), correlation_id=correlation_id))

        events = run(audit_storage.get_events_by_correlation_id(correlation_id))
        assert events[-1].event_type == AuditEventType.SYSTEM_ERROR
        assert events[-1].error_message.startswith("Job already exists")
