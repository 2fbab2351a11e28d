"""
Unit tests for EnrollmentService.

Most tests run against the in-memory record store so the exact store calls
of each enrollment step can be asserted.
"""

from datetime import date

import pytest

from gym_admin.core.exceptions import (
    AssignmentWarning,
    MemberCreationError,
    NotFoundError,
    ValidationError,
)
from gym_admin.domain.entities import Member, Plan
from gym_admin.schemas.dtos import MemberDraft
from gym_admin.services.enrollment_service import EnrollmentService
from tests.factories.repository_factories import (
    MemberRepositoryFactory,
    PlanRepositoryFactory,
)

TODAY = date(2024, 3, 15)


@pytest.fixture
def service(member_repo, plan_repo):
    return EnrollmentService(member_repo, plan_repo)


@pytest.fixture
def draft():
    return MemberDraft(first_name="Jane", last_name="Doe", email="jane@example.com")


class TestEnrollValidation:
    @pytest.mark.parametrize("missing", ["first_name", "last_name", "email"])
    def test_missing_required_field_touches_nothing(
        self, service, memory_store, gold_plan, missing
    ):
        memory_store.calls.clear()
        data = {"first_name": "Jane", "last_name": "Doe", "email": "jane@example.com"}
        data[missing] = ""

        result = service.enroll(MemberDraft.from_dict(data), gold_plan, today=TODAY)

        assert isinstance(result.error, ValidationError)
        assert result.error.field == missing
        assert result.member is None
        assert memory_store.calls == []

    def test_missing_plan_is_rejected_before_io(self, service, memory_store, draft):
        result = service.enroll(draft, None, today=TODAY)

        assert isinstance(result.error, ValidationError)
        assert result.error.field == "plan_id"
        assert memory_store.call_count() == 0

    def test_malformed_email_is_rejected(self, service, memory_store, gold_plan):
        memory_store.calls.clear()
        draft = MemberDraft(first_name="Jane", last_name="Doe", email="not-an-email")

        result = service.enroll(draft, gold_plan, today=TODAY)

        assert result.error.field == "email"
        assert memory_store.calls == []

    def test_bad_start_date_is_rejected(self, service, memory_store, gold_plan, draft):
        memory_store.calls.clear()

        result = service.enroll(draft, gold_plan, start_date="15/03/2024")

        assert result.error.field == "start_date"
        assert memory_store.calls == []


class TestEnrollSuccess:
    def test_creates_member_and_assignment(self, service, memory_store, gold_plan, draft):
        memory_store.calls.clear()

        result = service.enroll(draft, gold_plan, today=TODAY)

        assert result.ok
        assert not result.is_partial
        assert result.member.id
        assert result.assignment.member_id == result.member.id
        assert result.assignment.plan_id == gold_plan.id
        assert result.assignment.start_date == TODAY
        assert result.assignment.end_date == date(2024, 9, 15)
        assert result.assignment.is_active
        assert memory_store.calls == [
            ("insert", "members"),
            ("insert", "member_memberships"),
        ]

    def test_plan_can_be_given_by_id(self, service, gold_plan, draft):
        result = service.enroll(draft, gold_plan.id, today=TODAY)

        assert result.ok
        assert result.assignment.plan_id == gold_plan.id

    def test_explicit_start_date_wins(self, service, silver_plan, draft):
        result = service.enroll(draft, silver_plan, start_date="2024-01-31", today=TODAY)

        assert result.assignment.start_date == date(2024, 1, 31)
        assert result.assignment.end_date == date(2024, 2, 29)

    def test_names_are_trimmed(self, service, gold_plan):
        draft = MemberDraft(first_name="  Jane ", last_name=" Doe", email=" jane@example.com ")

        result = service.enroll(draft, gold_plan, today=TODAY)

        assert result.member.full_name == "Jane Doe"
        assert result.member.email == "jane@example.com"


class TestEnrollFailures:
    def test_member_insert_failure_creates_nothing(
        self, service, memory_store, gold_plan, draft
    ):
        memory_store.fail("members", "insert", "connection reset")

        result = service.enroll(draft, gold_plan, today=TODAY)

        assert isinstance(result.error, MemberCreationError)
        assert result.error.message == "connection reset"
        assert result.member is None
        assert memory_store.call_count("insert", "member_memberships") == 0

    def test_assignment_failure_keeps_the_member(
        self, service, member_repo, memory_store, gold_plan, draft
    ):
        memory_store.fail("member_memberships", "insert", "constraint violated")

        result = service.enroll(draft, gold_plan, today=TODAY)

        assert result.is_partial
        assert isinstance(result.error, AssignmentWarning)
        assert result.error.member is result.member
        assert "assign manually" in result.error.message
        assert result.assignment is None
        assert memory_store.call_count("delete") == 0

        memory_store.recover()
        assert member_repo.get_by_id(result.member.id) is not None

    def test_unknown_plan_id_is_a_partial_success(self, service, member_repo, draft):
        result = service.enroll(draft, "no-such-plan", today=TODAY)

        assert result.is_partial
        assert isinstance(result.error.cause, LookupError)
        assert member_repo.get_by_id(result.member.id) is not None

    def test_each_call_inserts_at_most_once(self, service, memory_store, gold_plan, draft):
        memory_store.calls.clear()

        service.enroll(draft, gold_plan, today=TODAY)

        assert memory_store.call_count("insert", "members") == 1
        assert memory_store.call_count("insert", "member_memberships") == 1


class TestAssignPlan:
    def test_deactivates_the_previous_assignment(
        self, service, member_repo, silver_plan, gold_plan, draft
    ):
        enrolled = service.enroll(draft, silver_plan, today=TODAY)

        result = service.assign_plan(
            enrolled.member.id, gold_plan.id, start_date="2024-04-15"
        )

        assert result.ok
        assert [a.id for a in result.deactivated] == [enrolled.assignment.id]
        active = member_repo.list_assignments(member_id=enrolled.member.id, active_only=True)
        assert [a.id for a in active] == [result.assignment.id]
        assert result.assignment.end_date == date(2024, 10, 15)

    def test_reconciles_a_failed_enrollment(
        self, service, member_repo, memory_store, gold_plan, draft
    ):
        memory_store.fail("member_memberships", "insert")
        partial = service.enroll(draft, gold_plan, today=TODAY)
        memory_store.recover()

        result = service.assign_plan(partial.member.id, gold_plan, today=TODAY)

        assert result.ok
        assert result.deactivated == []
        assert member_repo.list_assignments(member_id=partial.member.id)

    def test_failed_insert_keeps_the_current_assignment_active(
        self, service, member_repo, memory_store, silver_plan, gold_plan, draft
    ):
        enrolled = service.enroll(draft, silver_plan, today=TODAY)
        memory_store.fail("member_memberships", "insert", "disk full")

        result = service.assign_plan(enrolled.member.id, gold_plan, today=TODAY)

        assert not result.ok
        assert result.error.message == "disk full"
        assert memory_store.call_count("update", "member_memberships") == 0
        memory_store.recover()
        active = member_repo.list_assignments(member_id=enrolled.member.id, active_only=True)
        assert [a.id for a in active] == [enrolled.assignment.id]

    def test_unknown_member(self, service, gold_plan):
        result = service.assign_plan("missing", gold_plan)

        assert isinstance(result.error, NotFoundError)
        assert result.error.field == "member_id"

    def test_unknown_plan(self, service, jane):
        result = service.assign_plan(jane.id, "missing")

        assert isinstance(result.error, NotFoundError)
        assert result.error.field == "plan_id"


class TestWithMockRepositories:
    def test_validation_failure_never_reaches_repositories(self):
        member_repo = MemberRepositoryFactory.create_mock_full()
        plan_repo = PlanRepositoryFactory.create_mock_reader()
        service = EnrollmentService(member_repo, plan_repo)

        result = service.enroll(MemberDraft(first_name="Jane"), "plan-1")

        assert not result.ok
        member_repo.create.assert_not_called()
        member_repo.create_assignment.assert_not_called()
        plan_repo.get_by_id.assert_not_called()

    def test_assignment_uses_plan_duration(self):
        member_repo = MemberRepositoryFactory.create_mock_full()
        plan_repo = PlanRepositoryFactory.create_mock_reader()
        member_repo.create.return_value = Member(
            id="m-1", first_name="Jane", last_name="Doe", email="jane@example.com"
        )
        member_repo.create_assignment.side_effect = lambda assignment: assignment
        plan_repo.get_by_id.return_value = Plan(
            id="p-1", name="Quarterly", price="120", duration_months=3, features=["HIIT"]
        )
        service = EnrollmentService(member_repo, plan_repo)

        result = service.enroll(
            MemberDraft(first_name="Jane", last_name="Doe", email="jane@example.com"),
            "p-1",
            start_date=date(2024, 11, 30),
        )

        assert result.ok
        assert result.assignment.end_date == date(2025, 2, 28)
        plan_repo.get_by_id.assert_called_once_with("p-1")
