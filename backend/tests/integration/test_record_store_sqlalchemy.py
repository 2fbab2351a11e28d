"""
Integration tests for the SQLAlchemy record store and the repositories on
top of it, using the in-memory SQLite database configured in conftest.
"""

from datetime import date
from decimal import Decimal

import pytest

from gym_admin.core.exceptions import RepositoryError
from gym_admin.domain.entities import Member, Payment, Plan
from gym_admin.repositories import (
    MemberRepository,
    PaymentRepository,
    PlanRepository,
    SqlAlchemyRecordStore,
)
from gym_admin.schemas.dtos import MemberDraft
from gym_admin.services import EnrollmentService, MemberDirectoryService

pytestmark = pytest.mark.database


@pytest.fixture
def store(db_session):
    return SqlAlchemyRecordStore(db_session)


class TestRecordStore:
    def test_insert_assigns_uuid_and_creation_time(self, store):
        (row,) = store.insert(
            "members",
            [{"id": None, "first_name": "Jane", "last_name": "Doe", "email": "j@x.io"}],
        )

        assert len(row["id"]) == 36
        assert row["created_at"] is not None

    def test_query_filters_and_orders(self, store):
        store.insert(
            "membership_plans",
            [
                {"name": "Silver", "price": Decimal("49.99"), "features": ["Cardio"]},
                {"name": "Basic", "price": Decimal("19.99"), "features": ["Cardio"], "is_active": False},
                {"name": "Gold", "price": Decimal("249.99"), "features": ["Yoga"]},
            ],
        )

        active = store.query("membership_plans", {"is_active": True}, order_by=["-price"])

        assert [row["name"] for row in active] == ["Gold", "Silver"]

    def test_update_and_delete_missing_rows(self, store):
        with pytest.raises(RepositoryError) as exc_info:
            store.update("members", "missing", {"phone": "1"})
        assert exc_info.value.operation == "update"

        with pytest.raises(RepositoryError):
            store.delete("members", "missing")

    def test_unknown_table(self, store):
        with pytest.raises(RepositoryError):
            store.query("lockers")

    def test_constraint_violation_is_wrapped_and_rolled_back(self, store):
        with pytest.raises(RepositoryError) as exc_info:
            store.insert("members", [{"first_name": "No", "last_name": "Email"}])
        assert exc_info.value.table == "members"
        assert exc_info.value.operation == "insert"

        # The session is usable again after the rollback
        assert store.query("members") == []


class TestRepositoriesOverSqlAlchemy:
    def test_plan_features_keep_their_order(self, store):
        repo = PlanRepository(store)
        created = repo.create(
            Plan(name="Gold", price="249.99", duration_months=6, features=["Zumba", "Yoga", "HIIT"])
        )

        loaded = repo.get_by_id(created.id)

        assert loaded.features == ["Zumba", "Yoga", "HIIT"]
        assert loaded.price == Decimal("249.99")
        assert loaded.duration_months == 6

    def test_enrollment_end_to_end(self, store):
        plan = PlanRepository(store).create(
            Plan(name="Monthly", price="49.99", duration_months=1, features=["Cardio"])
        )
        service = EnrollmentService(MemberRepository(store), PlanRepository(store))

        result = service.enroll(
            MemberDraft(first_name="Jane", last_name="Doe", email="jane@example.com"),
            plan.id,
            start_date="2024-01-31",
        )

        assert result.ok
        (assignment,) = MemberRepository(store).list_assignments(member_id=result.member.id)
        assert assignment.start_date == date(2024, 1, 31)
        assert assignment.end_date == date(2024, 2, 29)

    def test_directory_reads_payments(self, store):
        members = MemberRepository(store)
        payments = PaymentRepository(store)
        plan = PlanRepository(store).create(
            Plan(name="Monthly", price="49.99", duration_months=1, features=["Cardio"])
        )
        jane = members.create(Member(first_name="Jane", last_name="Doe", email="j@x.io"))
        EnrollmentService(members, PlanRepository(store)).enroll(
            MemberDraft(first_name="John", last_name="Roe", email="r@x.io"),
            plan,
            start_date=date(2024, 3, 1),
        )
        payments.create(
            Payment(
                member_id=jane.id,
                amount=Decimal("49.99"),
                payment_date=date(2024, 3, 2),
                method="Cash",
            )
        )

        directory = MemberDirectoryService(
            members, PlanRepository(store), payments, threshold_days=7, grace_days=7
        )
        rows = {row.member.first_name: row for row in directory.overview(date(2024, 3, 5))}

        assert rows["Jane"].status.value == "Expired"
        assert rows["John"].status.value == "Active"
        assert rows["John"].billing_status.value == "Due"
        assert payments.list_for_member(jane.id)[0].amount == Decimal("49.99")
