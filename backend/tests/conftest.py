"""
Central pytest configuration for the gym administration tests.

Environment variables are set before any ``gym_admin`` import so the lazy
engine and the config module see the test values.
"""

import os
from datetime import date
from decimal import Decimal

import pytest

# Test database configuration (set early so import-time settings use it)
TEST_DATABASE_URL = "sqlite:///:memory:"  # In-memory SQLite for fast tests
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"
os.environ["LOG_TO_FILE"] = "false"
os.environ["TZ"] = "UTC"

from gym_admin.domain.entities import Member, MembershipAssignment, Plan  # noqa: E402
from gym_admin.repositories import (  # noqa: E402
    InMemoryRecordStore,
    MemberRepository,
    PaymentRepository,
    PlanRepository,
)

from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)

TODAY = date(2024, 3, 15)


# =====================================================
# IN-MEMORY STORE FIXTURES
# =====================================================


@pytest.fixture
def memory_store():
    """Fresh in-memory record store that records every call."""
    return InMemoryRecordStore()


@pytest.fixture
def plan_repo(memory_store):
    return PlanRepository(memory_store)


@pytest.fixture
def member_repo(memory_store):
    return MemberRepository(memory_store)


@pytest.fixture
def payment_repo(memory_store):
    return PaymentRepository(memory_store)


@pytest.fixture
def gold_plan(plan_repo):
    """A six-month plan stored in the in-memory store."""
    return plan_repo.create(
        Plan(
            name="Gold",
            price=Decimal("249.99"),
            duration_months=6,
            features=["Yoga", "Pilates", "HIIT"],
        )
    )


@pytest.fixture
def silver_plan(plan_repo):
    return plan_repo.create(
        Plan(
            name="Silver",
            price=Decimal("49.99"),
            duration_months=1,
            features=["Cardio", "Strength"],
        )
    )


@pytest.fixture
def jane(member_repo):
    return member_repo.create(
        Member(first_name="Jane", last_name="Doe", email="jane@example.com")
    )


@pytest.fixture
def make_assignment(member_repo):
    """Store an assignment for a member/plan with explicit dates."""

    def _make(member, plan, start, end, is_active=True):
        return member_repo.create_assignment(
            MembershipAssignment(
                member_id=member.id,
                plan_id=plan.id,
                start_date=start,
                end_date=end,
                is_active=is_active,
            )
        )

    return _make


# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def db_session():
    """SQLAlchemy session on a freshly created in-memory schema."""
    from gym_admin.db.session import SessionLocal, create_tables, drop_tables

    drop_tables()
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables()


# =====================================================
# FLASK APP FIXTURES
# =====================================================


@pytest.fixture
def app(memory_store):
    """Flask app whose requests all share one in-memory store."""
    from gym_admin.main import create_app

    app = create_app(
        {"TESTING": True, "RECORD_STORE_FACTORY": lambda: memory_store}
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
