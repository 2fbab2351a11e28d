"""Tests for the click management commands in manage.py."""

import pytest
from click.testing import CliRunner

from gym_admin.db.session import SessionLocal, drop_tables
from gym_admin.repositories import PlanRepository, SqlAlchemyRecordStore

pytestmark = pytest.mark.database


@pytest.fixture
def cli():
    import manage

    yield manage.cli
    drop_tables()


def _plan_names():
    session = SessionLocal()
    try:
        return sorted(p.name for p in PlanRepository(SqlAlchemyRecordStore(session)).list_all())
    finally:
        session.close()


def test_seed_plans_is_repeatable(cli):
    runner = CliRunner()

    assert runner.invoke(cli, ["init-db"]).exit_code == 0
    assert runner.invoke(cli, ["seed-plans"]).exit_code == 0
    assert runner.invoke(cli, ["seed-plans"]).exit_code == 0

    assert _plan_names() == ["Basic", "Gold", "Silver"]


def test_expiring_with_no_members(cli):
    runner = CliRunner()
    runner.invoke(cli, ["init-db"])

    result = runner.invoke(cli, ["expiring", "--on", "2024-03-15"])

    assert result.exit_code == 0
    assert "No memberships expiring." in result.output


def test_expiring_rejects_bad_date(cli):
    result = CliRunner().invoke(cli, ["init-db"])
    assert result.exit_code == 0

    result = CliRunner().invoke(cli, ["expiring", "--on", "15/03/2024"])

    assert result.exit_code != 0
