"""Management commands for the gym administration backend."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

import click

from gym_admin.core import config
from gym_admin.db.session import SessionLocal, create_tables
from gym_admin.main import create_app
from gym_admin.repositories import (
    MemberRepository,
    PaymentRepository,
    PlanRepository,
    SqlAlchemyRecordStore,
)
from gym_admin.schemas.dtos import PlanDraft
from gym_admin.services import MemberDirectoryService, PlanCatalogService

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

# Create the Flask application once so commands can share configuration.
app = create_app()

FITNESS_CLASSES = ["Yoga", "Pilates", "HIIT", "Strength", "Cardio", "Zumba", "CrossFit"]

DEFAULT_PLANS = [
    PlanDraft(
        name="Basic",
        price="29.99",
        duration_value=1,
        duration_unit="month",
        features=["Cardio", "Strength"],
        description="Gym floor access",
    ),
    PlanDraft(
        name="Silver",
        price="49.99",
        duration_value=1,
        duration_unit="month",
        features=["Yoga", "Pilates", "Cardio", "Strength"],
        description="Gym floor and studio classes",
    ),
    PlanDraft(
        name="Gold",
        price="249.99",
        duration_value=6,
        duration_unit="month",
        features=list(FITNESS_CLASSES),
        description="Every class, six months",
    ),
]


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("init-db")
def init_db() -> None:
    """Create every table that does not exist yet."""
    with app.app_context():
        create_tables()
    logging.info("Tables created for %s", config.get_database_url())


@cli.command("seed-plans")
def seed_plans() -> None:
    """Insert the default plans, skipping names that already exist."""
    with app.app_context():
        session = SessionLocal()
        try:
            catalog = PlanCatalogService(PlanRepository(SqlAlchemyRecordStore(session)))
            existing = {summary.plan.name for summary in catalog.list_plans()}
            for draft in DEFAULT_PLANS:
                if draft.name in existing:
                    logging.info("Plan %s already present; skipped.", draft.name)
                    continue
                result = catalog.save(draft)
                if not result.ok:
                    raise click.ClickException(
                        f"Could not create plan {draft.name}: {result.error.message}"
                    )
                logging.info("Created plan %s (id=%s)", result.plan.name, result.plan.id)
        finally:
            session.close()


@cli.command("expiring")
@click.option(
    "--on",
    "on_date",
    default=None,
    help="Evaluate statuses as of this date (YYYY-MM-DD). Defaults to today.",
)
def expiring(on_date: Optional[str]) -> None:
    """List members whose membership ends within the expiring window."""
    try:
        now = date.fromisoformat(on_date) if on_date else config.today()
    except ValueError:
        raise click.BadParameter("Use YYYY-MM-DD", param_hint="--on") from None

    with app.app_context():
        session = SessionLocal()
        try:
            store = SqlAlchemyRecordStore(session)
            directory = MemberDirectoryService(
                MemberRepository(store),
                PlanRepository(store),
                PaymentRepository(store),
                threshold_days=config.EXPIRING_THRESHOLD_DAYS,
                grace_days=config.PAYMENT_GRACE_DAYS,
            )
            rows = directory.expiring(now)
        finally:
            session.close()

    if not rows:
        click.echo("No memberships expiring.")
        return
    for row in rows:
        click.echo(
            f"{row.expiry_date.isoformat()}  {row.member.full_name} "
            f"<{row.member.email}>  {row.plan_name or '-'}"
        )


if __name__ == "__main__":
    cli()
