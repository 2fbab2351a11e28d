"""Unit tests for PlanCatalogService against the in-memory record store."""

from datetime import date
from decimal import Decimal

import pytest

from gym_admin.core.exceptions import NotFoundError, RepositoryError, ValidationError
from gym_admin.domain.entities import DurationUnit, Member
from gym_admin.schemas.dtos import PlanDraft
from gym_admin.services.plan_catalog_service import PlanCatalogService

TODAY = date(2024, 3, 15)


@pytest.fixture
def catalog(plan_repo, member_repo):
    return PlanCatalogService(plan_repo, member_repo)


def gold_draft(**overrides):
    data = {
        "name": "Gold",
        "price": "249.99",
        "duration_value": 6,
        "duration_unit": "month",
        "features": ["Yoga", "Pilates", "HIIT"],
        "description": "Every class",
    }
    data.update(overrides)
    return PlanDraft.from_dict(data)


class TestSave:
    def test_create_round_trips_every_field(self, catalog):
        result = catalog.save(gold_draft())

        assert result.ok
        stored = catalog.get_plan(result.plan.id)
        assert stored.name == "Gold"
        assert stored.price == Decimal("249.99")
        assert stored.duration_months == 6
        assert stored.features == ["Yoga", "Pilates", "HIIT"]
        assert stored.description == "Every class"
        assert stored.is_active

    def test_gold_plan_round_trips_with_feature_order(self, catalog):
        created = catalog.save(
            PlanDraft(
                name="Gold",
                price=499,
                duration_value=1,
                duration_unit="month",
                features=["Yoga", "HIIT"],
            )
        ).plan

        draft = catalog.load_for_edit(created.id)

        assert draft.name == "Gold"
        assert draft.price == Decimal("499")
        assert draft.duration_value == 1
        assert draft.features == ["Yoga", "HIIT"]

    @pytest.mark.parametrize(
        "value,unit,months",
        [(30, "day", 1), (45, "days", 2), (5, "week", 2), (12, "month", 12)],
    )
    def test_duration_is_stored_in_months(self, catalog, value, unit, months):
        result = catalog.save(gold_draft(duration_value=value, duration_unit=unit))

        assert result.plan.duration_months == months

    def test_editor_always_shows_months(self, catalog):
        created = catalog.save(gold_draft(duration_value=45, duration_unit="day")).plan

        draft = catalog.load_for_edit(created.id)

        assert draft.duration_value == 2
        assert draft.duration_unit is DurationUnit.MONTH

    def test_resaving_an_unchanged_plan_is_idempotent(self, catalog):
        created = catalog.save(gold_draft(duration_value=45, duration_unit="day")).plan

        first = catalog.save(catalog.load_for_edit(created.id), plan_id=created.id).plan
        second = catalog.save(catalog.load_for_edit(created.id), plan_id=created.id).plan

        assert first.duration_months == second.duration_months == 2
        assert first.features == second.features == ["Yoga", "Pilates", "HIIT"]
        assert second.price == created.price

    def test_update_keeps_id_and_creation_time(self, catalog, plan_repo):
        created = catalog.save(gold_draft()).plan

        result = catalog.save(gold_draft(price="199,00"), plan_id=created.id)

        assert result.plan.id == created.id
        assert result.plan.price == Decimal("199.00")
        assert result.plan.created_at == created.created_at
        assert len(plan_repo.list_all()) == 1

    def test_duplicate_features_are_collapsed_in_order(self, catalog):
        result = catalog.save(gold_draft(features=["HIIT", "Yoga", "HIIT"]))

        assert result.plan.features == ["HIIT", "Yoga"]

    def test_features_may_come_as_comma_separated_text(self, catalog):
        result = catalog.save(gold_draft(features="Yoga, Zumba"))

        assert result.plan.features == ["Yoga", "Zumba"]

    def test_edit_without_flag_keeps_a_retired_plan_hidden(self, catalog):
        created = catalog.save(gold_draft()).plan
        catalog.set_active(created.id, False)

        result = catalog.save(gold_draft(price="199.00"), plan_id=created.id)

        assert result.ok
        assert result.plan.is_active is False
        assert catalog.get_plan(created.id).is_active is False

    @pytest.mark.parametrize("flag,expected", [("false", False), ("0", False), ("true", True)])
    def test_is_active_text_is_parsed(self, catalog, flag, expected):
        result = catalog.save(gold_draft(is_active=flag))

        assert result.plan.is_active is expected

    def test_update_of_missing_plan(self, catalog):
        result = catalog.save(gold_draft(), plan_id="missing")

        assert isinstance(result.error, NotFoundError)

    def test_store_failure_is_reported(self, catalog, memory_store):
        memory_store.fail("membership_plans", "insert", "read-only database")

        result = catalog.save(gold_draft())

        assert isinstance(result.error, RepositoryError)
        assert result.error.message == "read-only database"


class TestSaveValidation:
    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"name": ""}, "name"),
            ({"price": ""}, "price"),
            ({"price": "-1"}, "price"),
            ({"price": "abc"}, "price"),
            ({"features": []}, "features"),
            ({"duration_value": 0}, "duration_value"),
            ({"duration_value": "two"}, "duration_value"),
            ({"duration_unit": "year"}, "duration_unit"),
        ],
    )
    def test_invalid_draft_is_rejected_without_io(
        self, catalog, memory_store, overrides, field
    ):
        result = catalog.save(gold_draft(**overrides))

        assert isinstance(result.error, ValidationError)
        assert result.error.field == field
        assert memory_store.call_count() == 0

    def test_all_problems_are_reported_together(self, catalog):
        result = catalog.save(PlanDraft(name="", price=None, features=[]))

        fields = {message.split(":")[0] for message in result.error.errors}
        assert {"name", "price", "features"} <= fields

    def test_unreadable_is_active_is_rejected(self, catalog, memory_store):
        result = catalog.save(gold_draft(is_active="maybe"))

        assert result.error.field == "is_active"
        assert memory_store.call_count() == 0

    def test_free_plan_is_allowed(self, catalog):
        assert catalog.save(gold_draft(price="0")).ok


class TestPreview:
    def test_preview_in_days(self, catalog):
        assert catalog.preview_end_date("10", "days", today=TODAY) == date(2024, 3, 25)

    def test_preview_in_months_clamps(self, catalog):
        assert catalog.preview_end_date(1, "month", today=date(2024, 1, 31)) == date(2024, 2, 29)

    def test_preview_rejects_bad_value(self, catalog):
        with pytest.raises(ValidationError):
            catalog.preview_end_date(0, "month", today=TODAY)

    def test_preview_rejects_bad_unit(self, catalog):
        with pytest.raises(ValidationError):
            catalog.preview_end_date(1, "decade", today=TODAY)


class TestListing:
    def test_counts_active_members_per_plan(
        self, catalog, gold_plan, silver_plan, jane, member_repo, make_assignment
    ):
        john = member_repo.create(
            Member(first_name="John", last_name="Roe", email="john@example.com")
        )
        make_assignment(jane, gold_plan, date(2024, 1, 1), date(2024, 7, 1))
        make_assignment(john, gold_plan, date(2024, 2, 1), date(2024, 8, 1))
        make_assignment(john, silver_plan, date(2023, 1, 1), date(2023, 2, 1), is_active=False)

        summaries = {s.plan.name: s for s in catalog.list_plans()}

        assert summaries["Gold"].member_count == 2
        assert summaries["Silver"].member_count == 0
        assert summaries["Gold"].monthly_revenue == Decimal("83.33")

    def test_sorted_by_name(self, catalog, gold_plan, silver_plan):
        assert [s.plan.name for s in catalog.list_plans()] == ["Gold", "Silver"]

    def test_inactive_plans_can_be_hidden(self, catalog, gold_plan, silver_plan):
        catalog.set_active(silver_plan.id, False)

        assert [s.plan.name for s in catalog.list_plans(active_only=True)] == ["Gold"]
        assert len(catalog.list_plans()) == 2

    def test_set_active_understands_form_text(self, catalog, silver_plan):
        result = catalog.set_active(silver_plan.id, "false")

        assert result.ok
        assert catalog.get_plan(silver_plan.id).is_active is False

    def test_set_active_requires_a_flag(self, catalog, silver_plan):
        result = catalog.set_active(silver_plan.id, None)

        assert isinstance(result.error, ValidationError)
        assert catalog.get_plan(silver_plan.id).is_active is True


class TestDelete:
    def test_delete_unused_plan(self, catalog, silver_plan):
        result = catalog.delete(silver_plan.id)

        assert result.ok
        assert catalog.get_plan(silver_plan.id) is None

    def test_plan_in_use_cannot_be_deleted(self, catalog, gold_plan, jane, make_assignment):
        make_assignment(jane, gold_plan, date(2024, 1, 1), date(2024, 7, 1))

        result = catalog.delete(gold_plan.id)

        assert isinstance(result.error, ValidationError)
        assert "deactivate" in result.error.message
        assert catalog.get_plan(gold_plan.id) is not None

    def test_missing_plan(self, catalog):
        assert isinstance(catalog.delete("missing").error, NotFoundError)
