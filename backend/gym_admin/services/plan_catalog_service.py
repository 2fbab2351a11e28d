"""
Plan catalog service: create, edit, list and retire membership plans.

Durations are stored in whole months. A plan entered as 45 days is saved as
2 months, and opening it again shows "2 month": the unit typed in the form
is not kept.
"""

import logging
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..core.exceptions import NotFoundError, RepositoryError, ValidationError
from ..core.validation import BaseValidator, ValidationResult
from ..domain.duration import (
    parse_duration_unit,
    preview_end_date,
    to_canonical_months,
)
from ..domain.entities import Plan
from ..domain.interfaces import IMemberReader, IPlanRepository
from ..schemas.dtos import PlanDraft, PlanSaveResult, PlanSummary

logger = logging.getLogger(__name__)


class PlanValidator(BaseValidator):
    """Validator for the plan editor form."""

    def validate_draft(self, draft: PlanDraft) -> ValidationResult:
        result = ValidationResult()

        if self.validate_required_field(draft.name, "name", result):
            name = self.validate_string(draft.name, "name", result, max_length=100)
            if name:
                result.cleaned_data["name"] = name

        if self.validate_required_field(draft.price, "price", result):
            price = self.validate_decimal(
                draft.price, "price", result, min_value=Decimal("0")
            )
            if price is not None:
                result.cleaned_data["price"] = price

        features = [str(f).strip() for f in draft.features or [] if str(f).strip()]
        if not features:
            result.add_error("Select at least one feature", "features")
        else:
            # Toggling a feature twice in the form must not duplicate it
            result.cleaned_data["features"] = list(dict.fromkeys(features))

        if self.validate_required_field(draft.duration_value, "duration_value", result):
            value = self.validate_integer(
                draft.duration_value, "duration_value", result, min_value=1
            )
            if value is not None:
                result.cleaned_data["duration_value"] = value

        try:
            result.cleaned_data["duration_unit"] = parse_duration_unit(draft.duration_unit)
        except ValidationError as e:
            result.add_error(e.message, "duration_unit")

        result.cleaned_data["is_active"] = self.validate_boolean(
            draft.is_active, "is_active", result
        )

        return result


class PlanCatalogService:
    """Application service for the membership plan catalog."""

    def __init__(
        self,
        plan_repo: IPlanRepository,
        member_repo: Optional[IMemberReader] = None,
    ) -> None:
        self.plan_repo = plan_repo
        self.member_repo = member_repo
        self.validator = PlanValidator()

    def save(self, draft: PlanDraft, plan_id: Optional[str] = None) -> PlanSaveResult:
        """Create a plan (no ``plan_id``) or overwrite an existing one.

        The duration is canonicalized to months on every save. A draft
        without ``is_active`` keeps the stored flag, so editing a retired
        plan does not put it back in the enrollment form.
        """
        validation = self.validator.validate_draft(draft)
        if not validation.is_valid:
            return PlanSaveResult(error=validation.to_error())

        cleaned = validation.cleaned_data
        duration_months = to_canonical_months(
            cleaned["duration_value"], cleaned["duration_unit"]
        )

        try:
            existing = None
            if plan_id is not None:
                existing = self.plan_repo.get_by_id(plan_id)
                if existing is None:
                    return PlanSaveResult(
                        error=NotFoundError(f"Plan {plan_id} not found", field="plan_id")
                    )

            is_active = cleaned["is_active"]
            if is_active is None:
                is_active = existing.is_active if existing else True

            plan = Plan(
                id=plan_id,
                name=cleaned["name"],
                price=cleaned["price"],
                duration_months=duration_months,
                features=cleaned["features"],
                description=draft.description,
                is_active=is_active,
                created_at=existing.created_at if existing else None,
            )
            saved = self.plan_repo.update(plan) if existing else self.plan_repo.create(plan)
        except RepositoryError as e:
            logger.error(
                "Plan save failed",
                extra={"context": {"plan_id": plan_id, "error": e.message}},
            )
            return PlanSaveResult(error=e)

        logger.info(
            "Plan saved",
            extra={
                "context": {
                    "plan_id": saved.id,
                    "created": existing is None,
                    "duration_months": saved.duration_months,
                    "input_unit": cleaned["duration_unit"].value,
                }
            },
        )
        return PlanSaveResult(plan=saved)

    def load_for_edit(self, plan_id: str) -> Optional[PlanDraft]:
        """Editor form for a stored plan, duration expressed in months."""
        plan = self.plan_repo.get_by_id(plan_id)
        return PlanDraft.from_plan(plan) if plan else None

    def preview_end_date(self, value, unit, today: Optional[date] = None) -> date:
        """End date shown next to the duration input. Not persisted."""
        result = ValidationResult()
        duration_value = BaseValidator.validate_integer(
            value, "duration_value", result, min_value=1
        )
        if not result.is_valid:
            raise result.to_error()
        return preview_end_date(duration_value, parse_duration_unit(unit), today)

    def get_plan(self, plan_id: str) -> Optional[Plan]:
        return self.plan_repo.get_by_id(plan_id)

    def list_plans(self, active_only: bool = False) -> List[PlanSummary]:
        """Plans with the number of members currently assigned to each."""
        plans = self.plan_repo.list_all(active_only=active_only)
        counts: Counter = Counter()
        if self.member_repo is not None:
            counts = Counter(
                assignment.plan_id
                for assignment in self.member_repo.list_assignments(active_only=True)
            )
        return [PlanSummary(plan=plan, member_count=counts[plan.id]) for plan in plans]

    def set_active(self, plan_id: str, is_active) -> PlanSaveResult:
        """Show or hide a plan in the enrollment form without deleting it.

        ``is_active`` may be a bool or form text such as "false".
        """
        validation = ValidationResult()
        flag = self.validator.validate_boolean(is_active, "is_active", validation)
        if flag is None and validation.is_valid:
            validation.add_error("is_active is required", "is_active")
        if not validation.is_valid:
            return PlanSaveResult(error=validation.to_error())

        try:
            plan = self.plan_repo.get_by_id(plan_id)
            if plan is None:
                return PlanSaveResult(
                    error=NotFoundError(f"Plan {plan_id} not found", field="plan_id")
                )
            plan.is_active = flag
            return PlanSaveResult(plan=self.plan_repo.update(plan))
        except RepositoryError as e:
            return PlanSaveResult(error=e)

    def delete(self, plan_id: str) -> PlanSaveResult:
        """Delete a plan that no active assignment refers to.

        Plans still in use have to be deactivated instead.
        """
        try:
            plan = self.plan_repo.get_by_id(plan_id)
            if plan is None:
                return PlanSaveResult(
                    error=NotFoundError(f"Plan {plan_id} not found", field="plan_id")
                )
            if self.member_repo is not None:
                in_use = self.member_repo.list_assignments(plan_id=plan_id, active_only=True)
                if in_use:
                    return PlanSaveResult(
                        plan=plan,
                        error=ValidationError(
                            f"Plan '{plan.name}' has {len(in_use)} active member(s); "
                            "deactivate it instead",
                            field="plan_id",
                        ),
                    )
            self.plan_repo.delete(plan_id)
        except RepositoryError as e:
            logger.error(
                "Plan delete failed",
                extra={"context": {"plan_id": plan_id, "error": e.message}},
            )
            return PlanSaveResult(error=e)

        logger.info("Plan deleted", extra={"context": {"plan_id": plan_id}})
        return PlanSaveResult(plan=plan)
