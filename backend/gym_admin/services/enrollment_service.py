"""
Enrollment service: creates a member and assigns their first plan.

The store offers no transaction spanning the two inserts, so enrollment is
a two-step saga with a documented partial state:

1. validate the draft (no I/O on failure)
2. insert the member (MemberCreationError on failure, nothing created)
3. compute the assignment dates from the plan's canonical duration
4. insert the assignment (AssignmentWarning on failure; the member row
   stays and the front desk assigns the plan by hand)

No step is retried here; retry policy belongs to the caller.
"""

import logging
from datetime import date
from typing import Optional, Union

from ..core import config
from ..core.exceptions import (
    AssignmentWarning,
    MemberCreationError,
    NotFoundError,
    RepositoryError,
)
from ..core.validation import BaseValidator, ValidationResult
from ..domain.duration import add_months
from ..domain.entities import Member, MembershipAssignment, Plan
from ..domain.interfaces import IMemberRepository, IPlanReader
from ..schemas.dtos import AssignmentResult, EnrollmentResult, MemberDraft

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Application service for member enrollment and plan assignment."""

    def __init__(self, member_repo: IMemberRepository, plan_repo: IPlanReader) -> None:
        self.member_repo = member_repo
        self.plan_repo = plan_repo

    def enroll(
        self,
        draft: MemberDraft,
        plan: Union[Plan, str, None],
        start_date: Union[date, str, None] = None,
        today: Optional[date] = None,
    ) -> EnrollmentResult:
        """Create a member and their first membership assignment.

        ``plan`` is either a plan already loaded by the caller or its id.
        Exactly one member insert and at most one assignment insert happen
        per call.
        """
        plan_id = plan.id if isinstance(plan, Plan) else plan
        validation = self._validate(draft, plan_id, start_date)
        if not validation.is_valid:
            return EnrollmentResult(error=validation.to_error())

        try:
            member = self.member_repo.create(draft.to_member())
        except RepositoryError as e:
            logger.error(
                "Member creation failed",
                extra={"context": {"email": draft.email, "error": e.message}},
            )
            return EnrollmentResult(
                error=MemberCreationError(e.message, table=e.table, operation=e.operation)
            )

        logger.info(
            "Member created",
            extra={"context": {"member_id": member.id, "plan_id": plan_id}},
        )

        start = validation.cleaned_data.get("start_date") or today or config.today()
        try:
            assignment = self._create_assignment(member, plan, start)
        except (RepositoryError, LookupError) as e:
            logger.warning(
                "Member added but membership assignment failed",
                extra={
                    "context": {
                        "member_id": member.id,
                        "plan_id": plan_id,
                        "error": str(e),
                    }
                },
            )
            return EnrollmentResult(
                member=member,
                error=AssignmentWarning(
                    "Member added but membership assignment failed. "
                    "Please assign manually.",
                    member=member,
                    cause=e,
                ),
            )

        return EnrollmentResult(member=member, assignment=assignment)

    def assign_plan(
        self,
        member_id: str,
        plan: Union[Plan, str, None],
        start_date: Union[date, str, None] = None,
        today: Optional[date] = None,
    ) -> AssignmentResult:
        """Assign a plan to an existing member.

        Used to reconcile a failed enrollment or to renew. The new assignment
        is inserted first and the member's earlier active assignments are
        deactivated afterwards, so a failed insert leaves the current
        membership untouched.
        """
        plan_id = plan.id if isinstance(plan, Plan) else plan
        result = ValidationResult()
        BaseValidator.validate_required_field(member_id, "member_id", result)
        BaseValidator.validate_required_field(plan_id, "plan_id", result)
        start = BaseValidator.validate_date(start_date, "start_date", result)
        if not result.is_valid:
            return AssignmentResult(error=result.to_error())

        try:
            member = self.member_repo.get_by_id(member_id)
            if member is None:
                return AssignmentResult(
                    error=NotFoundError(f"Member {member_id} not found", field="member_id")
                )
            plan = self._resolve_plan(plan)
            if plan is None:
                return AssignmentResult(
                    error=NotFoundError(f"Plan {plan_id} not found", field="plan_id")
                )

            previous = self.member_repo.list_assignments(member_id=member_id, active_only=True)
            assignment = self._create_assignment(member, plan, start or today or config.today())
            deactivated = [
                self.member_repo.deactivate_assignment(current.id)
                for current in previous
                if current.id != assignment.id
            ]
        except RepositoryError as e:
            logger.error(
                "Plan assignment failed",
                extra={"context": {"member_id": member_id, "plan_id": plan_id, "error": e.message}},
            )
            return AssignmentResult(error=e)

        logger.info(
            "Plan assigned",
            extra={
                "context": {
                    "member_id": member_id,
                    "plan_id": plan.id,
                    "deactivated": [a.id for a in deactivated],
                }
            },
        )
        return AssignmentResult(assignment=assignment, deactivated=deactivated)

    def _validate(self, draft: MemberDraft, plan_id, start_date) -> ValidationResult:
        result = ValidationResult()
        BaseValidator.validate_required_field(draft.first_name, "first_name", result)
        BaseValidator.validate_required_field(draft.last_name, "last_name", result)
        if BaseValidator.validate_required_field(draft.email, "email", result):
            BaseValidator.validate_email(draft.email, "email", result)
        BaseValidator.validate_required_field(plan_id, "plan_id", result)
        start = BaseValidator.validate_date(start_date, "start_date", result)
        if start is not None:
            result.cleaned_data["start_date"] = start
        return result

    def _resolve_plan(self, plan: Union[Plan, str]) -> Optional[Plan]:
        if isinstance(plan, Plan):
            return plan
        return self.plan_repo.get_by_id(plan)

    def _create_assignment(
        self, member: Member, plan: Union[Plan, str], start: date
    ) -> MembershipAssignment:
        resolved = self._resolve_plan(plan)
        if resolved is None:
            raise LookupError(f"Plan {plan} not found")
        assignment = MembershipAssignment(
            member_id=member.id,
            plan_id=resolved.id,
            start_date=start,
            end_date=add_months(start, resolved.duration_months),
            is_active=True,
        )
        return self.member_repo.create_assignment(assignment)
