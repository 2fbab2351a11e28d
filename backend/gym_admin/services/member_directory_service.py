"""
Member directory: the read side of the members page.

Statuses are computed here from assignments and payments each time the
list is built; nothing derived is written back to the store.

The read operations (``overview``, ``search``, ``expiring``) raise
``ValidationError`` for an unknown status filter and let ``RepositoryError``
propagate; the edits return a ``MemberResult`` like the other services.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional

from ..core import config
from ..core.exceptions import NotFoundError, RepositoryError, ValidationError
from ..core.validation import BaseValidator, ValidationResult
from ..domain.entities import Member, MembershipAssignment, MembershipStatus
from ..domain.interfaces import IMemberRepository, IPaymentReader, IPlanReader
from ..domain.status import billing_due_date, resolve_payment_status, resolve_status
from ..schemas.dtos import MemberOverview, MemberResult

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "emergency_contact_name",
    "emergency_contact_phone",
    "notes",
)
REQUIRED_FIELDS = ("first_name", "last_name", "email")


def current_assignment(
    assignments: List[MembershipAssignment],
) -> Optional[MembershipAssignment]:
    """The assignment a member's status is derived from.

    The active assignment with the latest start date; when none is active,
    the latest assignment overall.
    """
    if not assignments:
        return None
    ordered = sorted(assignments, key=lambda a: a.start_date, reverse=True)
    for assignment in ordered:
        if assignment.is_active:
            return assignment
    return ordered[0]


class MemberDirectoryService:
    """Application service for listing, searching and editing members."""

    def __init__(
        self,
        member_repo: IMemberRepository,
        plan_repo: IPlanReader,
        payment_repo: IPaymentReader,
        threshold_days: int,
        grace_days: int,
    ) -> None:
        self.member_repo = member_repo
        self.plan_repo = plan_repo
        self.payment_repo = payment_repo
        self.threshold_days = threshold_days
        self.grace_days = grace_days

    def overview(self, now: Optional[date] = None) -> List[MemberOverview]:
        """Every member with plan, expiry date, status and billing status."""
        today = now or config.today()
        members = self.member_repo.list_all()

        assignments_by_member: Dict[str, List[MembershipAssignment]] = defaultdict(list)
        for assignment in self.member_repo.list_assignments():
            assignments_by_member[assignment.member_id].append(assignment)

        payments_by_member = defaultdict(list)
        for payment in self.payment_repo.list_all():
            payments_by_member[payment.member_id].append(payment)

        plan_names = {plan.id: plan.name for plan in self.plan_repo.list_all()}

        rows = []
        for member in members:
            assignment = current_assignment(assignments_by_member[member.id])
            if assignment is None:
                rows.append(MemberOverview(member=member, status=MembershipStatus.EXPIRED))
                continue

            due = billing_due_date(assignment.start_date, self.grace_days)
            rows.append(
                MemberOverview(
                    member=member,
                    status=resolve_status(assignment.end_date, today, self.threshold_days),
                    billing_status=resolve_payment_status(
                        payments_by_member[member.id], assignment.start_date, due, today
                    ),
                    plan_name=plan_names.get(assignment.plan_id),
                    expiry_date=assignment.end_date,
                    assignment=assignment,
                )
            )
        return rows

    def search(
        self,
        term: Optional[str] = None,
        status: Optional[str] = None,
        now: Optional[date] = None,
    ) -> List[MemberOverview]:
        """Filter the overview by name/e-mail substring and by status.

        ``status`` is "All", empty, or one of Active/Expiring/Expired.
        """
        wanted = None
        if status and status != "All":
            try:
                wanted = MembershipStatus(status)
            except ValueError:
                raise ValidationError(
                    f"Unknown status '{status}'", field="status"
                ) from None

        needle = (term or "").strip().lower()
        return [
            row
            for row in self.overview(now)
            if (
                not needle
                or needle in row.member.full_name.lower()
                or needle in row.member.email.lower()
            )
            and (wanted is None or row.status == wanted)
        ]

    def expiring(self, now: Optional[date] = None) -> List[MemberOverview]:
        """Members inside the expiring window, soonest expiry first."""
        rows = [
            row for row in self.overview(now) if row.status == MembershipStatus.EXPIRING
        ]
        return sorted(rows, key=lambda row: row.expiry_date)

    def update_member(self, member_id: str, fields: Dict[str, Any]) -> MemberResult:
        """Edit profile fields. Status is derived and cannot be set."""
        result = ValidationResult()
        if "status" in fields:
            result.add_error("status is derived from the membership dates", "status")
        unknown = sorted(set(fields) - set(EDITABLE_FIELDS) - {"status"})
        for name in unknown:
            result.add_error("Unknown field", name)
        for name in REQUIRED_FIELDS:
            if name in fields:
                BaseValidator.validate_required_field(fields[name], name, result)
        if fields.get("email"):
            BaseValidator.validate_email(fields["email"], "email", result)
        if not result.is_valid:
            return MemberResult(error=result.to_error())

        try:
            member = self.member_repo.get_by_id(member_id)
            if member is None:
                return MemberResult(
                    error=NotFoundError(f"Member {member_id} not found", field="member_id")
                )
            values = {name: getattr(member, name) for name in EDITABLE_FIELDS}
            values.update(
                {k: None if v is None else str(v).strip() for k, v in fields.items()}
            )
            updated = self.member_repo.update(
                Member(id=member.id, created_at=member.created_at, **values)
            )
        except RepositoryError as e:
            logger.error(
                "Member update failed",
                extra={"context": {"member_id": member_id, "error": e.message}},
            )
            return MemberResult(error=e)

        logger.info(
            "Member updated",
            extra={"context": {"member_id": member_id, "fields": sorted(fields)}},
        )
        return MemberResult(member=updated)

    def delete_member(self, member_id: str) -> MemberResult:
        """Delete a member row. Their payments stay on record."""
        try:
            member = self.member_repo.get_by_id(member_id)
            if member is None:
                return MemberResult(
                    error=NotFoundError(f"Member {member_id} not found", field="member_id")
                )
            self.member_repo.delete(member_id)
        except RepositoryError as e:
            logger.error(
                "Member delete failed",
                extra={"context": {"member_id": member_id, "error": e.message}},
            )
            return MemberResult(error=e)

        logger.info("Member deleted", extra={"context": {"member_id": member_id}})
        return MemberResult(member=member)
