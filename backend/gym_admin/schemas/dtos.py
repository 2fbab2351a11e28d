"""
Data Transfer Objects (DTOs) and operation results.

Drafts carry raw form input (strings are fine, they are validated by the
services). Results carry either a value or one of the errors from
``gym_admin.core.exceptions``; services return them instead of raising.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..core.exceptions import AssignmentWarning, GymAdminError
from ..domain.entities import (
    BillingStatus,
    DurationUnit,
    Member,
    MembershipAssignment,
    MembershipStatus,
    Payment,
    Plan,
)


def _text(value: Any) -> str:
    """Form text as a string; JSON numbers are accepted as their digits."""
    return "" if value is None else str(value)


@dataclass
class MemberDraft:
    """Member fields as submitted by the enrollment form."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemberDraft":
        return cls(
            first_name=_text(data.get("first_name")),
            last_name=_text(data.get("last_name")),
            email=_text(data.get("email")),
            phone=data.get("phone"),
            address=data.get("address"),
            emergency_contact_name=data.get("emergency_contact_name"),
            emergency_contact_phone=data.get("emergency_contact_phone"),
            notes=data.get("notes"),
        )

    def to_member(self) -> Member:
        return Member(
            first_name=_text(self.first_name).strip(),
            last_name=_text(self.last_name).strip(),
            email=_text(self.email).strip(),
            phone=self.phone,
            address=self.address,
            emergency_contact_name=self.emergency_contact_name,
            emergency_contact_phone=self.emergency_contact_phone,
            notes=self.notes,
        )


@dataclass
class PlanDraft:
    """Plan fields as shown in and submitted by the plan editor."""

    name: str = ""
    price: Any = None
    duration_value: Any = 1
    duration_unit: Any = DurationUnit.MONTH
    features: List[str] = field(default_factory=list)
    description: Optional[str] = None
    # None keeps the stored flag on edit; a new plan starts active
    is_active: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanDraft":
        features = data.get("features") or []
        if isinstance(features, str):
            features = [f.strip() for f in features.split(",") if f.strip()]
        return cls(
            name=data.get("name") or "",
            price=data.get("price"),
            duration_value=data.get("duration_value", 1),
            duration_unit=data.get("duration_unit", DurationUnit.MONTH.value),
            features=list(features),
            description=data.get("description"),
            is_active=data.get("is_active"),
        )

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanDraft":
        """Editor view of a stored plan: the duration is always in months."""
        return cls(
            name=plan.name,
            price=plan.price,
            duration_value=plan.duration_months,
            duration_unit=DurationUnit.MONTH,
            features=list(plan.features),
            description=plan.description,
            is_active=plan.is_active,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "price": str(self.price) if self.price is not None else None,
            "duration_value": self.duration_value,
            "duration_unit": DurationUnit(self.duration_unit).value,
            "features": list(self.features),
            "description": self.description,
            "is_active": self.is_active,
        }


@dataclass
class EnrollmentResult:
    """Outcome of enrolling a member.

    ``member`` is set whenever the member row was created, including the
    partial-success case where ``error`` is an AssignmentWarning.
    """

    member: Optional[Member] = None
    assignment: Optional[MembershipAssignment] = None
    error: Optional[GymAdminError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_partial(self) -> bool:
        return isinstance(self.error, AssignmentWarning)


@dataclass
class AssignmentResult:
    assignment: Optional[MembershipAssignment] = None
    deactivated: List[MembershipAssignment] = field(default_factory=list)
    error: Optional[GymAdminError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class MemberResult:
    member: Optional[Member] = None
    error: Optional[GymAdminError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PlanSaveResult:
    plan: Optional[Plan] = None
    error: Optional[GymAdminError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PaymentRecordResult:
    payment: Optional[Payment] = None
    error: Optional[GymAdminError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PlanSummary:
    """A plan as listed on the plans page."""

    plan: Plan
    member_count: int = 0

    @property
    def monthly_revenue(self) -> Decimal:
        return (self.plan.price * self.member_count / self.plan.duration_months).quantize(
            Decimal("0.01")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **plan_to_dict(self.plan),
            "member_count": self.member_count,
            "monthly_revenue": str(self.monthly_revenue),
        }


@dataclass
class MemberOverview:
    """One row of the members page, with derived statuses."""

    member: Member
    status: MembershipStatus
    billing_status: Optional[BillingStatus] = None
    plan_name: Optional[str] = None
    expiry_date: Optional[date] = None
    assignment: Optional[MembershipAssignment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            **member_to_dict(self.member),
            "name": self.member.full_name,
            "plan": self.plan_name,
            "status": self.status.value,
            "payment_status": self.billing_status.value if self.billing_status else None,
            "join_date": (
                self.member.created_at.isoformat() if self.member.created_at else None
            ),
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
        }


@dataclass
class PaymentSummary:
    total_revenue: Decimal = Decimal("0")
    pending_amount: Decimal = Decimal("0")
    count_by_status: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_revenue": str(self.total_revenue),
            "pending_amount": str(self.pending_amount),
            "count_by_status": dict(self.count_by_status),
        }


def plan_to_dict(plan: Plan) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "name": plan.name,
        "price": str(plan.price),
        "duration_months": plan.duration_months,
        "features": list(plan.features),
        "description": plan.description,
        "is_active": plan.is_active,
    }


def member_to_dict(member: Member) -> Dict[str, Any]:
    return {
        "id": member.id,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "phone": member.phone,
        "address": member.address,
        "emergency_contact_name": member.emergency_contact_name,
        "emergency_contact_phone": member.emergency_contact_phone,
        "notes": member.notes,
    }


def assignment_to_dict(assignment: MembershipAssignment) -> Dict[str, Any]:
    return {
        "id": assignment.id,
        "member_id": assignment.member_id,
        "plan_id": assignment.plan_id,
        "start_date": assignment.start_date.isoformat(),
        "end_date": assignment.end_date.isoformat(),
        "is_active": assignment.is_active,
    }


def payment_to_dict(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "member_id": payment.member_id,
        "amount": str(payment.amount),
        "payment_date": payment.payment_date.isoformat(),
        "payment_method": payment.method.value,
        "status": payment.status.value,
        "created_at": payment.created_at.isoformat() if payment.created_at else None,
    }


def error_to_dict(error: Optional[GymAdminError]) -> Optional[Dict[str, Any]]:
    return error.to_dict() if error is not None else None


__all__ = [
    "MemberDraft",
    "PlanDraft",
    "EnrollmentResult",
    "AssignmentResult",
    "MemberResult",
    "PlanSaveResult",
    "PaymentRecordResult",
    "PlanSummary",
    "MemberOverview",
    "PaymentSummary",
    "plan_to_dict",
    "member_to_dict",
    "assignment_to_dict",
    "payment_to_dict",
    "error_to_dict",
]
