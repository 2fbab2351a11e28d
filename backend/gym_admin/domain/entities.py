"""
Domain entities - Pure business logic, no framework dependencies.

Identifiers are opaque strings assigned by the store. Member status is not
an attribute of any entity: it is derived from assignment dates by
``gym_admin.domain.status``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class DurationUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class MembershipStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRING = "Expiring"
    EXPIRED = "Expired"


class BillingStatus(str, Enum):
    PAID = "Paid"
    DUE = "Due"
    OVERDUE = "Overdue"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    BANK_TRANSFER = "BankTransfer"
    CASH = "Cash"
    CHECK = "Check"


class PaymentStatus(str, Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    FAILED = "Failed"


@dataclass
class Plan:
    """A purchasable membership tier.

    ``duration_months`` is the canonical duration: plans entered in days or
    weeks are rounded up to whole months before they are stored.
    """

    name: str = ""
    price: Decimal = Decimal("0")
    duration_months: int = 1
    features: List[str] = field(default_factory=list)
    description: Optional[str] = None
    is_active: bool = True
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.name or not self.name.strip():
            raise ValueError("Plan name is required")
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))
        if self.price < 0:
            raise ValueError("Price cannot be negative")
        if self.duration_months < 1:
            raise ValueError("Duration must be at least one month")
        self.features = list(self.features or [])


@dataclass
class Member:
    """Domain entity representing a gym member."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.first_name:
            raise ValueError("First name is required")
        if not self.last_name:
            raise ValueError("Last name is required")
        if not self.email:
            raise ValueError("Email is required")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class MembershipAssignment:
    """Links a member to a plan for a concrete date range."""

    member_id: str = ""
    plan_id: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True
    id: Optional[str] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.member_id:
            raise ValueError("member_id is required")
        if not self.plan_id:
            raise ValueError("plan_id is required")
        if self.start_date is None or self.end_date is None:
            raise ValueError("Start and end dates are required")
        if self.end_date < self.start_date:
            raise ValueError("End date cannot precede start date")


@dataclass
class Payment:
    """An append-only payment record. Nothing here processes money."""

    member_id: str = ""
    amount: Decimal = Decimal("0")
    payment_date: Optional[date] = None
    method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.COMPLETED
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.member_id:
            raise ValueError("member_id is required")
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        if self.amount <= 0:
            raise ValueError("Amount must be positive")
        if self.payment_date is None:
            raise ValueError("Payment date is required")
        self.method = PaymentMethod(self.method)
        self.status = PaymentStatus(self.status)
