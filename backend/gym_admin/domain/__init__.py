"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities and enumerations
- interfaces.py: Store and repository contracts
- duration.py: Plan duration arithmetic
- status.py: Membership and billing status projections
"""

from .entities import (
    BillingStatus,
    DurationUnit,
    Member,
    MembershipAssignment,
    MembershipStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Plan,
)
from .interfaces import (
    IMemberReader,
    IMemberRepository,
    IMemberWriter,
    IPaymentReader,
    IPaymentRepository,
    IPaymentWriter,
    IPlanReader,
    IPlanRepository,
    IPlanWriter,
    IRecordStore,
)

__all__ = [
    # Domain entities
    "Plan",
    "Member",
    "MembershipAssignment",
    "Payment",
    # Enumerations
    "DurationUnit",
    "MembershipStatus",
    "BillingStatus",
    "PaymentMethod",
    "PaymentStatus",
    # Store and repository interfaces
    "IRecordStore",
    "IPlanRepository",
    "IMemberRepository",
    "IPaymentRepository",
    # Segregated interfaces
    "IPlanReader",
    "IPlanWriter",
    "IMemberReader",
    "IMemberWriter",
    "IPaymentReader",
    "IPaymentWriter",
]
