"""
Read-side projections of membership and billing state.

Nothing here touches storage: callers pass in rows they already fetched.
All comparisons are by calendar day.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Union

from .entities import BillingStatus, MembershipStatus, Payment, PaymentStatus

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def resolve_status(
    end_date: DateLike, now: DateLike, threshold_days: int
) -> MembershipStatus:
    """
    Membership status for an assignment ending on ``end_date``.

    Expired once ``now`` is past the end date, Expiring while at most
    ``threshold_days`` remain (inclusive), Active otherwise.
    """
    if threshold_days is None:
        raise ValueError("threshold_days must be provided")
    if threshold_days < 0:
        raise ValueError("threshold_days cannot be negative")

    end = _as_date(end_date)
    today = _as_date(now)

    if today > end:
        return MembershipStatus.EXPIRED
    if (end - today).days <= threshold_days:
        return MembershipStatus.EXPIRING
    return MembershipStatus.ACTIVE


def billing_due_date(period_start: DateLike, grace_days: int) -> date:
    """Date after which an unpaid billing period counts as overdue."""
    return _as_date(period_start) + timedelta(days=grace_days)


def resolve_payment_status(
    payments: Iterable[Payment],
    period_start: DateLike,
    due_date: DateLike,
    now: DateLike,
) -> BillingStatus:
    """
    Billing status of the period that started on ``period_start``.

    Paid when a completed payment was made on or after the period start,
    Overdue when there is none and ``due_date`` has passed, Due otherwise.
    """
    start = _as_date(period_start)
    for payment in payments:
        if (
            payment.status == PaymentStatus.COMPLETED
            and _as_date(payment.payment_date) >= start
        ):
            return BillingStatus.PAID

    if _as_date(now) > _as_date(due_date):
        return BillingStatus.OVERDUE
    return BillingStatus.DUE
