"""
Plan duration arithmetic.

Month addition clamps to the end of the target month: the day of month is
kept when it exists there, otherwise the last day of that month is used
(2024-01-31 + 1 month = 2024-02-29, 2023-01-31 + 1 month = 2023-02-28).

Canonical months use a 30-day month and always round up, so the conversion
from days or weeks is lossy and does not round-trip.
"""

import calendar
import math
from datetime import date, timedelta
from typing import Optional, Union

from ..core import config
from ..core.exceptions import ValidationError
from .entities import DurationUnit

DAYS_PER_MONTH = 30

UnitLike = Union[DurationUnit, str]


def add_months(start: date, months: int) -> date:
    """Add calendar months to ``start``, clamping to the last day of month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_end_date(start: date, value: int, unit: UnitLike) -> date:
    """Concrete end date of a duration of ``value`` ``unit``s from ``start``."""
    unit = DurationUnit(unit)
    if unit is DurationUnit.DAY:
        return start + timedelta(days=value)
    if unit is DurationUnit.WEEK:
        return start + timedelta(days=value * 7)
    return add_months(start, value)


def to_canonical_months(value: int, unit: UnitLike) -> int:
    """Normalize a duration to whole months (ceil on a 30-day month)."""
    unit = DurationUnit(unit)
    if unit is DurationUnit.DAY:
        return math.ceil(value / DAYS_PER_MONTH)
    if unit is DurationUnit.WEEK:
        return math.ceil(value * 7 / DAYS_PER_MONTH)
    return value


def parse_duration_unit(raw) -> DurationUnit:
    """Boundary conversion for user supplied units ("day", "Weeks", ...)."""
    if isinstance(raw, DurationUnit):
        return raw
    text = str(raw or "").strip().lower()
    if text.endswith("s"):
        text = text[:-1]
    try:
        return DurationUnit(text)
    except ValueError:
        raise ValidationError(
            f"Unknown duration unit '{raw}'. Use day, week or month",
            field="duration_unit",
        ) from None


def preview_end_date(value: int, unit: UnitLike, today: Optional[date] = None) -> date:
    """End date shown while a plan is being edited. Never persisted."""
    return compute_end_date(today or config.today(), value, unit)
