"""Helper functions for recurrence and status calculations."""

import math
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .plan import FrequencyUnit
from .status import PlanStatus

DUE_SOON_DAYS = 30
DUE_SOON_KM = 1500


def parse_date(value: Union[str, date, datetime]) -> date:
    """Parse an ISO date or timestamp ('2024-01-15', '2024-01-15T00:00:00Z')."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(value).date()


def advance(
    anchor: date, frequency_value: int, frequency_unit: Union[str, FrequencyUnit]
) -> date:
    """
    Move a date forward by one recurrence step.

    Months use relativedelta, so a day-of-month past the end of the target
    month is clamped (Jan 31 + 1 month = Feb 28/29). No validation of
    frequency_value: zero or negative steps are returned as-is.
    """
    unit = FrequencyUnit.parse(frequency_unit)
    if unit is FrequencyUnit.DAYS:
        return anchor + timedelta(days=frequency_value)
    if unit is FrequencyUnit.WEEKS:
        return anchor + timedelta(weeks=frequency_value)
    return anchor + relativedelta(months=frequency_value)


def compute_next_occurrence(
    anchor: date, frequency_value: int, frequency_unit: Union[str, FrequencyUnit]
) -> Optional[date]:
    """Next due date after the anchor, or None if the rule never recurs."""
    unit = FrequencyUnit.parse(frequency_unit)
    if frequency_value <= 0:
        return None
    return advance(anchor, frequency_value, unit)


def days_until(target: date, now: datetime) -> int:
    """Whole days from now until the start of target, rounded up."""
    delta = datetime.combine(target, time.min) - now
    return math.ceil(delta.total_seconds() / 86400)


def calc_next_service_mileage(last_mileage: float, interval: float) -> float:
    """Calculate next due mileage: last + interval."""
    return (last_mileage or 0) + (interval or 0)


def compute_status(
    days_until_next_service: Optional[int],
    km_until_next_service: Optional[float],
    due_soon_days: int = DUE_SOON_DAYS,
    due_soon_km: float = DUE_SOON_KM,
) -> PlanStatus:
    """
    Classify urgency from time and distance remaining.

    Whichever signal is more urgent wins. A None signal is unknown and
    never counts toward urgency.
    """
    days = days_until_next_service
    km = km_until_next_service
    if (days is not None and days < 0) or (km is not None and km < 0):
        return PlanStatus.OVERDUE
    if (days is not None and days <= due_soon_days) or (
        km is not None and km <= due_soon_km
    ):
        return PlanStatus.DUE
    return PlanStatus.OK
