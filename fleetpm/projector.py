"""Projection of a plan's recurrences onto a calendar year."""

from typing import FrozenSet, Set

from .calculations import advance, parse_date
from .plan import FrequencyUnit, MaintenancePlan


def project_year(plan: MaintenancePlan, target_year: int) -> FrozenSet[int]:
    """
    Months (0-11) of target_year in which the plan recurs.

    Walks forward from the last service date one step at a time. The anchor
    itself is never marked, only recurrences after it. The walk stops when
    the cursor passes target_year or when a step fails to move the cursor
    forward (zero or negative frequency), so it always terminates.
    """
    unit = FrequencyUnit.parse(plan.frequency_unit)
    anchor = parse_date(plan.last_service_date)
    months: Set[int] = set()

    cursor = anchor
    while cursor.year <= target_year:
        if cursor.year == target_year and cursor > anchor:
            months.add(cursor.month - 1)

        previous = cursor
        cursor = advance(previous, plan.frequency_value, unit)
        if cursor <= previous:
            break

    return frozenset(months)
