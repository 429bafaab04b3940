"""PM compliance: how performed services compare to their due targets."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .calculations import calc_next_service_mileage, compute_next_occurrence, parse_date
from .history_entry import PMHistory
from .plan import MaintenancePlan

TOLERANCE_DAYS = 7
TOLERANCE_KM = 2000


class ComplianceStatus(Enum):
    ON_TIME = "On Time"
    EARLY = "Early"
    LATE = "Late"
    MISSED = "Missed"


@dataclass
class ComplianceItem:
    """One performed or missed service in the report window."""

    id: str
    vehicle_license_plate: str
    plan_name: str
    target_date: date
    status: ComplianceStatus
    target_mileage: Optional[float] = None
    actual_date: Optional[date] = None
    actual_mileage: Optional[float] = None
    date_diff: Optional[int] = None  # days, negative = early
    mileage_diff: Optional[float] = None  # km, negative = early


def classify(
    date_diff: int,
    mileage_diff: Optional[float],
    tolerance_days: int = TOLERANCE_DAYS,
    tolerance_km: float = TOLERANCE_KM,
) -> ComplianceStatus:
    """On time if either the date or the mileage is within tolerance."""
    if abs(date_diff) <= tolerance_days:
        return ComplianceStatus.ON_TIME
    if mileage_diff is not None and abs(mileage_diff) <= tolerance_km:
        return ComplianceStatus.ON_TIME
    if date_diff < -tolerance_days:
        return ComplianceStatus.EARLY
    if mileage_diff is not None and mileage_diff < -tolerance_km:
        return ComplianceStatus.EARLY
    return ComplianceStatus.LATE


def _history_item(entry: PMHistory) -> ComplianceItem:
    actual = parse_date(entry.service_date)
    if not entry.target_service_date:
        # Legacy entries have nothing to measure against
        return ComplianceItem(
            id=entry.id,
            vehicle_license_plate=entry.vehicle_license_plate,
            plan_name=entry.plan_name,
            target_date=actual,
            status=ComplianceStatus.ON_TIME,
            target_mileage=entry.target_mileage,
            actual_date=actual,
            actual_mileage=entry.mileage,
        )

    target = parse_date(entry.target_service_date)
    date_diff = (actual - target).days
    mileage_diff = None
    if entry.target_mileage:
        mileage_diff = entry.mileage - entry.target_mileage
    return ComplianceItem(
        id=entry.id,
        vehicle_license_plate=entry.vehicle_license_plate,
        plan_name=entry.plan_name,
        target_date=target,
        status=classify(date_diff, mileage_diff),
        target_mileage=entry.target_mileage,
        actual_date=actual,
        actual_mileage=entry.mileage,
        date_diff=date_diff,
        mileage_diff=mileage_diff,
    )


def compliance_report(
    plans: Iterable[MaintenancePlan],
    history: Iterable[PMHistory],
    start: date,
    end: date,
    today: date,
    search_term: str = "",
) -> List[ComplianceItem]:
    """
    Services and misses for the window [start, end], latest target first.

    A history entry is in the window if its service date or its target
    date is. A plan whose next due date is in the window and already past,
    with no entry logged against that date, is reported as missed.
    """
    results: List[ComplianceItem] = []
    logged: Set[Tuple[str, date]] = set()

    for entry in history:
        service = parse_date(entry.service_date)
        target = (
            parse_date(entry.target_service_date)
            if entry.target_service_date
            else None
        )
        target_in_range = target is not None and start <= target <= end
        if not (start <= service <= end or target_in_range):
            continue
        results.append(_history_item(entry))
        if target_in_range:
            logged.add((entry.maintenance_plan_id, target))

    for plan in plans:
        due = compute_next_occurrence(
            parse_date(plan.last_service_date),
            plan.frequency_value,
            plan.frequency_unit,
        )
        if due is None or not start <= due <= end:
            continue
        if (plan.id, due) in logged or due >= today:
            continue
        results.append(
            ComplianceItem(
                id=f"missed-{plan.id}-{due.isoformat()}",
                vehicle_license_plate=plan.vehicle_license_plate,
                plan_name=plan.plan_name,
                target_date=due,
                status=ComplianceStatus.MISSED,
                target_mileage=calc_next_service_mileage(
                    plan.last_service_mileage, plan.mileage_frequency
                ),
            )
        )

    if search_term:
        term = search_term.lower()
        results = [
            r
            for r in results
            if term in r.vehicle_license_plate.lower() or term in r.plan_name.lower()
        ]
    return sorted(results, key=lambda r: r.target_date, reverse=True)


def summarize(items: Iterable[ComplianceItem]) -> Dict[ComplianceStatus, int]:
    """Count report items per status."""
    counts = {status: 0 for status in ComplianceStatus}
    for item in items:
        counts[item.status] += 1
    return counts
