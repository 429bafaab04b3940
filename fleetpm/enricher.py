"""Joining plans with odometer readings to produce live plan status."""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from dateutil.parser import isoparse

from .calculations import (
    calc_next_service_mileage,
    compute_next_occurrence,
    compute_status,
    days_until,
    parse_date,
)
from .enriched_plan import EnrichedPlan
from .plan import MaintenancePlan
from .repair import RepairRecord
from .vehicle import Vehicle


def parse_mileage(value: Any) -> Optional[float]:
    """Usable odometer reading from a raw repair field, else None.

    Zero is the blank form default and doesn't count as a reading.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return None
    try:
        mileage = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(mileage) or mileage <= 0:
        return None
    return mileage


def latest_mileage(
    repairs: Iterable[RepairRecord], license_plate: str
) -> Optional[float]:
    """
    Odometer from the most recently created repair for a vehicle.

    Repairs without a usable mileage or a parseable created_at are skipped.
    Ties on created_at go to the highest mileage.
    """
    candidates = []
    for repair in repairs:
        if repair.license_plate != license_plate:
            continue
        mileage = parse_mileage(repair.current_mileage)
        if mileage is None:
            continue
        created = _created_at(repair)
        if created is None:
            continue
        candidates.append((created, mileage))
    if not candidates:
        return None
    return max(candidates)[1]


def _created_at(repair: RepairRecord) -> Optional[datetime]:
    # Aware timestamps compare as UTC instants; naive ones are taken as-is
    created = repair.created_at
    if not isinstance(created, datetime):
        if not created:
            return None
        try:
            created = isoparse(str(created))
        except (ValueError, OverflowError):
            return None
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return created


def enrich(
    plan: MaintenancePlan,
    repairs: Iterable[RepairRecord],
    now: datetime,
    vehicle: Optional[Vehicle] = None,
) -> EnrichedPlan:
    """Calculate the live status of a plan as of `now`."""
    next_date = compute_next_occurrence(
        parse_date(plan.last_service_date), plan.frequency_value, plan.frequency_unit
    )
    days = days_until(next_date, now) if next_date is not None else None

    current = latest_mileage(repairs, plan.vehicle_license_plate)
    next_mileage = calc_next_service_mileage(
        plan.last_service_mileage, plan.mileage_frequency
    )
    km_remaining = None if current is None else next_mileage - current

    return EnrichedPlan(
        plan=plan,
        status=compute_status(days, km_remaining),
        next_service_date=next_date,
        days_until_next_service=days,
        next_service_mileage=next_mileage,
        current_mileage=current,
        km_until_next_service=km_remaining,
        vehicle_type=vehicle.vehicle_type if vehicle else None,
        vehicle_make=vehicle.make if vehicle else None,
    )


def enrich_all(
    plans: Iterable[MaintenancePlan],
    repairs: Iterable[RepairRecord],
    vehicles: Iterable[Vehicle],
    now: datetime,
) -> List[EnrichedPlan]:
    """Enrich every plan, soonest due first."""
    repairs = list(repairs)
    vehicle_map: Dict[str, Vehicle] = {v.license_plate: v for v in vehicles}
    enriched = [
        enrich(plan, repairs, now, vehicle_map.get(plan.vehicle_license_plate))
        for plan in plans
    ]
    return sorted(
        enriched,
        key=lambda e: (
            e.days_until_next_service is None,
            e.days_until_next_service or 0,
            e.plan.vehicle_license_plate,
            e.plan.plan_name,
        ),
    )
