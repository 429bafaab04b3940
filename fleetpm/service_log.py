"""Logging a performed service against a plan."""

from typing import Optional, Tuple

from .calculations import parse_date
from .enriched_plan import EnrichedPlan
from .errors import MonthEditError
from .history_entry import PMHistory
from .plan import MaintenancePlan
from .reconciler import new_history_id


def log_service(
    enriched: EnrichedPlan,
    service_date: str,
    mileage: Optional[float],
    technician_id: Optional[str] = None,
    notes: str = "",
) -> Tuple[MaintenancePlan, PMHistory]:
    """
    Record a service and move the plan's anchors to it.

    The history entry keeps the due date and mileage the service satisfied
    so compliance can be measured later. Returns the updated plan and the
    new entry; neither collection is written here.
    """
    if not service_date or mileage is None:
        raise MonthEditError("Service date and mileage are required")
    service_date = parse_date(service_date).isoformat()

    plan = enriched.plan
    entry = PMHistory(
        id=new_history_id(),
        maintenance_plan_id=plan.id,
        vehicle_license_plate=plan.vehicle_license_plate,
        plan_name=plan.plan_name,
        service_date=service_date,
        mileage=mileage,
        technician_id=technician_id,
        notes=notes,
        target_service_date=(
            enriched.next_service_date.isoformat()
            if enriched.next_service_date
            else None
        ),
        target_mileage=enriched.next_service_mileage,
    )
    return plan.with_service(service_date, mileage), entry
