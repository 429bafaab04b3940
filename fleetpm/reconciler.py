"""Merging calculated months with manual overrides, and the month edit."""

import logging
import uuid
from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Mapping, Optional

from .annual_plan import AnnualPlanIndex, AnnualPlanKey, AnnualPMPlan, annual_plan_id
from .errors import MonthEditError
from .history_entry import PMHistory
from .plan import MaintenancePlan
from .status import MonthStatus

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass
class HistoryLog:
    """Service details entered when a month is marked completed."""

    service_date: Optional[str]
    mileage: Optional[float]
    technician_id: Optional[str] = None
    notes: str = ""
    target_service_date: Optional[str] = None
    target_mileage: Optional[float] = None


@dataclass
class MonthEdit:
    """Outcome of apply_edit. Either part may be None."""

    annual_plan: Optional[AnnualPMPlan]
    history_entry: Optional[PMHistory] = None


def effective_status(
    manual_override: Optional[MonthStatus], is_calculated: bool
) -> MonthStatus:
    """Status shown for a month: a manual value always wins."""
    if manual_override is not None:
        return manual_override
    return MonthStatus.PLANNED if is_calculated else MonthStatus.NONE


def month_statuses(
    manual_months: Mapping[int, MonthStatus], calculated_months: AbstractSet[int]
) -> List[MonthStatus]:
    """Effective status for each of the twelve months."""
    return [
        effective_status(manual_months.get(month), month in calculated_months)
        for month in range(MONTHS_PER_YEAR)
    ]


def show_plan_dot(status: MonthStatus) -> bool:
    """Whether the cell's planned slot is lit."""
    return status in (MonthStatus.PLANNED, MonthStatus.COMPLETED)


def show_completed_dot(status: MonthStatus) -> bool:
    """Whether the cell's completion slot is lit."""
    return status.is_completed


def new_history_id() -> str:
    return f"PMH-{uuid.uuid4().hex[:12]}"


def _check_edit(
    month_index: int, new_status: MonthStatus, history_log: Optional[HistoryLog]
) -> None:
    if not 0 <= month_index < MONTHS_PER_YEAR:
        raise MonthEditError(f"Month index must be 0-11, got {month_index}")
    if new_status.is_completed:
        if history_log is None:
            raise MonthEditError(
                f"Marking a month {new_status.value} needs a service log"
            )
        if not history_log.service_date or history_log.mileage is None:
            raise MonthEditError("Service date and mileage are required")


def apply_edit(
    overrides: AnnualPlanIndex,
    plan: MaintenancePlan,
    year: int,
    month_index: int,
    new_status: MonthStatus,
    calculated_months: AbstractSet[int],
    history_log: Optional[HistoryLog] = None,
) -> MonthEdit:
    """
    Write one month of the override record for (vehicle, plan, year).

    Setting NONE on a month the projection doesn't mark removes the
    override; on a calculated month it is stored explicitly to suppress
    the planned dot. Completed statuses require a service log and produce
    a PMHistory entry for the caller to append. Validation happens before
    `overrides` is touched.
    """
    _check_edit(month_index, new_status, history_log)

    key = AnnualPlanKey(plan.vehicle_license_plate, plan.id, year)
    existing = overrides.get(key)
    removal = new_status is MonthStatus.NONE and month_index not in calculated_months

    if existing is None and removal:
        annual_plan = None
    else:
        months: Dict[int, MonthStatus] = dict(existing.months) if existing else {}
        if removal:
            months.pop(month_index, None)
        else:
            months[month_index] = new_status

        if existing is None:
            annual_plan = AnnualPMPlan(
                annual_plan_id(key), key.vehicle_license_plate,
                key.maintenance_plan_id, key.year, months,
            )
        else:
            annual_plan = existing.with_months(months)
        overrides.put(annual_plan)
        logger.debug(
            "Month %d of %s set to %s", month_index, key, new_status.value
        )

    history_entry = None
    if new_status.is_completed:
        history_entry = PMHistory(
            id=new_history_id(),
            maintenance_plan_id=plan.id,
            vehicle_license_plate=plan.vehicle_license_plate,
            plan_name=plan.plan_name,
            service_date=history_log.service_date,
            mileage=history_log.mileage,
            technician_id=history_log.technician_id,
            notes=history_log.notes,
            target_service_date=history_log.target_service_date,
            target_mileage=history_log.target_mileage,
        )

    return MonthEdit(annual_plan=annual_plan, history_entry=history_entry)
