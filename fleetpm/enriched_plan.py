"""EnrichedPlan dataclass for calculated plan status."""

from dataclasses import dataclass
from datetime import date
from typing import Optional, TYPE_CHECKING

from .status import PlanStatus

if TYPE_CHECKING:
    from .plan import MaintenancePlan


@dataclass
class EnrichedPlan:
    """Live status of a maintenance plan. Derived on every read, never stored."""

    plan: "MaintenancePlan"
    status: PlanStatus
    next_service_date: Optional[date]
    days_until_next_service: Optional[int]
    next_service_mileage: float
    current_mileage: Optional[float] = None
    km_until_next_service: Optional[float] = None
    vehicle_type: Optional[str] = None
    vehicle_make: Optional[str] = None

    @property
    def is_due(self) -> bool:
        return self.status in (PlanStatus.OVERDUE, PlanStatus.DUE)
