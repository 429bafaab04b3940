"""Manual month overrides for the annual PM grid."""

import logging
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Union

from .status import MonthStatus

logger = logging.getLogger(__name__)


class AnnualPlanKey(NamedTuple):
    """Natural key of an override record: (vehicle, plan, year)."""

    vehicle_license_plate: str
    maintenance_plan_id: str
    year: int


def annual_plan_id(key: AnnualPlanKey) -> str:
    """Default storage id for a lazily created override record."""
    return f"{key.vehicle_license_plate}-{key.maintenance_plan_id}-{key.year}"


class AnnualPMPlan:
    """Sparse month -> MonthStatus overrides for one (vehicle, plan, year).

    A month missing from `months` has no override and shows whatever the
    projection calculates.
    """

    def __init__(
        self,
        id: str,
        vehicle_license_plate: str,
        maintenance_plan_id: str,
        year: int,
        months: Optional[Dict[Union[int, str], Union[str, MonthStatus]]] = None,
    ):
        self.id = id
        self.vehicle_license_plate = vehicle_license_plate
        self.maintenance_plan_id = maintenance_plan_id
        self.year = int(year)
        # YAML/JSON round trips turn month keys into strings
        self.months: Dict[int, MonthStatus] = {
            int(month): MonthStatus(status) for month, status in (months or {}).items()
        }

    @property
    def key(self) -> AnnualPlanKey:
        return AnnualPlanKey(
            self.vehicle_license_plate, self.maintenance_plan_id, self.year
        )

    def with_months(self, months: Dict[int, MonthStatus]) -> "AnnualPMPlan":
        return AnnualPMPlan(
            self.id,
            self.vehicle_license_plate,
            self.maintenance_plan_id,
            self.year,
            dict(months),
        )


class AnnualPlanIndex:
    """Override records indexed by AnnualPlanKey.

    Built in list order; the first record for a key wins.
    """

    def __init__(self, plans: Optional[Iterable[AnnualPMPlan]] = None):
        self._plans: Dict[AnnualPlanKey, AnnualPMPlan] = {}
        for plan in plans or []:
            if plan.key in self._plans:
                logger.warning(
                    "Ignoring duplicate annual plan %s for %s", plan.id, plan.key
                )
                continue
            self._plans[plan.key] = plan

    def get(self, key: AnnualPlanKey) -> Optional[AnnualPMPlan]:
        return self._plans.get(key)

    def put(self, plan: AnnualPMPlan) -> None:
        self._plans[plan.key] = plan

    def manual_months(self, key: AnnualPlanKey) -> Dict[int, MonthStatus]:
        plan = self._plans.get(key)
        return dict(plan.months) if plan else {}

    def for_year(self, year: int) -> List[AnnualPMPlan]:
        return [p for p in self._plans.values() if p.year == year]

    def to_list(self) -> List[AnnualPMPlan]:
        return list(self._plans.values())

    def __contains__(self, key: object) -> bool:
        return key in self._plans

    def __iter__(self) -> Iterator[AnnualPMPlan]:
        return iter(self._plans.values())

    def __len__(self) -> int:
        return len(self._plans)
