"""Rows of the annual PM grid: one per plan, twelve month cells each."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from .annual_plan import AnnualPlanIndex, AnnualPlanKey, annual_plan_id
from .enriched_plan import EnrichedPlan
from .projector import project_year
from .reconciler import month_statuses
from .status import MonthStatus, PlanStatus


@dataclass
class GridRow:
    """A plan's calculated and manual months for one year."""

    enriched: EnrichedPlan
    year: int
    annual_plan_id: str
    calculated_months: FrozenSet[int]
    manual_months: Dict[int, MonthStatus] = field(default_factory=dict)

    @property
    def key(self) -> AnnualPlanKey:
        plan = self.enriched.plan
        return AnnualPlanKey(plan.vehicle_license_plate, plan.id, self.year)

    @property
    def statuses(self) -> List[MonthStatus]:
        return month_statuses(self.manual_months, self.calculated_months)

    def month_status(self, month_index: int) -> MonthStatus:
        return self.statuses[month_index]


def matches_search(enriched: EnrichedPlan, search_term: str) -> bool:
    """Case-insensitive match on plate or plan name."""
    if not search_term:
        return True
    term = search_term.lower()
    plan = enriched.plan
    return term in plan.vehicle_license_plate.lower() or term in plan.plan_name.lower()


def build_annual_grid(
    enriched_plans: Iterable[EnrichedPlan],
    overrides: AnnualPlanIndex,
    year: int,
    search_term: str = "",
    status_filter: Optional[PlanStatus] = None,
) -> List[GridRow]:
    """
    Build grid rows for a year, most urgent plans first.

    Calculated months are re-projected on every call; stored overrides
    only hold deviations from them.
    """
    rows = []
    for enriched in enriched_plans:
        if status_filter is not None and enriched.status != status_filter:
            continue
        if not matches_search(enriched, search_term):
            continue

        plan = enriched.plan
        key = AnnualPlanKey(plan.vehicle_license_plate, plan.id, year)
        existing = overrides.get(key)
        rows.append(
            GridRow(
                enriched=enriched,
                year=year,
                annual_plan_id=existing.id if existing else annual_plan_id(key),
                calculated_months=project_year(plan, year),
                manual_months=overrides.manual_months(key),
            )
        )

    return sorted(
        rows,
        key=lambda r: (
            r.enriched.status.rank,
            r.enriched.plan.vehicle_license_plate,
            r.enriched.plan.plan_name,
        ),
    )
