"""Fleet class - the main aggregate for PM plans, overrides and history."""

import logging
from datetime import date, datetime
from typing import FrozenSet, Iterable, List, Optional, Union

from .annual_plan import AnnualPlanIndex, AnnualPlanKey, AnnualPMPlan
from .compliance import ComplianceItem, compliance_report
from .enriched_plan import EnrichedPlan
from .enricher import enrich, enrich_all
from .grid import GridRow, build_annual_grid
from .history_entry import PMHistory
from .plan import MaintenancePlan
from .projector import project_year
from .reconciler import HistoryLog, MonthEdit, apply_edit, effective_status
from .repair import RepairRecord
from .service_log import log_service
from .status import MonthStatus, PlanStatus
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


class Fleet:
    """Vehicles, maintenance plans, month overrides, PM history and repairs."""

    def __init__(
        self,
        vehicles: Optional[List[Vehicle]] = None,
        plans: Optional[List[MaintenancePlan]] = None,
        annual_plans: Union[AnnualPlanIndex, Iterable[AnnualPMPlan], None] = None,
        history: Optional[List[PMHistory]] = None,
        repairs: Optional[List[RepairRecord]] = None,
    ):
        self.vehicles = vehicles or []
        self.plans = plans or []
        if isinstance(annual_plans, AnnualPlanIndex):
            self.annual_plans = annual_plans
        else:
            self.annual_plans = AnnualPlanIndex(annual_plans)
        self.history = history or []
        self.repairs = repairs or []

    def get_plan(self, plan_id: str) -> Optional[MaintenancePlan]:
        """Find a plan by id."""
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        return None

    def require_plan(self, plan_id: str) -> MaintenancePlan:
        plan = self.get_plan(plan_id)
        if plan is None:
            raise KeyError(f"Unknown plan id '{plan_id}'")
        return plan

    def get_vehicle(self, license_plate: str) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.license_plate == license_plate:
                return vehicle
        return None

    # -------------------------------------------------------------------------
    # Live status
    # -------------------------------------------------------------------------

    def enrich_plan(self, plan: MaintenancePlan, now: datetime) -> EnrichedPlan:
        return enrich(
            plan, self.repairs, now, self.get_vehicle(plan.vehicle_license_plate)
        )

    def enriched_plans(
        self,
        now: datetime,
        status_filter: Optional[PlanStatus] = None,
        search_term: str = "",
    ) -> List[EnrichedPlan]:
        """Live status of every plan, soonest due first."""
        enriched = enrich_all(self.plans, self.repairs, self.vehicles, now)
        if status_filter is not None:
            enriched = [e for e in enriched if e.status == status_filter]
        if search_term:
            term = search_term.lower()
            enriched = [
                e
                for e in enriched
                if term in e.plan.vehicle_license_plate.lower()
                or term in e.plan.plan_name.lower()
            ]
        return enriched

    # -------------------------------------------------------------------------
    # Annual grid
    # -------------------------------------------------------------------------

    def calculated_months(self, plan_id: str, year: int) -> FrozenSet[int]:
        return project_year(self.require_plan(plan_id), year)

    def annual_grid(
        self,
        year: int,
        now: datetime,
        search_term: str = "",
        status_filter: Optional[PlanStatus] = None,
    ) -> List[GridRow]:
        return build_annual_grid(
            enrich_all(self.plans, self.repairs, self.vehicles, now),
            self.annual_plans,
            year,
            search_term=search_term,
            status_filter=status_filter,
        )

    def effective_month_status(
        self, plan_id: str, year: int, month_index: int
    ) -> MonthStatus:
        plan = self.require_plan(plan_id)
        key = AnnualPlanKey(plan.vehicle_license_plate, plan.id, year)
        manual = self.annual_plans.manual_months(key).get(month_index)
        return effective_status(manual, month_index in project_year(plan, year))

    def set_month_status(
        self,
        plan_id: str,
        year: int,
        month_index: int,
        status: MonthStatus,
        history_log: Optional[HistoryLog] = None,
    ) -> MonthEdit:
        """Apply a grid cell edit; completed edits also append to history."""
        plan = self.require_plan(plan_id)
        edit = apply_edit(
            self.annual_plans,
            plan,
            year,
            month_index,
            status,
            project_year(plan, year),
            history_log,
        )
        if edit.history_entry is not None:
            self.history.append(edit.history_entry)
            logger.info(
                "Logged %s for %s on %s",
                plan.plan_name,
                plan.vehicle_license_plate,
                edit.history_entry.service_date,
            )
        return edit

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def log_service(
        self,
        plan_id: str,
        service_date: str,
        mileage: Optional[float],
        now: datetime,
        technician_id: Optional[str] = None,
        notes: str = "",
    ) -> PMHistory:
        """Record a service and advance the plan's anchors."""
        plan = self.require_plan(plan_id)
        updated, entry = log_service(
            self.enrich_plan(plan, now), service_date, mileage, technician_id, notes
        )
        self.plans = [updated if p.id == plan_id else p for p in self.plans]
        self.history.append(entry)
        return entry

    def get_history_entry(self, entry_id: str) -> Optional[PMHistory]:
        for entry in self.history:
            if entry.id == entry_id:
                return entry
        return None

    def delete_history_entry(self, entry_id: str) -> PMHistory:
        entry = self.get_history_entry(entry_id)
        if entry is None:
            raise KeyError(f"Unknown history entry '{entry_id}'")
        self.history = [h for h in self.history if h.id != entry_id]
        return entry

    def history_sorted(self, reverse: bool = True) -> List[PMHistory]:
        """History by service date, newest first by default."""
        return sorted(
            self.history, key=lambda h: (h.service_date, h.id), reverse=reverse
        )

    def compliance(
        self, start: date, end: date, today: date, search_term: str = ""
    ) -> List[ComplianceItem]:
        return compliance_report(
            self.plans, self.history, start, end, today, search_term
        )
