"""
Fleet preventive-maintenance engine.

This package derives PM schedules and status from maintenance plans:
- PlanStatus / MonthStatus: plan urgency and annual grid cell states
- MaintenancePlan: recurrence rule anchored at the last service
- calculations: next occurrence and ok/due/overdue classification
- projector: recurrences falling in a calendar year
- reconciler: calculated months merged with manual overrides
- enricher: live plan status from the latest odometer reading
- Fleet: main aggregate combining plans, overrides, history and repairs
"""

from .status import PlanStatus, MonthStatus
from .errors import PlanConfigError, MonthEditError
from .plan import FrequencyUnit, MaintenancePlan, validate_plan
from .annual_plan import AnnualPlanIndex, AnnualPlanKey, AnnualPMPlan
from .history_entry import PMHistory
from .repair import RepairRecord
from .vehicle import Vehicle
from .enriched_plan import EnrichedPlan
from .calculations import (
    advance,
    compute_next_occurrence,
    compute_status,
    days_until,
    parse_date,
)
from .projector import project_year
from .reconciler import HistoryLog, MonthEdit, apply_edit, effective_status
from .enricher import enrich, enrich_all, latest_mileage
from .grid import GridRow, build_annual_grid
from .service_log import log_service
from .compliance import ComplianceItem, ComplianceStatus, compliance_report
from .fleet import Fleet
from .loader import load_fleet

__all__ = [
    "PlanStatus",
    "MonthStatus",
    "PlanConfigError",
    "MonthEditError",
    "FrequencyUnit",
    "MaintenancePlan",
    "validate_plan",
    "AnnualPlanIndex",
    "AnnualPlanKey",
    "AnnualPMPlan",
    "PMHistory",
    "RepairRecord",
    "Vehicle",
    "EnrichedPlan",
    "advance",
    "compute_next_occurrence",
    "compute_status",
    "days_until",
    "parse_date",
    "project_year",
    "HistoryLog",
    "MonthEdit",
    "apply_edit",
    "effective_status",
    "enrich",
    "enrich_all",
    "latest_mileage",
    "GridRow",
    "build_annual_grid",
    "log_service",
    "ComplianceItem",
    "ComplianceStatus",
    "compliance_report",
    "Fleet",
    "load_fleet",
]
