"""YAML loading and saving utilities for fleet PM data."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Union

import yaml

from .annual_plan import AnnualPMPlan
from .fleet import Fleet
from .history_entry import PMHistory
from .plan import MaintenancePlan, validate_plan
from .repair import RepairRecord
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

FLEET_SECTIONS = {"vehicles", "plans", "annualPlans", "history", "repairs"}

FleetObject = Union[
    Vehicle, MaintenancePlan, AnnualPMPlan, PMHistory, RepairRecord, Fleet, dict
]


def _parse_object(dct: Dict[str, Any]) -> FleetObject:
    """Parse dictionary into appropriate object type."""
    # Annual override record (checked before plans, both carry ids and plates)
    if "months" in dct and "maintenancePlanId" in dct:
        return AnnualPMPlan(
            dct.get("id") or "",
            dct["vehicleLicensePlate"],
            dct["maintenancePlanId"],
            dct["year"],
            dct.get("months"),
        )
    # History entry
    elif "serviceDate" in dct and "maintenancePlanId" in dct:
        return PMHistory(
            dct["id"],
            dct["maintenancePlanId"],
            dct["vehicleLicensePlate"],
            dct.get("planName") or "",
            dct["serviceDate"],
            dct["mileage"],
            dct.get("technicianId"),
            dct.get("notes"),
            dct.get("targetServiceDate"),
            dct.get("targetMileage"),
        )
    # Maintenance plan
    elif "frequencyUnit" in dct:
        plan = MaintenancePlan(
            dct["id"],
            dct["vehicleLicensePlate"],
            dct["planName"],
            dct["lastServiceDate"],
            dct["frequencyValue"],
            dct["frequencyUnit"],
            dct.get("lastServiceMileage"),
            dct.get("mileageFrequency"),
        )
        validate_plan(plan)
        return plan
    # Repair record
    elif "licensePlate" in dct and "createdAt" in dct:
        return RepairRecord(
            dct.get("id") or "",
            dct["licensePlate"],
            dct["createdAt"],
            dct.get("currentMileage"),
        )
    # Vehicle
    elif "licensePlate" in dct:
        return Vehicle(dct["licensePlate"], dct.get("vehicleType"), dct.get("make"))
    # Top-level fleet object
    elif FLEET_SECTIONS.intersection(dct):
        return Fleet(
            dct.get("vehicles"),
            dct.get("plans"),
            dct.get("annualPlans"),
            dct.get("history"),
            dct.get("repairs"),
        )
    else:
        # Return dict as-is for unknown structures (like 'months')
        return dct


def load_fleet(filename: Union[str, Path]) -> Fleet:
    """Load a fleet from a YAML file."""
    with open(filename, "rb") as fp:
        # default=str turns unquoted YAML dates into ISO strings
        json_data = json.dumps(
            yaml.load(fp, Loader=yaml.SafeLoader), indent=4, default=str
        )
        fleet = json.loads(json_data, object_hook=_parse_object)
    # An empty file holds an empty fleet
    return fleet if fleet is not None else Fleet()


def _read_raw(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader) or {}


def _write_raw(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    """Omit None values for cleaner YAML."""
    return {k: v for k, v in d.items() if v is not None}


def _plan_to_dict(plan: MaintenancePlan) -> Dict[str, Any]:
    """Serialize a MaintenancePlan to the YAML dict format (camelCase keys)."""
    return {
        "id": plan.id,
        "vehicleLicensePlate": plan.vehicle_license_plate,
        "planName": plan.plan_name,
        "lastServiceDate": plan.last_service_date,
        "frequencyValue": plan.frequency_value,
        "frequencyUnit": plan.frequency_unit.value,
        "lastServiceMileage": plan.last_service_mileage,
        "mileageFrequency": plan.mileage_frequency,
    }


def _annual_plan_to_dict(plan: AnnualPMPlan) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "vehicleLicensePlate": plan.vehicle_license_plate,
        "maintenancePlanId": plan.maintenance_plan_id,
        "year": plan.year,
        "months": {month: plan.months[month].value for month in sorted(plan.months)},
    }


def _history_to_dict(entry: PMHistory) -> Dict[str, Any]:
    d = {
        "id": entry.id,
        "maintenancePlanId": entry.maintenance_plan_id,
        "vehicleLicensePlate": entry.vehicle_license_plate,
        "planName": entry.plan_name,
        "serviceDate": entry.service_date,
        "mileage": entry.mileage,
        "technicianId": entry.technician_id,
        "notes": entry.notes or None,
        "targetServiceDate": entry.target_service_date,
        "targetMileage": entry.target_mileage,
    }
    return _drop_none(d)


def add_plan(filename: Union[str, Path], plan: MaintenancePlan) -> None:
    """
    Append a maintenance plan to a fleet YAML file.

    The plan is validated first; nothing is written if it is invalid.
    """
    validate_plan(plan)
    data = _read_raw(filename)
    if data.get("plans") is None:
        data["plans"] = []
    if any(p.get("id") == plan.id for p in data["plans"]):
        raise ValueError(f"Plan id '{plan.id}' already exists")
    data["plans"].append(_plan_to_dict(plan))
    _write_raw(filename, data)
    logger.info("Added plan %s to %s", plan.id, filename)


def update_plan(filename: Union[str, Path], plan: MaintenancePlan) -> None:
    """Replace the stored plan with the same id."""
    validate_plan(plan)
    data = _read_raw(filename)
    plans = data.get("plans") or []
    for index, raw in enumerate(plans):
        if raw.get("id") == plan.id:
            plans[index] = _plan_to_dict(plan)
            break
    else:
        raise KeyError(f"Unknown plan id '{plan.id}'")
    _write_raw(filename, data)
    logger.info("Updated plan %s in %s", plan.id, filename)


def delete_plan(filename: Union[str, Path], plan_id: str) -> None:
    """Remove a plan by id. Its overrides and history are kept."""
    data = _read_raw(filename)
    plans = data.get("plans") or []
    remaining = [p for p in plans if p.get("id") != plan_id]
    if len(remaining) == len(plans):
        raise KeyError(f"Unknown plan id '{plan_id}'")
    data["plans"] = remaining
    _write_raw(filename, data)
    logger.info("Deleted plan %s from %s", plan_id, filename)


def save_annual_plans(
    filename: Union[str, Path], annual_plans: Iterable[AnnualPMPlan]
) -> None:
    """Replace the annualPlans section with the given override records."""
    data = _read_raw(filename)
    data["annualPlans"] = [_annual_plan_to_dict(p) for p in annual_plans]
    _write_raw(filename, data)
    logger.info("Saved %d annual plans to %s", len(data["annualPlans"]), filename)


def append_history_entry(filename: Union[str, Path], entry: PMHistory) -> None:
    """Append a PM history entry to a fleet YAML file."""
    data = _read_raw(filename)
    if data.get("history") is None:
        data["history"] = []
    data["history"].append(_history_to_dict(entry))
    _write_raw(filename, data)
    logger.info("Appended history entry %s to %s", entry.id, filename)


def delete_history_entry(filename: Union[str, Path], entry_id: str) -> None:
    """Remove a PM history entry by id."""
    data = _read_raw(filename)
    history = data.get("history") or []
    remaining = [h for h in history if h.get("id") != entry_id]
    if len(remaining) == len(history):
        raise KeyError(f"Unknown history entry '{entry_id}'")
    data["history"] = remaining
    _write_raw(filename, data)
    logger.info("Deleted history entry %s from %s", entry_id, filename)
