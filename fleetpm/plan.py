"""MaintenancePlan class for recurring maintenance obligations."""

from enum import Enum
from typing import Union

from .errors import PlanConfigError


class FrequencyUnit(Enum):
    """Time units a plan can recur on."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"

    @classmethod
    def parse(cls, value: Union[str, "FrequencyUnit"]) -> "FrequencyUnit":
        """Convert a stored unit name, rejecting anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise PlanConfigError(f"Unknown frequency unit: {value!r}") from None


class MaintenancePlan:
    """One recurring maintenance obligation for one vehicle.

    Carries both a time rule (frequency_value + frequency_unit from
    last_service_date) and a distance rule (mileage_frequency from
    last_service_mileage).
    """

    def __init__(
        self,
        id: str,
        vehicle_license_plate: str,
        plan_name: str,
        last_service_date: str,
        frequency_value: int,
        frequency_unit: Union[str, FrequencyUnit],
        last_service_mileage: float = 0,
        mileage_frequency: float = 0,
    ):
        self.id = id
        self.vehicle_license_plate = vehicle_license_plate
        self.plan_name = plan_name
        self.last_service_date = last_service_date
        self.frequency_value = frequency_value
        self.frequency_unit = FrequencyUnit.parse(frequency_unit)
        self.last_service_mileage = last_service_mileage or 0
        self.mileage_frequency = mileage_frequency or 0

    @property
    def display_name(self) -> str:
        return f"{self.vehicle_license_plate} / {self.plan_name}"

    @property
    def frequency_label(self) -> str:
        """Human-readable recurrence, e.g. '3 months / 10,000 km'."""
        label = f"{self.frequency_value} {self.frequency_unit.value}"
        if self.mileage_frequency:
            label += f" / {self.mileage_frequency:,.0f} km"
        return label

    def with_service(self, service_date: str, mileage: float) -> "MaintenancePlan":
        """Copy of this plan with both anchors moved to a new service."""
        return MaintenancePlan(
            id=self.id,
            vehicle_license_plate=self.vehicle_license_plate,
            plan_name=self.plan_name,
            last_service_date=service_date,
            frequency_value=self.frequency_value,
            frequency_unit=self.frequency_unit,
            last_service_mileage=mileage,
            mileage_frequency=self.mileage_frequency,
        )


def validate_plan(plan: MaintenancePlan) -> None:
    """Raise PlanConfigError if the plan cannot be scheduled."""
    if not plan.vehicle_license_plate or not plan.plan_name:
        raise PlanConfigError("Plan needs a license plate and a plan name")
    if not plan.last_service_date:
        raise PlanConfigError(f"Plan {plan.id!r} has no last service date")
    if isinstance(plan.frequency_value, bool) or not isinstance(
        plan.frequency_value, int
    ):
        raise PlanConfigError(
            f"Plan {plan.id!r}: frequency value must be an integer, "
            f"got {plan.frequency_value!r}"
        )
    if plan.frequency_value <= 0:
        raise PlanConfigError(
            f"Plan {plan.id!r}: frequency value must be positive, "
            f"got {plan.frequency_value}"
        )
    if plan.mileage_frequency < 0:
        raise PlanConfigError(
            f"Plan {plan.id!r}: mileage frequency cannot be negative"
        )
