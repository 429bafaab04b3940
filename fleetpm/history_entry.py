"""PMHistory class for performed preventive maintenance."""
from typing import Optional


class PMHistory:
    """A record of a PM service actually performed."""

    def __init__(
            self,
            id: str,
            maintenance_plan_id: str,
            vehicle_license_plate: str,
            plan_name: str,
            service_date: str,
            mileage: float,
            technician_id: Optional[str] = None,
            notes: str = "",
            target_service_date: Optional[str] = None,
            target_mileage: Optional[float] = None,
    ):
        self.id = id
        self.maintenance_plan_id = maintenance_plan_id
        self.vehicle_license_plate = vehicle_license_plate
        self.plan_name = plan_name
        self.service_date = service_date
        self.mileage = mileage
        self.technician_id = technician_id
        self.notes = notes or ""
        self.target_service_date = target_service_date
        self.target_mileage = target_mileage
