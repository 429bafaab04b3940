"""RepairRecord class: the odometer source for current mileage."""
from typing import Any


class RepairRecord:
    """A repair order. Only plate, creation time and odometer matter here."""

    def __init__(
            self,
            id: str,
            license_plate: str,
            created_at: str,
            current_mileage: Any = None,
    ):
        self.id = id
        self.license_plate = license_plate
        self.created_at = created_at
        # Raw form value: may be missing, empty or not numeric
        self.current_mileage = current_mileage
