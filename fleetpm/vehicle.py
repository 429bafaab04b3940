"""Vehicle class for display joins."""

from typing import Optional


class Vehicle:
    """Fleet vehicle identification."""

    def __init__(
        self,
        license_plate: str,
        vehicle_type: Optional[str] = None,
        make: Optional[str] = None,
    ):
        self.license_plate = license_plate
        self.vehicle_type = vehicle_type
        self.make = make

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        parts = [p for p in (self.make, self.vehicle_type) if p]
        if parts:
            return f"{self.license_plate} ({' '.join(parts)})"
        return self.license_plate
