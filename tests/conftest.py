"""Shared fixtures."""
import pytest

from fleetpm import MaintenancePlan


@pytest.fixture
def make_plan():
    """Factory for plans; defaults to a quarterly oil change on 70-1234."""

    def _make_plan(**overrides):
        fields = dict(
            id="MP-1",
            vehicle_license_plate="70-1234",
            plan_name="engine oil and filter",
            last_service_date="2024-01-15",
            frequency_value=3,
            frequency_unit="months",
            last_service_mileage=120000,
            mileage_frequency=10000,
        )
        fields.update(overrides)
        return MaintenancePlan(**fields)

    return _make_plan
