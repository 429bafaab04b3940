#!/usr/bin/env python3
"""Tests for plan enrichment from repair odometer readings."""
from datetime import date, datetime

import pytest

from fleetpm import PlanStatus, RepairRecord, Vehicle, enrich, enrich_all, latest_mileage
from fleetpm.enricher import parse_mileage


class TestParseMileage:
    """Tests for parse_mileage."""

    def test_numbers(self):
        assert parse_mileage(131200) == 131200.0
        assert parse_mileage(131200.5) == 131200.5

    def test_numeric_strings(self):
        assert parse_mileage("131200") == 131200.0
        assert parse_mileage("131,200") == 131200.0

    @pytest.mark.parametrize("value", [None, "", "  ", "n/a", 0, "0", True, -5])
    def test_unusable_values(self, value):
        assert parse_mileage(value) is None


class TestLatestMileage:
    """Tests for latest_mileage."""

    def test_most_recently_created_wins(self):
        """Creation time decides, not the size of the reading."""
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T08:00:00", 140000),
            RepairRecord("R-2", "70-1234", "2024-05-03T08:00:00", 131000),
        ]
        assert latest_mileage(repairs, "70-1234") == 131000

    def test_skips_repairs_without_mileage(self):
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T08:00:00", 130500),
            RepairRecord("R-2", "70-1234", "2024-05-03T08:00:00", ""),
            RepairRecord("R-3", "70-1234", "2024-05-04T08:00:00", None),
        ]
        assert latest_mileage(repairs, "70-1234") == 130500

    def test_ignores_other_vehicles(self):
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T08:00:00", 130500),
            RepairRecord("R-2", "71-5678", "2024-05-03T08:00:00", 99000),
        ]
        assert latest_mileage(repairs, "70-1234") == 130500

    def test_tie_goes_to_highest_mileage(self):
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T08:00:00", 130500),
            RepairRecord("R-2", "70-1234", "2024-05-01T08:00:00", 130900),
            RepairRecord("R-3", "70-1234", "2024-05-01T08:00:00", 130100),
        ]
        assert latest_mileage(repairs, "70-1234") == 130900
        assert latest_mileage(list(reversed(repairs)), "70-1234") == 130900

    def test_mixed_timestamp_formats(self):
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T08:00:00.000Z", 130500),
            RepairRecord("R-2", "70-1234", "2024-05-02", 130700),
        ]
        assert latest_mileage(repairs, "70-1234") == 130700

    def test_utc_offsets_compare_as_instants(self):
        """10:00+07:00 is 03:00Z, earlier than 05:00Z."""
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T10:00:00+07:00", 140000),
            RepairRecord("R-2", "70-1234", "2024-05-01T05:00:00Z", 131000),
        ]
        assert latest_mileage(repairs, "70-1234") == 131000

    @pytest.mark.parametrize("created_at", ["", None, "not a date"])
    def test_skips_unparseable_created_at(self, created_at):
        repairs = [
            RepairRecord("R-1", "70-1234", "2024-05-01T08:00:00", 130500),
            RepairRecord("R-2", "70-1234", created_at, 140000),
        ]
        assert latest_mileage(repairs, "70-1234") == 130500

    def test_no_history(self):
        assert latest_mileage([], "70-1234") is None


class TestEnrich:
    """Tests for enrich."""

    NOW = datetime(2024, 3, 1)

    def repair(self, mileage):
        return RepairRecord("R-1", "70-1234", "2024-02-20T10:00:00", mileage)

    def test_next_service_values(self, make_plan):
        result = enrich(make_plan(), [self.repair(125000)], self.NOW)

        assert result.next_service_date == date(2024, 4, 15)
        assert result.days_until_next_service == 45
        assert result.current_mileage == 125000
        assert result.next_service_mileage == 130000
        assert result.km_until_next_service == 5000
        assert result.status == PlanStatus.OK

    def test_due_by_distance(self, make_plan):
        result = enrich(make_plan(), [self.repair(129000)], self.NOW)
        assert result.km_until_next_service == 1000
        assert result.status == PlanStatus.DUE

    def test_overdue_by_distance(self, make_plan):
        result = enrich(make_plan(), [self.repair(131000)], self.NOW)
        assert result.status == PlanStatus.OVERDUE

    def test_blank_created_at_means_no_reading(self, make_plan):
        repair = RepairRecord("R-1", "70-1234", "", 140000)
        result = enrich(make_plan(), [repair], datetime(2024, 5, 1))

        assert result.current_mileage is None
        assert result.km_until_next_service is None
        assert result.status == PlanStatus.OVERDUE  # by time only

    def test_overdue_by_time(self, make_plan):
        result = enrich(make_plan(), [], datetime(2024, 4, 16))
        assert result.days_until_next_service == -1
        assert result.status == PlanStatus.OVERDUE

    def test_due_by_time(self, make_plan):
        result = enrich(make_plan(), [], datetime(2024, 4, 1))
        assert result.days_until_next_service == 14
        assert result.status == PlanStatus.DUE

    def test_no_repair_history_leaves_distance_unknown(self, make_plan):
        result = enrich(make_plan(), [], self.NOW)
        assert result.current_mileage is None
        assert result.km_until_next_service is None
        assert result.next_service_mileage == 130000
        assert result.status == PlanStatus.OK

    def test_vehicle_join(self, make_plan):
        vehicle = Vehicle("70-1234", "10-wheel truck", "Isuzu")
        result = enrich(make_plan(), [], self.NOW, vehicle)
        assert result.vehicle_type == "10-wheel truck"
        assert result.vehicle_make == "Isuzu"

    def test_degenerate_rule_has_no_next_date(self, make_plan):
        result = enrich(make_plan(frequency_value=0), [], self.NOW)
        assert result.next_service_date is None
        assert result.days_until_next_service is None
        assert result.status == PlanStatus.OK

    def test_repeatable(self, make_plan):
        plan = make_plan()
        repairs = [self.repair(129000)]
        assert enrich(plan, repairs, self.NOW) == enrich(plan, repairs, self.NOW)


class TestEnrichAll:
    """Tests for enrich_all."""

    def test_sorted_soonest_first_with_vehicle_join(self, make_plan):
        plans = [
            make_plan(id="MP-1", last_service_date="2024-01-15"),
            make_plan(
                id="MP-2",
                vehicle_license_plate="71-5678",
                last_service_date="2024-02-01",
                frequency_value=2,
                frequency_unit="weeks",
            ),
        ]
        vehicles = [Vehicle("71-5678", "6-wheel truck", "Hino")]
        result = enrich_all(plans, [], vehicles, datetime(2024, 2, 5))

        assert [e.plan.id for e in result] == ["MP-2", "MP-1"]
        assert result[0].vehicle_make == "Hino"
        assert result[1].vehicle_make is None
