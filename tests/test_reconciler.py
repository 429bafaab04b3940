#!/usr/bin/env python3
"""Tests for merging calculated months with manual overrides."""
import pytest

from fleetpm import (
    AnnualPlanIndex,
    AnnualPlanKey,
    AnnualPMPlan,
    HistoryLog,
    MonthEditError,
    MonthStatus,
    apply_edit,
    effective_status,
)
from fleetpm.reconciler import month_statuses, show_completed_dot, show_plan_dot

CALCULATED = frozenset({3, 6, 9})
KEY = AnnualPlanKey("70-1234", "MP-1", 2024)


class TestEffectiveStatus:
    """Tests for effective_status precedence."""

    @pytest.mark.parametrize("status", list(MonthStatus))
    @pytest.mark.parametrize("is_calculated", [True, False])
    def test_manual_value_wins(self, status, is_calculated):
        assert effective_status(status, is_calculated) is status

    def test_no_override_calculated_month_is_planned(self):
        assert effective_status(None, True) is MonthStatus.PLANNED

    def test_no_override_other_month_is_none(self):
        assert effective_status(None, False) is MonthStatus.NONE

    def test_explicit_none_suppresses_calculated_month(self):
        assert effective_status(MonthStatus.NONE, True) is MonthStatus.NONE

    def test_idempotent(self):
        assert effective_status(None, True) is effective_status(None, True)
        assert effective_status(MonthStatus.NONE, True) is effective_status(
            MonthStatus.NONE, True
        )


class TestMonthStatuses:
    """Tests for month_statuses."""

    def test_twelve_months(self):
        statuses = month_statuses({6: MonthStatus.COMPLETED, 9: MonthStatus.NONE}, CALCULATED)
        assert len(statuses) == 12
        assert statuses[3] is MonthStatus.PLANNED
        assert statuses[6] is MonthStatus.COMPLETED
        assert statuses[9] is MonthStatus.NONE
        assert statuses[0] is MonthStatus.NONE


class TestDots:
    """Tests for the two display slots of a grid cell."""

    def test_plan_dot(self):
        assert show_plan_dot(MonthStatus.PLANNED)
        assert show_plan_dot(MonthStatus.COMPLETED)
        assert not show_plan_dot(MonthStatus.COMPLETED_UNPLANNED)
        assert not show_plan_dot(MonthStatus.NONE)

    def test_completed_dot(self):
        assert show_completed_dot(MonthStatus.COMPLETED)
        assert show_completed_dot(MonthStatus.COMPLETED_UNPLANNED)
        assert not show_completed_dot(MonthStatus.PLANNED)
        assert not show_completed_dot(MonthStatus.NONE)


class TestApplyEdit:
    """Tests for the month edit transaction."""

    @pytest.fixture
    def plan(self, make_plan):
        return make_plan()

    @pytest.fixture
    def log(self):
        return HistoryLog(
            service_date="2024-06-20", mileage=131000, technician_id="T-01", notes="ok"
        )

    def test_none_on_calculated_month_is_stored_explicitly(self, plan):
        overrides = AnnualPlanIndex()
        edit = apply_edit(overrides, plan, 2024, 6, MonthStatus.NONE, CALCULATED)

        assert edit.annual_plan.months == {6: MonthStatus.NONE}
        assert overrides.get(KEY).months == {6: MonthStatus.NONE}
        assert edit.history_entry is None
        assert (
            effective_status(overrides.manual_months(KEY).get(6), 6 in CALCULATED)
            is MonthStatus.NONE
        )

    def test_none_on_other_month_without_record_creates_nothing(self, plan):
        overrides = AnnualPlanIndex()
        edit = apply_edit(overrides, plan, 2024, 5, MonthStatus.NONE, CALCULATED)

        assert edit.annual_plan is None
        assert len(overrides) == 0

    def test_none_on_other_month_removes_override(self, plan):
        overrides = AnnualPlanIndex(
            [AnnualPMPlan("x", "70-1234", "MP-1", 2024, {5: "planned", 6: "completed"})]
        )
        edit = apply_edit(overrides, plan, 2024, 5, MonthStatus.NONE, CALCULATED)

        assert 5 not in edit.annual_plan.months
        assert overrides.get(KEY).months == {6: MonthStatus.COMPLETED}

    def test_record_created_lazily_with_default_id(self, plan):
        overrides = AnnualPlanIndex()
        edit = apply_edit(overrides, plan, 2024, 1, MonthStatus.PLANNED, CALCULATED)

        assert edit.annual_plan.id == "70-1234-MP-1-2024"
        assert edit.annual_plan.key == KEY
        assert overrides.get(KEY).months == {1: MonthStatus.PLANNED}

    def test_existing_record_keeps_id_and_other_months(self, plan):
        original = AnnualPMPlan("AP-9", "70-1234", "MP-1", 2024, {3: "completed"})
        overrides = AnnualPlanIndex([original])
        edit = apply_edit(overrides, plan, 2024, 9, MonthStatus.NONE, CALCULATED)

        assert edit.annual_plan.id == "AP-9"
        assert edit.annual_plan.months == {
            3: MonthStatus.COMPLETED,
            9: MonthStatus.NONE,
        }
        # The stored record is replaced, not mutated
        assert original.months == {3: MonthStatus.COMPLETED}

    def test_completed_without_log_is_rejected(self, plan):
        overrides = AnnualPlanIndex()
        with pytest.raises(MonthEditError):
            apply_edit(overrides, plan, 2024, 5, MonthStatus.COMPLETED, CALCULATED)
        assert len(overrides) == 0

    def test_completed_without_service_date_is_rejected(self, plan):
        existing = AnnualPMPlan("AP-1", "70-1234", "MP-1", 2024, {3: "planned"})
        overrides = AnnualPlanIndex([existing])
        log = HistoryLog(service_date=None, mileage=131000)

        with pytest.raises(MonthEditError, match="Service date and mileage"):
            apply_edit(overrides, plan, 2024, 5, MonthStatus.COMPLETED, CALCULATED, log)
        assert overrides.get(KEY) is existing
        assert overrides.get(KEY).months == {3: MonthStatus.PLANNED}

    def test_completed_unplanned_without_mileage_is_rejected(self, plan):
        overrides = AnnualPlanIndex()
        log = HistoryLog(service_date="2024-06-20", mileage=None)
        with pytest.raises(MonthEditError):
            apply_edit(
                overrides, plan, 2024, 5, MonthStatus.COMPLETED_UNPLANNED, CALCULATED, log
            )
        assert len(overrides) == 0

    def test_completed_creates_history_entry(self, plan, log):
        overrides = AnnualPlanIndex()
        edit = apply_edit(
            overrides, plan, 2024, 6, MonthStatus.COMPLETED, CALCULATED, log
        )

        entry = edit.history_entry
        assert entry.id.startswith("PMH-")
        assert entry.maintenance_plan_id == "MP-1"
        assert entry.vehicle_license_plate == "70-1234"
        assert entry.plan_name == "engine oil and filter"
        assert entry.service_date == "2024-06-20"
        assert entry.mileage == 131000
        assert entry.technician_id == "T-01"
        assert entry.notes == "ok"
        assert overrides.get(KEY).months == {6: MonthStatus.COMPLETED}

    def test_completed_unplanned_creates_history_entry(self, plan, log):
        edit = apply_edit(
            AnnualPlanIndex(),
            plan,
            2024,
            5,
            MonthStatus.COMPLETED_UNPLANNED,
            CALCULATED,
            log,
        )
        assert edit.history_entry is not None
        assert edit.annual_plan.months == {5: MonthStatus.COMPLETED_UNPLANNED}

    def test_planned_ignores_history_log(self, plan, log):
        edit = apply_edit(
            AnnualPlanIndex(), plan, 2024, 5, MonthStatus.PLANNED, CALCULATED, log
        )
        assert edit.history_entry is None

    def test_manual_completed_always_wins(self, plan, log):
        overrides = AnnualPlanIndex()
        apply_edit(overrides, plan, 2024, 5, MonthStatus.COMPLETED, CALCULATED, log)
        manual = overrides.manual_months(KEY).get(5)

        assert effective_status(manual, True) is MonthStatus.COMPLETED
        assert effective_status(manual, False) is MonthStatus.COMPLETED

    @pytest.mark.parametrize("month_index", [-1, 12])
    def test_month_out_of_range(self, plan, month_index):
        overrides = AnnualPlanIndex()
        with pytest.raises(MonthEditError):
            apply_edit(
                overrides, plan, 2024, month_index, MonthStatus.PLANNED, CALCULATED
            )
        assert len(overrides) == 0

    def test_other_years_untouched(self, plan):
        other = AnnualPMPlan("AP-2023", "70-1234", "MP-1", 2023, {3: "completed"})
        overrides = AnnualPlanIndex([other])
        apply_edit(overrides, plan, 2024, 1, MonthStatus.PLANNED, CALCULATED)

        assert len(overrides) == 2
        assert overrides.get(other.key) is other
