"""Status enums for plan urgency and annual grid months."""

from enum import Enum


class PlanStatus(Enum):
    """Traffic-light status of a maintenance plan."""

    OK = "ok"
    DUE = "due"
    OVERDUE = "overdue"

    @property
    def rank(self) -> int:
        """Sort order. Lower = more urgent."""
        return _PLAN_STATUS_RANK[self]


_PLAN_STATUS_RANK = {
    PlanStatus.OVERDUE: 0,
    PlanStatus.DUE: 1,
    PlanStatus.OK: 2,
}


class MonthStatus(Enum):
    """State of one month cell in the annual PM grid."""

    NONE = "none"
    PLANNED = "planned"
    COMPLETED = "completed"
    COMPLETED_UNPLANNED = "completed_unplanned"  # done in a month that wasn't due

    @property
    def is_completed(self) -> bool:
        return self in (MonthStatus.COMPLETED, MonthStatus.COMPLETED_UNPLANNED)
