"""Exceptions raised by the maintenance engine."""


class PlanConfigError(ValueError):
    """A maintenance plan carries an invalid recurrence rule or fields."""


class MonthEditError(ValueError):
    """A month status edit or service log was rejected before any write."""
