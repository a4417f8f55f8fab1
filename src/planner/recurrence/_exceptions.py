from planner.errors import PlannerError


class RecurrenceError(PlannerError):
    """A recurrence rule or expansion window that cannot be expanded."""
