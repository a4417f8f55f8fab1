from planner.errors import PlannerError


class CalendarError(PlannerError):
    """Invalid schedule, work slot, holiday or calendar query."""
