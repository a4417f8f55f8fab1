from planner.errors import PlannerError


class AllocationError(PlannerError):
    """A project or phase that cannot be allocated (e.g. no start date)."""
