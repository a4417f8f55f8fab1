"""Exception hierarchy shared by all planner subpackages."""


class PlannerError(Exception):
    """Base class for planner errors.

    ``errors`` carries every message collected before the error was raised,
    so a caller can report all of them instead of just the first.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors: list[str] = list(errors) if errors else [message]
