"""
planner.validation
~~~~~~~~~~~~~~~~~~

Aggregated validation results.  Validators never raise for bad input; they
collect every violation so a form can display all of them at once::

    result = validate_project(project).merge(validate_budget(project, phases))
    if not result.is_valid:
        show(result.errors)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def of(cls, errors: list[str], warnings: Optional[list[str]] = None) -> "ValidationResult":
        return cls(tuple(errors), tuple(warnings or ()))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(self.errors + other.errors, self.warnings + other.warnings)

    def as_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def as_date(value: Any) -> Optional[date]:
    """Normalize ``value`` to a midnight date, or None if it is not a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def format_hours(hours: float) -> str:
    # 45.0 -> "45", 37.5 -> "37.5"
    return f"{round(hours, 2):g}"
