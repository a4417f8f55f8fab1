from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union

from planner.validation import ValidationResult, as_date

DAY_NAMES: tuple[str, ...] = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)
ORDINAL_NAMES: tuple[str, ...] = ("1st", "2nd", "3rd", "4th", "second-to-last", "last")


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class MonthlyPattern(str, Enum):
    BY_DATE = "by_date"
    BY_WEEKDAY_ORDINAL = "by_weekday_ordinal"


class EndKind(str, Enum):
    NEVER = "never"
    ON_DATE = "on_date"
    AFTER_COUNT = "after_count"


@dataclass(frozen=True)
class EndCondition:
    """When a series stops: never, on a date (inclusive) or after N occurrences."""

    kind: EndKind = EndKind.NEVER
    until: Optional[date] = None
    count: Optional[int] = None

    @classmethod
    def never(cls) -> "EndCondition":
        return cls(EndKind.NEVER)

    @classmethod
    def on_date(cls, until: date) -> "EndCondition":
        return cls(EndKind.ON_DATE, until=as_date(until) or until)

    @classmethod
    def after_count(cls, count: int) -> "EndCondition":
        return cls(EndKind.AFTER_COUNT, count=count)


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class RecurrenceRule:
    """
    A repeating calendar pattern.

    Day-of-week fields use 0 = Sunday ... 6 = Saturday.  ``monthly_week_of_month``
    is 1-4 for the 1st..4th weekday of the month, 5 for the second-to-last and
    6 for the last.

    Rules can be built with invalid values; :func:`validate_rule` reports every
    problem at once and :func:`planner.recurrence.expand` refuses invalid rules.
    """

    type: Union[RecurrenceType, str]
    interval: int = 1
    weekly_day_of_week: Optional[int] = None
    monthly_pattern: Optional[Union[MonthlyPattern, str]] = None
    monthly_date: Optional[int] = None
    monthly_week_of_month: Optional[int] = None
    monthly_day_of_week: Optional[int] = None
    end: EndCondition = field(default_factory=EndCondition.never)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", _coerce(RecurrenceType, self.type))
        if self.monthly_pattern is not None:
            object.__setattr__(
                self, "monthly_pattern", _coerce(MonthlyPattern, self.monthly_pattern)
            )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_rule(rule: RecurrenceRule, anchor_date: Optional[date] = None) -> ValidationResult:
    """Collect every structural problem with ``rule``.

    With ``anchor_date`` the on-date end condition is also checked to fall
    strictly after the anchor.
    """
    errors: list[str] = []

    if not isinstance(rule.type, RecurrenceType):
        errors.append(
            f"Invalid recurrence type: {rule.type}. Must be daily, weekly, monthly, or yearly"
        )

    if not _is_int(rule.interval) or rule.interval < 1:
        errors.append("Recurrence interval must be at least 1")

    if rule.type is RecurrenceType.WEEKLY and rule.weekly_day_of_week is not None:
        if not _is_int(rule.weekly_day_of_week) or not 0 <= rule.weekly_day_of_week <= 6:
            errors.append("Weekly day of week must be between 0 (Sunday) and 6 (Saturday)")

    if rule.type is RecurrenceType.MONTHLY:
        if rule.monthly_pattern is None:
            errors.append(
                "Monthly recurrence must specify pattern (by_date or by_weekday_ordinal)"
            )
        elif rule.monthly_pattern is MonthlyPattern.BY_DATE:
            if rule.monthly_date is None:
                errors.append("Monthly date pattern must specify date (1-31)")
            elif not _is_int(rule.monthly_date) or not 1 <= rule.monthly_date <= 31:
                errors.append("Monthly date must be between 1 and 31")
        elif rule.monthly_pattern is MonthlyPattern.BY_WEEKDAY_ORDINAL:
            if rule.monthly_week_of_month is None or rule.monthly_day_of_week is None:
                errors.append(
                    "Monthly weekday pattern must specify week of month and day of week"
                )
            else:
                if (not _is_int(rule.monthly_week_of_month)
                        or not 1 <= rule.monthly_week_of_month <= 6):
                    errors.append("Monthly week of month must be between 1 and 6")
                if not _is_int(rule.monthly_day_of_week) or not 0 <= rule.monthly_day_of_week <= 6:
                    errors.append(
                        "Monthly day of week must be between 0 (Sunday) and 6 (Saturday)"
                    )
        else:
            errors.append(f"Invalid monthly pattern: {rule.monthly_pattern}")

    end = rule.end
    if not isinstance(end, EndCondition) or not isinstance(end.kind, EndKind):
        errors.append("Recurrence end condition must be never, on_date or after_count")
    elif end.kind is EndKind.ON_DATE:
        until = as_date(end.until)
        if until is None:
            errors.append("Recurrence end date is invalid")
        elif anchor_date is not None and until <= anchor_date:
            errors.append("Recurrence end date must be after the start date")
    elif end.kind is EndKind.AFTER_COUNT:
        if not _is_int(end.count) or end.count < 1:
            errors.append("Recurrence count must be at least 1")

    return ValidationResult.of(errors)


def _plural(unit: str, interval: int) -> str:
    return f"Every {unit}" if interval == 1 else f"Every {interval} {unit}s"


def describe(rule: RecurrenceRule) -> str:
    """Human-readable text, e.g. ``"Every 2 weeks on Monday"``."""
    n = rule.interval
    if rule.type is RecurrenceType.DAILY:
        text = _plural("day", n)
    elif rule.type is RecurrenceType.WEEKLY:
        text = _plural("week", n)
        if rule.weekly_day_of_week is not None:
            text += f" on {DAY_NAMES[rule.weekly_day_of_week]}"
    elif rule.type is RecurrenceType.MONTHLY:
        text = _plural("month", n)
        if rule.monthly_pattern is MonthlyPattern.BY_DATE and rule.monthly_date:
            text += f" on the {rule.monthly_date}{_ordinal_suffix(rule.monthly_date)}"
        elif (rule.monthly_pattern is MonthlyPattern.BY_WEEKDAY_ORDINAL
              and rule.monthly_week_of_month is not None
              and rule.monthly_day_of_week is not None):
            text += (
                f" on the {ORDINAL_NAMES[rule.monthly_week_of_month - 1]}"
                f" {DAY_NAMES[rule.monthly_day_of_week]}"
            )
    elif rule.type is RecurrenceType.YEARLY:
        text = _plural("year", n)
    else:
        return "Unknown recurrence pattern"

    if rule.end.kind is EndKind.AFTER_COUNT and rule.end.count:
        text += f", {rule.end.count} time{'s' if rule.end.count != 1 else ''}"
    elif rule.end.kind is EndKind.ON_DATE and rule.end.until is not None:
        text += f", until {rule.end.until.isoformat()}"
    return text


def _ordinal_suffix(num: int) -> str:
    if num % 100 in (11, 12, 13):
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(num % 10, "th")
