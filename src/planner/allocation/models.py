"""Value types consumed and produced by the allocator."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional

from planner.recurrence import RecurrenceRule, validate_rule
from planner.validation import ValidationResult, as_date


@dataclass(frozen=True)
class DateRange:
    """Inclusive, midnight-normalized date range."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def overlaps(self, other: "DateRange") -> bool:
        return self.start <= other.end and self.end >= other.start

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def shift(self, days: int) -> "DateRange":
        delta = timedelta(days=days)
        return DateRange(self.start + delta, self.end + delta)


@dataclass(frozen=True)
class Project:
    id: str
    start_date: date
    end_date: Optional[date] = None
    estimated_hours: float = 0.0
    continuous: bool = False
    name: str = ""
    client_id: Optional[str] = None
    group_id: Optional[str] = None
    row_id: Optional[str] = None

    @property
    def date_range(self) -> Optional[DateRange]:
        """Recorded span; None for continuous projects or missing dates."""
        if self.continuous or self.end_date is None:
            return None
        return DateRange(self.start_date, self.end_date)


@dataclass(frozen=True)
class Phase:
    """
    A milestone (single ``due_date``) or a phase (``start_date``..``end_date``).

    Recurring templates carry ``is_recurring=True`` and a ``recurrence`` rule;
    instances generated from a template point back at it with ``template_id``.
    """

    id: str
    project_id: str
    time_allocation_hours: float = 0.0
    due_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    name: str = ""
    is_recurring: bool = False
    recurrence: Optional[RecurrenceRule] = None
    order: int = 0
    template_id: Optional[str] = None

    @property
    def is_template(self) -> bool:
        return self.is_recurring

    @property
    def is_instance(self) -> bool:
        return self.template_id is not None

    @property
    def first_date(self) -> Optional[date]:
        return as_date(self.start_date) or as_date(self.due_date) or as_date(self.end_date)

    @property
    def last_date(self) -> Optional[date]:
        """The date the phase is due: end date for ranges, due date otherwise."""
        return as_date(self.end_date) or as_date(self.due_date) or as_date(self.start_date)

    def with_changes(self, **changes: Any) -> "Phase":
        return replace(self, **changes)


class EventCategory(str, Enum):
    EVENT = "event"
    HABIT = "habit"
    TASK = "task"


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    start_time: datetime
    end_time: datetime
    category: EventCategory = EventCategory.EVENT
    project_id: Optional[str] = None
    title: str = ""
    color: str = "#3b82f6"

    def hours_on(self, day: date) -> float:
        """Hours of this event falling on ``day``."""
        day_start = datetime.combine(day, time())
        day_end = day_start + timedelta(days=1)
        start = max(self.start_time, day_start)
        end = min(self.end_time, day_end)
        if end <= start:
            return 0.0
        return (end - start) / timedelta(hours=1)


class AllocationType(str, Enum):
    NONE = "none"
    PLANNED = "planned"
    AUTO_ESTIMATE = "auto-estimate"
    MILESTONE = "milestone"


@dataclass(frozen=True)
class DayAllocation:
    date: date
    hours: float
    type: AllocationType
    is_working_day: bool = True
    milestone: Optional[Phase] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "hours": self.hours,
            "isWorkingDay": self.is_working_day,
            "milestoneId": self.milestone.id if self.milestone is not None else None,
        }


@dataclass(frozen=True)
class DateAdjustment:
    """A proposed change of date range, with the reason it is proposed."""

    original: DateRange
    adjusted: DateRange
    reason: str = ""

    @property
    def was_adjusted(self) -> bool:
        return self.original != self.adjusted


# ── entity validation ────────────────────────────────────────────────────────

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def validate_project(project: Project) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    start = as_date(project.start_date)
    if start is None:
        errors.append("Project start date is required")

    hours = project.estimated_hours
    if not isinstance(hours, (int, float)) or hours != hours or hours < 0:
        errors.append("Estimated hours must be 0 or greater")
    elif hours > 10_000:
        warnings.append("Project estimated hours is very large (>10,000 hours)")

    if project.continuous:
        if project.end_date is not None:
            errors.append("Continuous projects should not have an end date")
    else:
        end = as_date(project.end_date)
        if end is None:
            errors.append("Time-limited projects must have an end date")
        elif start is not None and end < start:
            errors.append("Project end date must be after start date")

    return ValidationResult.of(errors, warnings)


def validate_phase(phase: Phase) -> ValidationResult:
    errors: list[str] = []
    for label, value in (("due", phase.due_date), ("start", phase.start_date),
                         ("end", phase.end_date)):
        if value is not None and as_date(value) is None:
            errors.append(f"Invalid phase {label} date")
    if phase.first_date is None:
        errors.append("Phase must have a due date or a start and end date")

    start, end = as_date(phase.start_date), as_date(phase.end_date)
    if start is not None and end is not None and end < start:
        errors.append("Phase end date must be after start date")

    hours = phase.time_allocation_hours
    if not isinstance(hours, (int, float)) or hours != hours or hours < 0:
        errors.append("Phase time allocation cannot be negative")

    if phase.is_recurring:
        if phase.recurrence is None:
            errors.append("Recurring phases must have recurring configuration")
        else:
            errors.extend(validate_rule(phase.recurrence).errors)
    return ValidationResult.of(errors)


def validate_calendar_event(event: CalendarEvent) -> ValidationResult:
    errors: list[str] = []
    if not isinstance(event.title, str) or not event.title.strip():
        errors.append("Event title is required")
    elif len(event.title.strip()) > 200:
        errors.append("Event title must be 200 characters or less")

    category = event.category
    if category is EventCategory.TASK:
        if event.end_time != event.start_time:
            errors.append("Tasks cannot have duration - start and end time must be the same")
    elif event.end_time <= event.start_time:
        errors.append("Event end time must be after start time")

    if event.project_id is not None and category is not EventCategory.EVENT:
        errors.append(
            f"{'Habits' if category is EventCategory.HABIT else 'Tasks'} "
            "cannot be linked to projects"
        )

    if not isinstance(event.color, str) or not _HEX_COLOR.match(event.color):
        errors.append("Event color must be a valid hex color (e.g., #FF5733)")
    return ValidationResult.of(errors)
