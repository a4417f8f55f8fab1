"""
planner.calendar
~~~~~~~~~~~~~~~~

Working-days arithmetic.  A WeeklySchedule gives each weekday a set of work
slots; holidays override the schedule with zero capacity for every date in
their (inclusive) range.

Basic usage::

    from datetime import date
    from planner.calendar import Holiday, WeeklySchedule, WorkingCalendar

    schedule = WeeklySchedule.uniform("09:00", "17:00")     # Mon–Fri, 8h
    cal = WorkingCalendar(schedule, [Holiday(date(2024, 1, 1), date(2024, 1, 1), "New Year")])
    cal.is_working_day(date(2024, 1, 1))                     # → False
    cal.count_working_days(date(2024, 1, 1), date(2024, 1, 31))  # → 22

The module-level functions take the schedule and holidays on every call and
are pure::

    count_working_days(start, end, schedule, holidays)

Public API
----------
WorkingCalendar   Compiled calendar used by the allocator.
WeeklySchedule    Weekday → work slots.
WorkSlot          One block of work time within a day.
Holiday           Inclusive zero-capacity date range.
CalendarError     Base exception for all calendar-related errors.
"""

from __future__ import annotations

from planner.calendar._exceptions import CalendarError
from planner.calendar.calendar import (
    WorkingCalendar,
    count_working_days,
    daily_capacity_hours,
    enumerate_working_days,
    is_working_day,
)
from planner.calendar.schedule import (
    WEEKDAYS,
    Holiday,
    WeeklySchedule,
    WorkSlot,
    validate_holiday,
    validate_schedule,
    validate_work_slot,
    weekday_name,
)

__all__ = [
    "WorkingCalendar",
    "WeeklySchedule",
    "WorkSlot",
    "Holiday",
    "CalendarError",
    "WEEKDAYS",
    "is_working_day",
    "daily_capacity_hours",
    "enumerate_working_days",
    "count_working_days",
    "validate_holiday",
    "validate_schedule",
    "validate_work_slot",
    "weekday_name",
]
