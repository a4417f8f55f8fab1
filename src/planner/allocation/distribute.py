"""
Per-day hour allocation.

Two modes, chosen by whether a project has milestones:

* milestones: each milestone's hours are spread evenly over the calendar
  days from the day after the previous milestone (project start for the
  first) through its own due date.
* no milestones: every working day inside the project span receives
  ``estimated_hours / working_days`` (the auto-estimate).

Hours planned through calendar events on a day always take precedence over
either estimate.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from planner.cache import CalculationCache
from planner.calendar import WorkingCalendar
from planner.config import DEFAULT_CONFIG, PlannerConfig
from planner.logging_config import get_logger
from planner.validation import as_date
from ._exceptions import AllocationError
from .envelope import effective_end
from .models import AllocationType, CalendarEvent, DayAllocation, EventCategory, Phase, Project
from .recurring import expand_templates

logger = get_logger("allocation.distribute")


def _sorted_milestones(milestones: Iterable[Phase]) -> list[tuple[date, Phase]]:
    """``(due, milestone)`` pairs in due-date order; undated milestones are dropped."""
    pairs = [(m.last_date, m) for m in milestones if not m.is_template]
    dated = [(due, m) for due, m in pairs if due is not None]
    return sorted(dated, key=lambda pair: (pair[0], pair[1].order))


def distribute(
    project: Project,
    milestones: Sequence[Phase],
    calendar: Optional[WorkingCalendar] = None,
) -> dict[date, DayAllocation]:
    """
    Spread each milestone's hours over its calendar-day span.

    The entry for each due date carries the milestone as a back-reference.
    ``calendar`` only feeds the ``is_working_day`` flag of the entries.
    """
    start = as_date(project.start_date)
    if start is None:
        raise AllocationError(f"Project {project.id} has no valid start date.")

    hours: dict[date, float] = defaultdict(float)
    owners: dict[date, Phase] = {}
    span_start = start

    for due, milestone in _sorted_milestones(milestones):
        days_in_span = max(1, (due - span_start).days + 1)
        per_day = milestone.time_allocation_hours / days_in_span
        first = due - timedelta(days=days_in_span - 1)
        for k in range(days_in_span):
            hours[first + timedelta(days=k)] += per_day
        # Same-day milestones: the first in (date, order) keeps the reference.
        owners.setdefault(due, milestone)
        span_start = max(span_start, due + timedelta(days=1))

    result = {
        d: DayAllocation(
            date=d,
            hours=h,
            type=AllocationType.MILESTONE,
            is_working_day=calendar.is_working_day(d) if calendar is not None else True,
            milestone=owners.get(d),
        )
        for d, h in sorted(hours.items())
    }
    logger.debug("milestones_distributed", extra={
        "project_id": project.id,
        "milestones": len(owners),
        "days": len(result),
    })
    return result


def planned_hours(project: Project, day: date, events: Iterable[CalendarEvent]) -> float:
    return sum(
        e.hours_on(day) for e in events
        if e.project_id == project.id and e.category is EventCategory.EVENT
    )


def auto_estimate_hours(
    project: Project,
    calendar: WorkingCalendar,
    today: Optional[date] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
) -> float:
    """Hours per working day when the budget is spread over the whole span."""
    working = calendar.count_working_days(project.start_date, effective_end(project, today, config))
    if working == 0:
        return 0.0
    return project.estimated_hours / working


def estimate_day(
    project: Project,
    day: date,
    calendar: WorkingCalendar,
    events: Iterable[CalendarEvent] = (),
    today: Optional[date] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
) -> DayAllocation:
    """Allocation for ``day`` of a project without milestones."""
    d = as_date(day)
    if d is None:
        raise AllocationError(f"Expected a date; got {day!r}.")

    if not calendar.is_working_day(d):
        return DayAllocation(d, 0.0, AllocationType.NONE, is_working_day=False)

    planned = planned_hours(project, d, events)
    if planned > 0:
        return DayAllocation(d, planned, AllocationType.PLANNED)

    end = effective_end(project, today, config)
    if as_date(project.start_date) <= d <= end:
        hours = auto_estimate_hours(project, calendar, today, config)
        return DayAllocation(d, hours, AllocationType.AUTO_ESTIMATE)
    return DayAllocation(d, 0.0, AllocationType.NONE)


def project_allocation_map(
    project: Project,
    phases: Sequence[Phase],
    window_start: date,
    window_end: date,
    calendar: WorkingCalendar,
    events: Sequence[CalendarEvent] = (),
    today: Optional[date] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
    cache: Optional[CalculationCache] = None,
) -> dict[date, DayAllocation]:
    """Allocation for every date of the window, ready for rendering."""
    today = today or date.today()
    if cache is None:
        return _allocation_map(project, phases, window_start, window_end,
                               calendar, events, today, config)
    key = (
        "project_allocation_map", project, tuple(phases), window_start, window_end,
        calendar.key, tuple(events), today, config,
    )
    return dict(cache.get_or_compute(key, lambda: _allocation_map(
        project, phases, window_start, window_end, calendar, events, today, config,
    )))


def _allocation_map(
    project: Project,
    phases: Sequence[Phase],
    window_start: date,
    window_end: date,
    calendar: WorkingCalendar,
    events: Sequence[CalendarEvent],
    today: date,
    config: PlannerConfig,
) -> dict[date, DayAllocation]:
    project_phases = [p for p in phases if p.project_id == project.id]
    milestones = expand_templates(project, project_phases, today, config)
    distribution = distribute(project, milestones, calendar) if milestones else None
    per_day = None if milestones else auto_estimate_hours(project, calendar, today, config)
    start = as_date(project.start_date)
    end = effective_end(project, today, config)

    result: dict[date, DayAllocation] = {}
    d = window_start
    while d <= window_end:
        working = calendar.is_working_day(d)
        planned = planned_hours(project, d, events)
        if distribution is not None:
            entry = distribution.get(d)
            if planned > 0:
                result[d] = DayAllocation(d, planned, AllocationType.PLANNED, working,
                                          entry.milestone if entry else None)
            elif entry is not None:
                result[d] = entry
            else:
                result[d] = DayAllocation(d, 0.0, AllocationType.NONE, working)
        elif not working:
            result[d] = DayAllocation(d, 0.0, AllocationType.NONE, False)
        elif planned > 0:
            result[d] = DayAllocation(d, planned, AllocationType.PLANNED)
        elif start <= d <= end:
            result[d] = DayAllocation(d, per_day or 0.0, AllocationType.AUTO_ESTIMATE)
        else:
            result[d] = DayAllocation(d, 0.0, AllocationType.NONE)
        d += timedelta(days=1)
    return result
