"""
planner.allocation
~~~~~~~~~~~~~~~~~~

Budgets, project envelopes and per-day hour allocation.

Basic usage::

    from datetime import date
    from planner.allocation import Phase, Project, distribute, validate_budget

    project = Project("p1", date(2024, 1, 1), date(2024, 1, 31), estimated_hours=40)
    phases = [Phase("m1", "p1", 25, due_date=date(2024, 1, 10)),
              Phase("m2", "p1", 20, due_date=date(2024, 1, 20))]
    validate_budget(project, phases).errors
    # → ('Phase allocations (45h) exceed project budget (40h) by 5h',)

    distribute(project, phases)[date(2024, 1, 5)].hours      # → 2.5

Public API
----------
Project, Phase, CalendarEvent    Input entities.
DayAllocation, AllocationType    Allocation for one date.
DateRange, DateAdjustment        Inclusive date ranges and proposed moves.
distribute                       Milestone hours over their spans.
project_allocation_map           Allocation for every date of a window.
validate_budget                  Budget error / high-utilization warning.
synchronize_project_with_phases  Widen project dates to fit phases.
generate_instances               Instances of a recurring template.
find_nearest_available_slot      Conflict-free placement in a lane.
AllocationError                  Base exception for allocation errors.
"""

from __future__ import annotations

from planner.allocation._exceptions import AllocationError
from planner.allocation.budget import (
    BudgetAnalysis,
    analyze_budget,
    total_allocation,
    utilization,
    validate_budget,
    validate_phase_against_budget,
)
from planner.allocation.distribute import (
    auto_estimate_hours,
    distribute,
    estimate_day,
    planned_hours,
    project_allocation_map,
)
from planner.allocation.envelope import (
    EnvelopeProposal,
    effective_end,
    synchronize_project_with_phases,
    validate_milestone_date,
    validate_phases_within_project,
)
from planner.allocation.models import (
    AllocationType,
    CalendarEvent,
    DateAdjustment,
    DateRange,
    DayAllocation,
    EventCategory,
    Phase,
    Project,
    validate_calendar_event,
    validate_phase,
    validate_project,
)
from planner.allocation.overlap import (
    Conflict,
    Direction,
    OverlapType,
    ResolutionStrategy,
    adjust_project_dates_for_drag,
    detect_conflicts,
    find_nearest_available_slot,
    lane_ranges,
    overlaps,
    resolve_drag_conflict,
)
from planner.allocation.recurring import (
    TemplatePlan,
    delete_template,
    expand_templates,
    generate_instances,
    instance_id,
    plan_recurring_template,
    validate_phase_mode,
)

__all__ = [
    "AllocationError",
    "AllocationType",
    "BudgetAnalysis",
    "CalendarEvent",
    "Conflict",
    "DateAdjustment",
    "DateRange",
    "DayAllocation",
    "Direction",
    "EnvelopeProposal",
    "EventCategory",
    "OverlapType",
    "Phase",
    "Project",
    "ResolutionStrategy",
    "TemplatePlan",
    "adjust_project_dates_for_drag",
    "analyze_budget",
    "auto_estimate_hours",
    "delete_template",
    "detect_conflicts",
    "distribute",
    "effective_end",
    "estimate_day",
    "expand_templates",
    "find_nearest_available_slot",
    "generate_instances",
    "instance_id",
    "lane_ranges",
    "overlaps",
    "plan_recurring_template",
    "planned_hours",
    "project_allocation_map",
    "resolve_drag_conflict",
    "synchronize_project_with_phases",
    "total_allocation",
    "utilization",
    "validate_budget",
    "validate_calendar_event",
    "validate_milestone_date",
    "validate_phase",
    "validate_phase_against_budget",
    "validate_phases_within_project",
    "validate_phase_mode",
    "validate_project",
]
