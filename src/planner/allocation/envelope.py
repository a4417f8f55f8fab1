"""
Project date envelope.

Phases may widen a project's recorded span (:func:`synchronize_project_with_phases`)
but are never clipped to it; a phase outside the span is reported by
:func:`validate_phases_within_project` for the caller to resolve.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from planner.config import DEFAULT_CONFIG, PlannerConfig
from planner.validation import ValidationResult, as_date
from ._exceptions import AllocationError
from .models import Phase, Project


@dataclass(frozen=True)
class EnvelopeProposal:
    """New project dates that encompass every phase.  ``end_date`` is None for
    continuous projects."""

    start_date: date
    end_date: Optional[date]
    reason: str


def effective_end(
    project: Project,
    today: Optional[date] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
) -> date:
    """Project end, or ``max(start, today) + horizon`` for continuous projects."""
    start = as_date(project.start_date)
    if start is None:
        raise AllocationError(f"Project {project.id} has no valid start date.")
    end = as_date(project.end_date)
    if not project.continuous and end is not None:
        return end
    anchor = max(start, today or date.today())
    return anchor + timedelta(days=config.continuous_horizon_days)


def _label(phase: Phase) -> str:
    return f"'{phase.name}'" if phase.name else phase.id


def synchronize_project_with_phases(
    project: Project, phases: Sequence[Phase]
) -> Optional[EnvelopeProposal]:
    """Proposed widened project dates, or None when every phase already fits."""
    dated = [p for p in phases if not p.is_template and p.first_date and p.last_date]
    start = as_date(project.start_date)
    if not dated or start is None:
        return None

    new_start = min(start, min(p.first_date for p in dated))  # type: ignore[type-var]
    end = as_date(project.end_date)
    if project.continuous or end is None:
        # Open-ended: only the lower bound can move.
        if new_start == start:
            return None
        return EnvelopeProposal(new_start, None, "Project start moved to earliest phase start")

    new_end = max(end, max(p.last_date for p in dated))  # type: ignore[type-var]
    if (new_start, new_end) == (start, end):
        return None
    return EnvelopeProposal(new_start, new_end, "Project dates expanded to encompass all phases")


def validate_milestone_date(project: Project, due_date: date) -> ValidationResult:
    """
    A milestone must fall inside the project span.  For continuous projects
    only the start is a bound.
    """
    due = as_date(due_date)
    if due is None:
        return ValidationResult.of(["Invalid milestone date"])

    errors: list[str] = []
    start = as_date(project.start_date)
    if start is not None and due < start:
        errors.append(f"Milestone date {due} is before project start ({start})")
    end = as_date(project.end_date)
    if not project.continuous and end is not None and due > end:
        errors.append(f"Milestone date {due} is after project end ({end})")
    return ValidationResult.of(errors)


def validate_phases_within_project(project: Project, phases: Sequence[Phase]) -> ValidationResult:
    errors: list[str] = []
    start = as_date(project.start_date)
    end = as_date(project.end_date)

    for phase in phases:
        if phase.is_template:
            continue
        first, last = phase.first_date, phase.last_date
        if first is None or last is None:
            errors.append(f"Phase {_label(phase)} has no valid dates")
            continue
        if start is not None and first < start:
            errors.append(
                f"Phase {_label(phase)} starts ({first}) before project start ({start})"
            )
        if not project.continuous and end is not None and last > end:
            errors.append(
                f"Phase {_label(phase)} ends ({last}) after project end ({end})"
            )
    return ValidationResult.of(errors)
