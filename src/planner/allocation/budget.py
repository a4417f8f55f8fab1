"""
Project budget rules.

Budget = ``project.estimated_hours``; allocation = sum of
``phase.time_allocation_hours`` over every phase that is not a recurring
template.  Allocations above the budget are an error; utilization above the
configured threshold (90 % by default) up to 100 % is a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np

from planner.config import DEFAULT_CONFIG, PlannerConfig
from planner.logging_config import get_logger
from planner.validation import ValidationResult, format_hours
from .models import Phase, Project

logger = get_logger("allocation.budget")

SINGLE_PHASE_DOMINANCE = 0.5


@dataclass(frozen=True)
class BudgetAnalysis:
    total_allocated: float
    project_budget: float
    remaining: float
    overage: float
    utilization_percentage: float
    is_over_budget: bool
    average_phase_allocation: float = 0.0
    phase_count: int = 0
    recommendations: tuple[str, ...] = field(default_factory=tuple)


def budgeted_phases(phases: Iterable[Phase], exclude_phase_id: Optional[str] = None) -> list[Phase]:
    return [
        p for p in phases
        if not p.is_template and (exclude_phase_id is None or p.id != exclude_phase_id)
    ]


def total_allocation(phases: Iterable[Phase]) -> float:
    return float(sum(p.time_allocation_hours for p in budgeted_phases(phases)))


def utilization(total: float, budget: float) -> float:
    if budget <= 0:
        return 0.0
    return total / budget * 100.0


def analyze_budget(
    project: Project,
    phases: Sequence[Phase],
    config: PlannerConfig = DEFAULT_CONFIG,
) -> BudgetAnalysis:
    counted = budgeted_phases(phases)
    budget = float(project.estimated_hours)
    allocations = np.array([p.time_allocation_hours for p in counted], dtype=float)
    total = float(allocations.sum())

    analysis = BudgetAnalysis(
        total_allocated=total,
        project_budget=budget,
        remaining=budget - total,
        overage=max(0.0, total - budget),
        utilization_percentage=utilization(total, budget),
        is_over_budget=total > budget,
        average_phase_allocation=float(allocations.mean()) if allocations.size else 0.0,
        phase_count=len(counted),
        recommendations=tuple(_recommendations(
            allocations, budget, config.high_utilization_threshold * 100.0)),
    )
    logger.debug("budget_analyzed", extra={
        "project_id": project.id,
        "total_allocated": total,
        "project_budget": budget,
        "is_over_budget": analysis.is_over_budget,
    })
    return analysis


def _recommendations(allocations: np.ndarray, budget: float, threshold: float) -> list[str]:
    out: list[str] = []
    total = float(allocations.sum())
    util = utilization(total, budget)

    if total > budget:
        out.append(
            f"Budget exceeded by {total - budget:.1f}h. "
            "Consider reducing phase allocations or increasing project budget."
        )
    elif util >= threshold:
        out.append(
            f"Budget utilization is {util:.1f}%. Consider leaving buffer for unexpected work."
        )

    if allocations.size and budget - total > budget * 0.3:
        out.append(
            f"{budget - total:.1f}h unallocated. "
            "Consider distributing remaining budget to phases or reducing project scope."
        )
    if not allocations.size and budget > 0:
        out.append(f"No phases defined. Create phases to allocate the {format_hours(budget)}h budget.")

    if allocations.size > 1 and allocations.max() > budget * SINGLE_PHASE_DOMINANCE:
        out.append("One phase uses over 50% of budget. Consider breaking down into smaller phases.")

    if allocations.size >= 3:
        avg = float(allocations.mean())
        if avg > 0 and float(allocations.std()) > avg * 0.5:
            out.append(
                "Phase allocations vary significantly. "
                "Consider more balanced distribution for predictable workflow."
            )
    return out


def validate_budget(
    project: Project,
    phases: Sequence[Phase],
    config: PlannerConfig = DEFAULT_CONFIG,
) -> ValidationResult:
    analysis = analyze_budget(project, phases, config)
    errors: list[str] = []
    warnings: list[str] = []

    total = format_hours(analysis.total_allocated)
    budget = format_hours(analysis.project_budget)
    threshold = config.high_utilization_threshold * 100.0

    if analysis.is_over_budget:
        errors.append(
            f"Phase allocations ({total}h) exceed project budget ({budget}h) "
            f"by {format_hours(analysis.overage)}h"
        )
        logger.warning("budget_exceeded", extra={
            "project_id": project.id,
            "overage": analysis.overage,
        })
    elif analysis.utilization_percentage > threshold:
        warnings.append(
            f"Phase allocations ({total}h) use "
            f"{analysis.utilization_percentage:.1f}% of project budget ({budget}h)"
        )
    return ValidationResult.of(errors, warnings)


def validate_phase_against_budget(
    project: Project,
    phases: Sequence[Phase],
    hours: float,
    exclude_phase_id: Optional[str] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
) -> ValidationResult:
    """Check whether adding (or updating, via ``exclude_phase_id``) a phase fits."""
    errors: list[str] = []
    warnings: list[str] = []

    if hours < 0:
        errors.append("Phase time allocation cannot be negative")
    elif hours == 0:
        warnings.append("Phase has 0h allocated; work will not be distributed until hours are set")

    budget = float(project.estimated_hours)
    current = float(sum(p.time_allocation_hours for p in budgeted_phases(phases, exclude_phase_id)))
    projected = current + hours

    if projected > budget:
        errors.append(
            "Adding this phase would exceed project budget. "
            f"Current allocation: {format_hours(current)}h, "
            f"New phase: {format_hours(hours)}h, "
            f"Project budget: {format_hours(budget)}h"
        )
    elif budget > 0 and projected / budget > config.high_utilization_threshold:
        warnings.append(
            f"Adding this phase will use {projected / budget * 100:.1f}% of project budget"
        )
    return ValidationResult.of(errors, warnings)
