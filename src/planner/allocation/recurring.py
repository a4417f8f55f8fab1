"""
Recurring milestone templates.

A recurring milestone is stored as one template phase (``is_recurring=True``
with a :class:`RecurrenceRule`).  Its instances are derived on demand from the
rule and the project span and are never stored on their own: editing the
template regenerates them and deleting it deletes them.

A project is either in *phases mode* (ad hoc phases) or in *recurring mode*
(exactly one template); switching to recurring mode clears the ad hoc phases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from planner.config import DEFAULT_CONFIG, PlannerConfig
from planner.logging_config import get_logger
from planner.recurrence import expand, validate_rule
from planner.validation import ValidationResult, as_date
from ._exceptions import AllocationError
from .envelope import effective_end
from .models import Phase, Project

logger = get_logger("allocation.recurring")


def instance_id(template_id: str, number: int) -> str:
    return f"{template_id}#{number}"


def generate_instances(
    template: Phase,
    project: Project,
    today: Optional[date] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
) -> list[Phase]:
    """Instances of ``template`` over the project span, capped at ``max_occurrences``.

    A stored rule that no longer fits the project (for instance an end date
    that the project start has since moved past) yields no instances.
    """
    if not template.is_template or template.recurrence is None:
        raise AllocationError(f"Phase {template.id} is not a recurring template.")

    rule_check = validate_rule(template.recurrence, as_date(project.start_date))
    if not rule_check.is_valid:
        logger.warning("recurring_template_invalid", extra={
            "template_id": template.id,
            "project_id": project.id,
            "errors": list(rule_check.errors),
        })
        return []

    window_end = effective_end(project, today, config)
    occurrences = expand(template.recurrence, project.start_date, window_end)

    instances = []
    for number, day in enumerate(occurrences, start=1):
        if number > config.max_occurrences:
            logger.warning("recurring_instances_capped", extra={
                "template_id": template.id,
                "max_occurrences": config.max_occurrences,
            })
            break
        instances.append(Phase(
            id=instance_id(template.id, number),
            project_id=template.project_id,
            time_allocation_hours=template.time_allocation_hours,
            due_date=day,
            name=f"{template.name} {number}".strip(),
            order=number,
            template_id=template.id,
        ))
    return instances


def expand_templates(
    project: Project,
    phases: Sequence[Phase],
    today: Optional[date] = None,
    config: PlannerConfig = DEFAULT_CONFIG,
) -> list[Phase]:
    """Replace every template in ``phases`` by freshly generated instances.

    Stored instances of a template are dropped in favour of the regenerated
    ones, so the template stays the only source of truth.
    """
    templates = [p for p in phases if p.is_template]
    template_ids = {t.id for t in templates}
    result = [p for p in phases if not p.is_template and p.template_id not in template_ids]
    for template in templates:
        result.extend(generate_instances(template, project, today, config))
    return result


@dataclass(frozen=True)
class TemplatePlan:
    """Outcome of trying to put a project into recurring mode."""

    template: Phase
    phases_to_delete: tuple[Phase, ...] = field(default_factory=tuple)
    validation: ValidationResult = field(default_factory=ValidationResult)

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid


def plan_recurring_template(
    project: Project,
    phases: Sequence[Phase],
    template: Phase,
) -> TemplatePlan:
    """
    Validate a new or edited template and list the ad hoc phases that must be
    cleared before it is stored.
    """
    errors: list[str] = []
    if not template.is_template:
        errors.append("Recurring milestone must be marked as recurring")
    if template.recurrence is None:
        errors.append("Recurring phases must have recurring configuration")
    else:
        errors.extend(validate_rule(template.recurrence, as_date(project.start_date)).errors)
    if template.time_allocation_hours <= 0:
        errors.append("Recurring phase must have positive time allocation per occurrence")
    if template.project_id != project.id:
        errors.append("Recurring milestone belongs to a different project")

    project_phases = [p for p in phases if p.project_id == project.id]
    other_templates = [p for p in project_phases if p.is_template and p.id != template.id]
    if other_templates:
        errors.append("Project already has a recurring milestone")

    to_delete = tuple(p for p in project_phases if not p.is_template and not p.is_instance)
    if to_delete:
        logger.info("recurring_mode_clears_phases", extra={
            "project_id": project.id,
            "phases": len(to_delete),
        })
    return TemplatePlan(template, to_delete, ValidationResult.of(errors))


def validate_phase_mode(phases: Sequence[Phase]) -> ValidationResult:
    """A project may not mix ad hoc phases with a recurring template."""
    errors: list[str] = []
    templates = [p for p in phases if p.is_template]
    ad_hoc = [p for p in phases if not p.is_template and not p.is_instance]
    if len(templates) > 1:
        errors.append("Project may have at most one recurring milestone")
    if templates and ad_hoc:
        errors.append("Project cannot mix recurring milestones with individual phases")
    return ValidationResult.of(errors)


def delete_template(template_id: str, phases: Sequence[Phase]) -> list[Phase]:
    """Phases remaining after deleting a template and every instance derived from it."""
    return [p for p in phases if p.id != template_id and p.template_id != template_id]
