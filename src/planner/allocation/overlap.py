"""
Date-range conflicts within a timeline lane.

Ranges are inclusive and midnight-normalized, so ``[1, 5]`` and ``[5, 9]``
overlap on day 5 while ``[1, 5]`` and ``[6, 9]`` do not.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional, Sequence

from planner.logging_config import get_logger
from .models import DateAdjustment, DateRange, Project

logger = get_logger("allocation.overlap")

_DAY = timedelta(days=1)


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"
    AUTO = "auto"


class OverlapType(str, Enum):
    COMPLETE = "complete"
    ADJACENT = "adjacent"
    PARTIAL = "partial"


class ResolutionStrategy(str, Enum):
    ADJUST = "adjust"
    PREVENT = "prevent"
    ALLOW = "allow"


@dataclass(frozen=True)
class Conflict:
    range: DateRange
    overlap_type: OverlapType
    overlap_days: int


def overlaps(a: DateRange, b: DateRange) -> bool:
    return a.start <= b.end and a.end >= b.start


def _conflicting(candidate: DateRange, existing: Sequence[DateRange]) -> list[DateRange]:
    return [r for r in existing if overlaps(candidate, r)]


def _search(requested: DateRange, existing: Sequence[DateRange], forward: bool) -> Optional[DateRange]:
    """Shift ``requested`` past conflicts until it fits; None if dates run out."""
    length = timedelta(days=requested.days - 1)
    candidate = requested
    try:
        while True:
            hits = _conflicting(candidate, existing)
            if not hits:
                return candidate
            if forward:
                start = max(r.end for r in hits) + _DAY
                candidate = DateRange(start, start + length)
            else:
                end = min(r.start for r in hits) - _DAY
                candidate = DateRange(end - length, end)
    except OverflowError:
        return None


def find_nearest_available_slot(
    existing: Sequence[DateRange],
    requested: DateRange,
    direction: Direction | str = Direction.AUTO,
) -> DateRange:
    """
    Nearest placement of ``requested`` (same duration) that overlaps nothing in
    ``existing``.  ``auto`` picks the smaller shift; a tie goes backward.
    """
    direction = Direction(direction)
    if not _conflicting(requested, existing):
        return requested

    forward = _search(requested, existing, forward=True) if direction is not Direction.BACKWARD else None
    backward = _search(requested, existing, forward=False) if direction is not Direction.FORWARD else None

    if direction is Direction.BACKWARD and backward is None:
        forward = _search(requested, existing, forward=True)
    if direction is Direction.FORWARD and forward is None:
        backward = _search(requested, existing, forward=False)

    if forward is not None and backward is not None:
        forward_shift = (forward.start - requested.start).days
        backward_shift = (requested.start - backward.start).days
        chosen = backward if backward_shift <= forward_shift else forward
    else:
        chosen = forward if forward is not None else backward

    if chosen is None:
        # Unreachable for real calendars: both searches ran off date.min/date.max.
        raise OverflowError("No free date range available in either direction.")
    logger.debug("slot_adjusted", extra={
        "requested_start": requested.start.isoformat(),
        "adjusted_start": chosen.start.isoformat(),
        "direction": direction.value,
    })
    return chosen


def detect_conflicts(requested: DateRange, existing: Sequence[DateRange]) -> list[Conflict]:
    conflicts = []
    for r in _conflicting(requested, existing):
        overlap_days = (min(requested.end, r.end) - max(requested.start, r.start)).days + 1
        if overlap_days == requested.days and overlap_days == r.days:
            kind = OverlapType.COMPLETE
        elif overlap_days == 1:
            kind = OverlapType.ADJACENT
        else:
            kind = OverlapType.PARTIAL
        conflicts.append(Conflict(r, kind, overlap_days))
    return conflicts


def resolve_drag_conflict(
    requested: DateRange,
    existing: Sequence[DateRange],
    strategy: ResolutionStrategy | str = ResolutionStrategy.ADJUST,
) -> DateAdjustment:
    strategy = ResolutionStrategy(strategy)
    if not _conflicting(requested, existing) or strategy is ResolutionStrategy.ALLOW:
        return DateAdjustment(requested, requested)
    if strategy is ResolutionStrategy.PREVENT:
        return DateAdjustment(requested, requested, "Conflicts detected - drag prevented")
    adjusted = find_nearest_available_slot(existing, requested, Direction.AUTO)
    return DateAdjustment(requested, adjusted, "Adjusted to avoid conflicts")


def lane_ranges(
    projects: Sequence[Project],
    row_id: Optional[str],
    exclude_project_id: Optional[str] = None,
) -> list[DateRange]:
    """Recorded spans of the other projects sharing a timeline row."""
    return [
        p.date_range for p in projects
        if p.row_id == row_id and p.id != exclude_project_id and p.date_range is not None
    ]


def adjust_project_dates_for_drag(
    project_id: str,
    requested: DateRange,
    row_id: Optional[str],
    projects: Sequence[Project],
) -> DateAdjustment:
    existing = lane_ranges(projects, row_id, exclude_project_id=project_id)
    return resolve_drag_conflict(requested, existing, ResolutionStrategy.ADJUST)
