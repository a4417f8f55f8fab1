"""
planner.recurrence
~~~~~~~~~~~~~~~~~~

Expansion of repeating calendar patterns into concrete dates.

Basic usage::

    from datetime import date
    from planner.recurrence import EndCondition, RecurrenceRule, expand

    rule = RecurrenceRule("weekly", interval=2, end=EndCondition.after_count(3))
    list(expand(rule, date(2024, 1, 1), date(2024, 12, 31)))
    # → [2024-01-01, 2024-01-15, 2024-01-29]

Short months clamp rather than skip::

    rule = RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=31)
    list(expand(rule, date(2024, 1, 31), date(2024, 4, 30)))
    # → [2024-01-31, 2024-02-29, 2024-03-31, 2024-04-30]

Public API
----------
RecurrenceRule    The rule value type.
EndCondition      never / on_date / after_count.
expand            Lazy, restartable occurrence sequence.
validate_rule     Aggregated rule validation.
describe          Human-readable rule text.
RecurrenceError   Raised when expanding an invalid rule.
"""

from __future__ import annotations

from planner.recurrence._exceptions import RecurrenceError
from planner.recurrence.expand import Occurrences, expand
from planner.recurrence.rule import (
    EndCondition,
    EndKind,
    MonthlyPattern,
    RecurrenceRule,
    RecurrenceType,
    describe,
    validate_rule,
)

__all__ = [
    "RecurrenceRule",
    "RecurrenceType",
    "MonthlyPattern",
    "EndCondition",
    "EndKind",
    "Occurrences",
    "expand",
    "validate_rule",
    "describe",
    "RecurrenceError",
]
