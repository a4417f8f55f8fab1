from __future__ import annotations

from datetime import date, datetime, time, timedelta
from itertools import islice
from typing import Callable, Iterator

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, rrule

from planner.logging_config import get_logger
from planner.validation import as_date
from ._exceptions import RecurrenceError
from .rule import EndKind, MonthlyPattern, RecurrenceRule, RecurrenceType, validate_rule

logger = get_logger("recurrence")

# Indexed 0 = Sunday ... 6 = Saturday.
_RRULE_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)

# Week-of-month 1..4 count forward from the 1st; 5 and 6 count back from month end.
_ORDINAL_N = {1: 1, 2: 2, 3: 3, 4: 4, 5: -2, 6: -1}

Candidates = Callable[[RecurrenceRule, date, date], Iterator[date]]


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time())


def _rrule_dates(*args, **kwargs) -> Iterator[date]:
    for dt in rrule(*args, **kwargs):
        yield dt.date()


# ── candidate generators ─────────────────────────────────────────────────────
#
# Each yields a strictly increasing series of dates >= anchor and stops once
# it passes ``limit``.  Count-based termination is applied by the caller.

def _daily(rule: RecurrenceRule, anchor: date, limit: date) -> Iterator[date]:
    return _rrule_dates(DAILY, dtstart=_midnight(anchor), interval=rule.interval,
                        until=_midnight(limit))


def _weekly(rule: RecurrenceRule, anchor: date, limit: date) -> Iterator[date]:
    anchor_dow = (anchor.weekday() + 1) % 7
    target = anchor_dow if rule.weekly_day_of_week is None else rule.weekly_day_of_week
    offset = (target - anchor_dow) % 7
    if (limit - anchor).days < offset:
        return iter(())
    return _rrule_dates(WEEKLY, dtstart=_midnight(anchor + timedelta(days=offset)),
                        interval=rule.interval, until=_midnight(limit))


def _monthly_by_date(rule: RecurrenceRule, anchor: date, limit: date) -> Iterator[date]:
    base = anchor.replace(day=1)
    k = 0
    while True:
        try:
            # relativedelta(day=31) clamps to the last day of shorter months.
            occurrence = base + relativedelta(months=k * rule.interval, day=rule.monthly_date)
        except (ValueError, OverflowError):
            # Stepped past date.max.
            return
        if occurrence > limit:
            return
        if occurrence >= anchor:
            yield occurrence
        k += 1


def _monthly_by_ordinal(rule: RecurrenceRule, anchor: date, limit: date) -> Iterator[date]:
    weekday = _RRULE_WEEKDAYS[rule.monthly_day_of_week](_ORDINAL_N[rule.monthly_week_of_month])
    return _rrule_dates(MONTHLY, dtstart=_midnight(anchor), interval=rule.interval,
                        byweekday=weekday, until=_midnight(limit))


def _yearly(rule: RecurrenceRule, anchor: date, limit: date) -> Iterator[date]:
    k = 0
    while True:
        try:
            # Always offset from the anchor so a Feb-29 anchor returns to the 29th
            # in leap years instead of drifting to the 28th.
            occurrence = anchor + relativedelta(years=k * rule.interval)
        except (ValueError, OverflowError):
            return
        if occurrence > limit:
            return
        yield occurrence
        k += 1


def _candidates(rule: RecurrenceRule) -> Candidates:
    if rule.type is RecurrenceType.DAILY:
        return _daily
    if rule.type is RecurrenceType.WEEKLY:
        return _weekly
    if rule.type is RecurrenceType.YEARLY:
        return _yearly
    if rule.monthly_pattern is MonthlyPattern.BY_DATE:
        return _monthly_by_date
    return _monthly_by_ordinal


# ── public ───────────────────────────────────────────────────────────────────

class Occurrences:
    """
    Lazy, finite, restartable sequence of occurrence dates.

    Iteration stops at whichever comes first: the rule's own end condition or
    ``window_end`` (inclusive).  Each ``iter()`` starts again from the anchor.
    """

    def __init__(self, rule: RecurrenceRule, anchor_date: date, window_end: date) -> None:
        anchor = as_date(anchor_date)
        end = as_date(window_end)
        errors: list[str] = []
        if anchor is None:
            errors.append("Invalid recurrence start date")
        if end is None:
            errors.append("Invalid recurrence window end date")
        errors.extend(validate_rule(rule, anchor).errors)
        if errors:
            raise RecurrenceError(errors[0], errors)

        self._rule = rule
        self._anchor: date = anchor  # type: ignore[assignment]
        self._window_end: date = end  # type: ignore[assignment]

    @property
    def limit(self) -> date:
        """Last date that may be emitted."""
        if self._rule.end.kind is EndKind.ON_DATE:
            return min(self._window_end, as_date(self._rule.end.until))  # type: ignore[type-var]
        return self._window_end

    def __iter__(self) -> Iterator[date]:
        limit = self.limit
        if limit < self._anchor:
            return iter(())
        dates = _candidates(self._rule)(self._rule, self._anchor, limit)
        if self._rule.end.kind is EndKind.AFTER_COUNT:
            return islice(dates, self._rule.end.count)
        return dates

    def to_list(self) -> list[date]:
        dates = list(self)
        logger.debug("recurrence_expanded", extra={
            "recurrence_type": self._rule.type.value,
            "anchor": self._anchor.isoformat(),
            "window_end": self._window_end.isoformat(),
            "occurrences": len(dates),
        })
        return dates

    @property
    def rule(self) -> RecurrenceRule:
        return self._rule

    @property
    def anchor(self) -> date:
        return self._anchor

    @property
    def window_end(self) -> date:
        return self._window_end

    def __repr__(self) -> str:
        return (
            f"Occurrences(type={self._rule.type.value!r}, "
            f"interval={self._rule.interval}, "
            f"anchor={self._anchor}, "
            f"limit={self.limit})"
        )


def expand(rule: RecurrenceRule, anchor_date: date, window_end: date) -> Occurrences:
    """Occurrence dates of ``rule`` from ``anchor_date`` through ``window_end``.

    Raises :class:`RecurrenceError` if the rule does not validate.
    """
    return Occurrences(rule, anchor_date, window_end)
