from __future__ import annotations

import threading
from datetime import date, timedelta
from typing import Iterable, Optional

import numpy as np

from planner.validation import as_date
from ._exceptions import CalendarError
from .schedule import Holiday, WeeklySchedule


class WorkingCalendar:
    """
    Compiled working-days calendar: a dense per-day capacity array (hours)
    anchored at an origin date, with holiday overrides and prefix sums.

    The arrays are built lazily around the first queried date and grown in
    either direction as later queries require.  Growth and holiday edits
    build fresh arrays and install them together under a lock, so one
    calendar can be shared between threads.
    """

    _DEFAULT_BUFFER: int = 365 * 3

    def __init__(
        self,
        schedule: WeeklySchedule,
        holidays: Iterable[Holiday] = (),
        origin: Optional[date] = None,
        buffer_days: Optional[int] = None,
    ) -> None:
        if not isinstance(schedule, WeeklySchedule):
            raise CalendarError(
                f"schedule must be a WeeklySchedule; got {type(schedule).__name__}."
            )
        self._holidays: list[Holiday] = []
        for h in holidays:
            if not isinstance(h, Holiday):
                raise CalendarError(f"holidays must be Holiday values; got {type(h).__name__}.")
            self._holidays.append(h)

        self._schedule = schedule
        # Monday-first so that date.weekday() indexes it directly.
        self._np_pattern: np.ndarray = np.array(schedule.hours_by_python_weekday(), dtype=float)
        self._buffer: int = buffer_days if buffer_days is not None else self._DEFAULT_BUFFER
        self._lock = threading.Lock()

        self._origin: Optional[date] = None
        self._horizon: int = 0
        self._weights: np.ndarray = np.zeros(0, dtype=float)
        self._prefix: np.ndarray = np.zeros(1, dtype=float)
        self._work_prefix: np.ndarray = np.zeros(1, dtype=np.int64)
        if origin is not None:
            self._install(origin, self._compile(origin, self._buffer))

    # ── array management ─────────────────────────────────────────────────
    # Callers of the methods below hold self._lock.

    def _pattern_for(self, first: date, n: int) -> np.ndarray:
        idx = (np.arange(n, dtype=np.int64) + first.weekday()) % 7
        return self._np_pattern[idx]

    def _zero_holidays(self, weights: np.ndarray, origin: date, lo: int, hi: int) -> None:
        """Zero every holiday day of ``weights`` whose index falls in ``[lo, hi)``."""
        for h in self._holidays:
            a = max((h.start_date - origin).days, lo)
            b = min((h.end_date - origin).days + 1, hi)
            if a < b:
                weights[a:b] = 0.0

    def _compile(self, origin: date, horizon: int) -> np.ndarray:
        weights = self._pattern_for(origin, horizon).copy()
        self._zero_holidays(weights, origin, 0, horizon)
        return weights

    def _install(self, origin: date, weights: np.ndarray) -> None:
        prefix = np.empty(len(weights) + 1, dtype=float)
        prefix[0] = 0.0
        np.cumsum(weights, out=prefix[1:])

        work_prefix = np.zeros(len(weights) + 1, dtype=np.int64)
        np.cumsum(weights > 0.0, dtype=np.int64, out=work_prefix[1:])

        self._origin, self._horizon, self._weights, self._prefix, self._work_prefix = (
            origin, len(weights), weights, prefix, work_prefix,
        )

    def _ensure_covers(self, start: date, end: date) -> date:
        """Grow the arrays so they cover ``[start, end]``; returns the origin."""
        origin = self._origin
        if origin is None:
            self._install(start, self._compile(start, (end - start).days + 1 + self._buffer))
            return start
        if start < origin:
            last = origin + timedelta(days=self._horizon - 1)
            origin = start - timedelta(days=self._buffer)
            self._install(origin, self._compile(origin, (max(last, end) - origin).days + 1))
        old = self._horizon
        offset = (end - origin).days
        if offset >= old:
            new = offset + 1 + self._buffer
            tail = self._pattern_for(origin + timedelta(days=old), new - old)
            weights = np.concatenate([self._weights, tail])
            self._zero_holidays(weights, origin, old, new)
            self._install(origin, weights)
        return origin

    def _span(self, start: date, end: date) -> tuple[int, int]:
        """Half-open index range for the inclusive date range."""
        origin = self._ensure_covers(start, end)
        return (start - origin).days, (end - origin).days + 1

    # ── holiday management ───────────────────────────────────────────────

    def add_holiday(self, holiday: Holiday) -> None:
        with self._lock:
            self._holidays.append(holiday)
            origin = self._origin
            if origin is None:
                return
            weights = self._weights.copy()
            self._zero_holidays(weights, origin, 0, len(weights))
            self._install(origin, weights)

    def remove_holiday(self, holiday: Holiday) -> None:
        with self._lock:
            if holiday not in self._holidays:
                return
            self._holidays.remove(holiday)
            origin = self._origin
            if origin is None:
                return
            lo = max((holiday.start_date - origin).days, 0)
            hi = min((holiday.end_date - origin).days + 1, self._horizon)
            if lo < hi:
                weights = self._weights.copy()
                weights[lo:hi] = self._pattern_for(origin + timedelta(days=lo), hi - lo)
                # Another holiday may still cover part of the range.
                self._zero_holidays(weights, origin, lo, hi)
                self._install(origin, weights)

    # ── queries ──────────────────────────────────────────────────────────

    def is_working_day(self, day: date) -> bool:
        return self.daily_capacity_hours(day) > 0.0

    def daily_capacity_hours(self, day: date) -> float:
        d = _require_date(day)
        with self._lock:
            i, _ = self._span(d, d)
            return float(self._weights[i])

    def is_holiday(self, day: date) -> bool:
        d = _require_date(day)
        with self._lock:
            return any(h.contains(d) for h in self._holidays)

    def count_working_days(self, start: date, end: date) -> int:
        start, end = _require_date(start), _require_date(end)
        if end < start:
            return 0
        with self._lock:
            i, j = self._span(start, end)
            return int(self._work_prefix[j] - self._work_prefix[i])

    def capacity_hours(self, start: date, end: date) -> float:
        """Total work hours available in the inclusive range."""
        start, end = _require_date(start), _require_date(end)
        if end < start:
            return 0.0
        with self._lock:
            i, j = self._span(start, end)
            return float(self._prefix[j] - self._prefix[i])

    def working_days(self, start: date, end: date) -> list[date]:
        start, end = _require_date(start), _require_date(end)
        if end < start:
            return []
        with self._lock:
            i, j = self._span(start, end)
            offsets = np.flatnonzero(self._weights[i:j] > 0.0)
        return [start + timedelta(days=int(k)) for k in offsets]

    # ── properties / repr ────────────────────────────────────────────────

    @property
    def schedule(self) -> WeeklySchedule:
        return self._schedule

    @property
    def holidays(self) -> tuple[Holiday, ...]:
        with self._lock:
            return tuple(self._holidays)

    @property
    def origin(self) -> Optional[date]:
        return self._origin

    @property
    def horizon(self) -> int:
        return self._horizon

    @property
    def key(self) -> tuple:
        """Hashable identity of the calendar's inputs, for cache keys."""
        holidays = sorted(self.holidays, key=lambda h: (h.start_date, h.end_date, h.title))
        return (self._schedule, tuple(holidays))

    def __repr__(self) -> str:
        return (
            f"WorkingCalendar(weekly_hours={self._schedule.weekly_hours:g}, "
            f"holidays={len(self._holidays)}, "
            f"origin={self._origin}, "
            f"horizon={self._horizon})"
        )


def _require_date(value: date) -> date:
    d = as_date(value)
    if d is None:
        raise CalendarError(f"Expected a date; got {value!r}.")
    return d


# ── functional API ───────────────────────────────────────────────────────────

def is_working_day(day: date, schedule: WeeklySchedule, holidays: Iterable[Holiday] = ()) -> bool:
    return WorkingCalendar(schedule, holidays).is_working_day(day)


def daily_capacity_hours(
    day: date, schedule: WeeklySchedule, holidays: Iterable[Holiday] = ()
) -> float:
    return WorkingCalendar(schedule, holidays).daily_capacity_hours(day)


def enumerate_working_days(
    start: date, end: date, schedule: WeeklySchedule, holidays: Iterable[Holiday] = ()
) -> list[date]:
    return WorkingCalendar(schedule, holidays).working_days(start, end)


def count_working_days(
    start: date, end: date, schedule: WeeklySchedule, holidays: Iterable[Holiday] = ()
) -> int:
    return WorkingCalendar(schedule, holidays).count_working_days(start, end)
