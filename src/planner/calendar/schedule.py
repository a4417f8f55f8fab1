from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Union

from planner.validation import ValidationResult, as_date
from ._exceptions import CalendarError

# Sunday-first, matching the 0 = Sunday day numbering of recurrence rules.
WEEKDAYS: tuple[str, ...] = (
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
)

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DayKey = Union[str, int, date]


def weekday_name(d: date) -> str:
    return WEEKDAYS[(d.weekday() + 1) % 7]


def _day_index(day: DayKey) -> int:
    if isinstance(day, date):
        return (day.weekday() + 1) % 7
    if isinstance(day, int):
        if not 0 <= day <= 6:
            raise CalendarError(f"Weekday index must be 0-6; got {day}.")
        return day
    try:
        return WEEKDAYS.index(day.strip().lower())
    except (AttributeError, ValueError):
        raise CalendarError(f"Unknown weekday {day!r}.") from None


def _parse_hhmm(value: Any) -> Optional[time]:
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        return None
    m = _HHMM.match(value.strip())
    if m is None:
        return None
    return time(int(m.group(1)), int(m.group(2)))


# ── work slots ───────────────────────────────────────────────────────────────

def validate_work_slot(start_time: Any, end_time: Any) -> ValidationResult:
    errors: list[str] = []
    start = _parse_hhmm(start_time)
    end = _parse_hhmm(end_time)
    if start is None:
        errors.append('Start time must be in HH:MM format (e.g., "09:00")')
    if end is None:
        errors.append('End time must be in HH:MM format (e.g., "17:00")')
    if start is not None and end is not None:
        if end == start:
            errors.append("End time must be after start time")
        elif end < start:
            errors.append("Work slots cannot cross midnight (must be within a single day)")
    return ValidationResult.of(errors)


@dataclass(frozen=True, order=True)
class WorkSlot:
    """A contiguous block of work time inside one calendar day."""

    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise CalendarError(
                f"Work slot must end after it starts; got "
                f"{self.start_time:%H:%M}-{self.end_time:%H:%M}."
            )

    @classmethod
    def parse(cls, start_time: Union[str, time], end_time: Union[str, time]) -> "WorkSlot":
        result = validate_work_slot(start_time, end_time)
        if not result.is_valid:
            raise CalendarError(result.errors[0], list(result.errors))
        return cls(_parse_hhmm(start_time), _parse_hhmm(end_time))  # type: ignore[arg-type]

    @property
    def duration(self) -> float:
        """Length in hours."""
        start = datetime.combine(date.min, self.start_time)
        end = datetime.combine(date.min, self.end_time)
        return (end - start) / timedelta(hours=1)

    def overlaps(self, other: "WorkSlot") -> bool:
        # Touching slots (09:00-12:00, 12:00-17:00) do not overlap.
        return self.start_time < other.end_time and other.start_time < self.end_time

    def __str__(self) -> str:
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


def _overlap_errors(day: str, slots: Sequence[WorkSlot]) -> list[str]:
    errors = []
    ordered = sorted(slots)
    for a, b in zip(ordered, ordered[1:]):
        if a.overlaps(b):
            errors.append(f"Work slots on {day.capitalize()} overlap: {a} and {b}")
    return errors


# ── weekly schedule ──────────────────────────────────────────────────────────

class WeeklySchedule:
    """
    Immutable weekday → work slots mapping.

    Every edit returns a new schedule and is re-validated; overlapping slots
    raise :class:`CalendarError`.
    """

    def __init__(self, slots: Optional[Mapping[DayKey, Iterable[WorkSlot]]] = None) -> None:
        days: list[tuple[WorkSlot, ...]] = [()] * 7
        for key, day_slots in (slots or {}).items():
            days[_day_index(key)] = tuple(sorted(day_slots))

        errors: list[str] = []
        for i, day_slots in enumerate(days):
            errors.extend(_overlap_errors(WEEKDAYS[i], day_slots))
        if errors:
            raise CalendarError(errors[0], errors)
        self._days: tuple[tuple[WorkSlot, ...], ...] = tuple(days)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Iterable[Any]]) -> "WeeklySchedule":
        """
        Build from plain data, e.g. ``{"monday": [{"start": "09:00", "end": "17:00"}]}``.
        Slots may also be given as ``("09:00", "17:00")`` pairs.
        """
        result = validate_schedule(data)
        if not result.is_valid:
            raise CalendarError(result.errors[0], list(result.errors))
        return cls({day: [_slot_from_data(s) for s in slots] for day, slots in data.items()})

    @classmethod
    def uniform(
        cls,
        start_time: str,
        end_time: str,
        days: Iterable[DayKey] = ("monday", "tuesday", "wednesday", "thursday", "friday"),
    ) -> "WeeklySchedule":
        slot = WorkSlot.parse(start_time, end_time)
        return cls({day: [slot] for day in days})

    # ── queries ──────────────────────────────────────────────────────────

    def slots_for(self, day: DayKey) -> tuple[WorkSlot, ...]:
        return self._days[_day_index(day)]

    def hours_for(self, day: DayKey) -> float:
        return sum(s.duration for s in self.slots_for(day))

    def hours_by_python_weekday(self) -> list[float]:
        """Daily hours ordered Monday..Sunday (``date.weekday()`` order)."""
        return [self.hours_for((i + 1) % 7) for i in range(7)]

    @property
    def weekly_hours(self) -> float:
        return sum(self.hours_for(i) for i in range(7))

    def items(self) -> Iterator[tuple[str, tuple[WorkSlot, ...]]]:
        return iter(zip(WEEKDAYS, self._days))

    # ── edits ────────────────────────────────────────────────────────────

    def _replace_day(self, day: DayKey, slots: Iterable[WorkSlot]) -> "WeeklySchedule":
        mapping: dict[DayKey, Iterable[WorkSlot]] = dict(enumerate(self._days))
        mapping[_day_index(day)] = list(slots)
        return WeeklySchedule(mapping)

    def add_slot(self, day: DayKey, slot: WorkSlot) -> "WeeklySchedule":
        return self._replace_day(day, [*self.slots_for(day), slot])

    def update_slot(self, day: DayKey, index: int, slot: WorkSlot) -> "WeeklySchedule":
        slots = list(self.slots_for(day))
        if not 0 <= index < len(slots):
            raise CalendarError(f"No work slot {index} on {WEEKDAYS[_day_index(day)]}.")
        slots[index] = slot
        return self._replace_day(day, slots)

    def remove_slot(self, day: DayKey, index: int) -> "WeeklySchedule":
        slots = list(self.slots_for(day))
        if not 0 <= index < len(slots):
            raise CalendarError(f"No work slot {index} on {WEEKDAYS[_day_index(day)]}.")
        del slots[index]
        return self._replace_day(day, slots)

    # ── dunder ───────────────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklySchedule):
            return NotImplemented
        return self._days == other._days

    def __hash__(self) -> int:
        return hash(self._days)

    def __repr__(self) -> str:
        hours = ", ".join(f"{d[:3]}={self.hours_for(d):g}" for d in WEEKDAYS)
        return f"WeeklySchedule({hours})"


def _slot_from_data(item: Any) -> WorkSlot:
    if isinstance(item, WorkSlot):
        return item
    if isinstance(item, Mapping):
        return WorkSlot.parse(item.get("start"), item.get("end"))
    start, end = item
    return WorkSlot.parse(start, end)


def validate_schedule(data: Mapping[str, Iterable[Any]]) -> ValidationResult:
    """Collect every slot format and overlap error in a raw schedule mapping."""
    errors: list[str] = []
    for day, items in data.items():
        try:
            idx = _day_index(day)
        except CalendarError as exc:
            errors.append(str(exc))
            continue
        slots: list[WorkSlot] = []
        for item in items:
            if isinstance(item, WorkSlot):
                slots.append(item)
                continue
            if isinstance(item, Mapping):
                start, end = item.get("start"), item.get("end")
            else:
                start, end = item
            result = validate_work_slot(start, end)
            if result.is_valid:
                slots.append(WorkSlot(_parse_hhmm(start), _parse_hhmm(end)))  # type: ignore[arg-type]
            else:
                errors.extend(f"{WEEKDAYS[idx].capitalize()}: {e}" for e in result.errors)
        errors.extend(_overlap_errors(WEEKDAYS[idx], slots))
    return ValidationResult.of(errors)


# ── holidays ─────────────────────────────────────────────────────────────────

def validate_holiday(title: Any, start_date: Any, end_date: Any) -> ValidationResult:
    errors: list[str] = []
    if not isinstance(title, str) or not title.strip():
        errors.append("Holiday title is required")
    elif len(title.strip()) > 200:
        errors.append("Holiday title must be 200 characters or less")
    start = as_date(start_date)
    end = as_date(end_date)
    if start is None:
        errors.append("Invalid start date")
    if end is None:
        errors.append("Invalid end date")
    if start is not None and end is not None and end < start:
        errors.append("Holiday end date must be on or after start date")
    return ValidationResult.of(errors)


@dataclass(frozen=True)
class Holiday:
    """Inclusive date range with zero work capacity."""

    start_date: date
    end_date: date
    title: str = ""
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        start = as_date(self.start_date)
        end = as_date(self.end_date)
        if start is None or end is None:
            raise CalendarError("Holiday dates must be dates.")
        if end < start:
            raise CalendarError(
                f"Holiday end date {end} is before start date {start}."
            )
        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1
