"""
planner.config
~~~~~~~~~~~~~~

Tunable policy values used by the allocation rules: the planning horizon of
continuous projects, the utilization warning threshold, the occurrence cap
for recurring templates and cache sizing.

Loading from YAML::

    # planner.yaml
    continuous_horizon_days: 180
    cache_capacity: 0          # disable caching

    from planner.config import load_config
    config = load_config("planner.yaml")
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Union

import yaml

if TYPE_CHECKING:
    from planner.cache import CalculationCache
    from planner.calendar import Holiday, WeeklySchedule, WorkingCalendar


_NUMERIC: dict[str, Any] = {
    "continuous_horizon_days": int,
    "high_utilization_threshold": (int, float),
    "max_occurrences": int,
    "cache_capacity": int,
    "cache_ttl_seconds": (int, float),
    "calendar_buffer_days": int,
}


@dataclass(frozen=True)
class PlannerConfig:
    continuous_horizon_days: int = 365
    high_utilization_threshold: float = 0.9
    max_occurrences: int = 365
    cache_capacity: int = 256
    cache_ttl_seconds: float = 300.0
    calendar_buffer_days: int = 365 * 3

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            # bool is an int subclass but never a meaningful setting here.
            if isinstance(value, bool) or not isinstance(value, _NUMERIC[f.name]):
                kind = "an integer" if _NUMERIC[f.name] is int else "a number"
                raise ValueError(f"{f.name} must be {kind}; got {value!r}.")
        if self.continuous_horizon_days < 1:
            raise ValueError(
                f"continuous_horizon_days must be >= 1; got {self.continuous_horizon_days}."
            )
        if not 0.0 < self.high_utilization_threshold <= 1.0:
            raise ValueError(
                "high_utilization_threshold must be in (0, 1]; "
                f"got {self.high_utilization_threshold}."
            )
        if self.max_occurrences < 1:
            raise ValueError(f"max_occurrences must be >= 1; got {self.max_occurrences}.")
        if self.cache_capacity < 0:
            raise ValueError(f"cache_capacity must be >= 0; got {self.cache_capacity}.")
        if self.cache_ttl_seconds <= 0:
            raise ValueError(f"cache_ttl_seconds must be > 0; got {self.cache_ttl_seconds}.")
        if self.calendar_buffer_days < 1:
            raise ValueError(
                f"calendar_buffer_days must be >= 1; got {self.calendar_buffer_days}."
            )

    def make_cache(self) -> "CalculationCache":
        from planner.cache import CalculationCache

        return CalculationCache(capacity=self.cache_capacity, ttl=self.cache_ttl_seconds)

    def make_calendar(
        self, schedule: "WeeklySchedule", holidays: Iterable["Holiday"] = ()
    ) -> "WorkingCalendar":
        from planner.calendar import WorkingCalendar

        return WorkingCalendar(schedule, holidays, buffer_days=self.calendar_buffer_days)


DEFAULT_CONFIG = PlannerConfig()


def config_from_mapping(data: Mapping[str, Any] | None) -> PlannerConfig:
    """Build a config from parsed data; unknown keys are rejected."""
    if not data:
        return PlannerConfig()
    if not isinstance(data, Mapping):
        raise ValueError(f"Config must be a mapping; got {type(data).__name__}.")
    known = {f.name for f in fields(PlannerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    return PlannerConfig(**dict(data))


def load_config(path: Union[str, Path]) -> PlannerConfig:
    """Load a YAML config file.  Missing files and bad YAML propagate."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return config_from_mapping(data)
