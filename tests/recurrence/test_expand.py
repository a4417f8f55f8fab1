"""
tests/recurrence/test_expand.py

Covers:
  - Daily / weekly / monthly / yearly expansion
  - Month-end clamping and leap-day anchors
  - Ordinal weekdays including second-to-last and last
  - End conditions (count, inclusive until) combined with the window
  - Laziness, restartability and termination
  - Expansion up to date.max
"""

from dataclasses import replace
from datetime import date, timedelta
from itertools import islice

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from planner.recurrence import (
    EndCondition,
    Occurrences,
    RecurrenceError,
    RecurrenceRule,
    expand,
)

JAN_1 = date(2024, 1, 1)  # a Monday
YEAR_END = date(2024, 12, 31)


def weekly(**kw):
    return RecurrenceRule("weekly", **kw)


def monthly_ordinal(week, dow, **kw):
    return RecurrenceRule("monthly", monthly_pattern="by_weekday_ordinal",
                          monthly_week_of_month=week, monthly_day_of_week=dow, **kw)


# ── Daily / weekly ────────────────────────────────────────────────────────────

class TestDailyWeekly:

    def test_daily_interval_with_until(self):
        rule = RecurrenceRule("daily", interval=3, end=EndCondition.on_date(date(2024, 1, 10)))
        assert list(expand(rule, JAN_1, YEAR_END)) == [
            date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 7), date(2024, 1, 10),
        ]

    def test_biweekly_three_times(self):
        rule = weekly(interval=2, end=EndCondition.after_count(3))
        assert list(expand(rule, JAN_1, YEAR_END)) == [
            date(2024, 1, 1), date(2024, 1, 15), date(2024, 1, 29),
        ]

    def test_weekly_on_other_weekday_starts_after_anchor(self):
        rule = weekly(weekly_day_of_week=5, end=EndCondition.after_count(2))  # Friday
        assert list(expand(rule, JAN_1, YEAR_END)) == [date(2024, 1, 5), date(2024, 1, 12)]

    def test_weekly_on_sunday(self):
        rule = weekly(weekly_day_of_week=0, end=EndCondition.after_count(1))
        assert list(expand(rule, JAN_1, YEAR_END)) == [date(2024, 1, 7)]

    def test_window_caps_count(self):
        rule = RecurrenceRule("daily", end=EndCondition.after_count(100))
        assert len(list(expand(rule, JAN_1, date(2024, 1, 10)))) == 10

    def test_until_caps_window(self):
        rule = RecurrenceRule("daily", end=EndCondition.on_date(date(2024, 1, 5)))
        assert list(expand(rule, JAN_1, YEAR_END))[-1] == date(2024, 1, 5)

    def test_window_before_anchor_is_empty(self):
        assert list(expand(RecurrenceRule("daily"), JAN_1, date(2023, 12, 31))) == []

    def test_weekly_first_occurrence_past_window(self):
        rule = weekly(weekly_day_of_week=6)  # Saturday
        assert list(expand(rule, JAN_1, date(2024, 1, 3))) == []


# ── Monthly ───────────────────────────────────────────────────────────────────

class TestMonthly:

    def test_by_date_clamps_to_month_end(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=31)
        assert list(expand(rule, date(2024, 1, 31), date(2024, 4, 30))) == [
            date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30),
        ]

    def test_by_date_skips_date_before_anchor(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=15,
                              end=EndCondition.after_count(2))
        assert list(expand(rule, date(2024, 1, 20), YEAR_END)) == [
            date(2024, 2, 15), date(2024, 3, 15),
        ]

    def test_by_date_interval(self):
        rule = RecurrenceRule("monthly", interval=3, monthly_pattern="by_date", monthly_date=1)
        assert list(expand(rule, JAN_1, YEAR_END)) == [
            date(2024, 1, 1), date(2024, 4, 1), date(2024, 7, 1), date(2024, 10, 1),
        ]

    def test_first_monday(self):
        rule = monthly_ordinal(1, 1, end=EndCondition.after_count(3))
        assert list(expand(rule, JAN_1, YEAR_END)) == [
            date(2024, 1, 1), date(2024, 2, 5), date(2024, 3, 4),
        ]

    def test_last_friday(self):
        rule = monthly_ordinal(6, 5, end=EndCondition.after_count(3))
        assert list(expand(rule, JAN_1, YEAR_END)) == [
            date(2024, 1, 26), date(2024, 2, 23), date(2024, 3, 29),
        ]

    def test_second_to_last_friday(self):
        rule = monthly_ordinal(5, 5, end=EndCondition.after_count(3))
        assert list(expand(rule, JAN_1, YEAR_END)) == [
            date(2024, 1, 19), date(2024, 2, 16), date(2024, 3, 22),
        ]


# ── Yearly ────────────────────────────────────────────────────────────────────

class TestYearly:

    def test_leap_day_anchor(self):
        rule = RecurrenceRule("yearly")
        assert list(expand(rule, date(2024, 2, 29), date(2028, 12, 31))) == [
            date(2024, 2, 29), date(2025, 2, 28), date(2026, 2, 28),
            date(2027, 2, 28), date(2028, 2, 29),
        ]

    def test_interval(self):
        rule = RecurrenceRule("yearly", interval=2, end=EndCondition.after_count(3))
        assert list(expand(rule, date(2024, 6, 1), date(2040, 1, 1))) == [
            date(2024, 6, 1), date(2026, 6, 1), date(2028, 6, 1),
        ]


# ── Sequence behaviour ────────────────────────────────────────────────────────

class TestSequence:

    def test_restartable(self):
        occ = expand(weekly(), JAN_1, date(2024, 3, 1))
        assert list(occ) == list(occ)

    def test_lazy_over_long_window(self):
        occ = expand(RecurrenceRule("daily"), JAN_1, date(9999, 12, 31))
        assert list(islice(occ, 3)) == [JAN_1, date(2024, 1, 2), date(2024, 1, 3)]

    def test_to_list_and_repr(self):
        occ = expand(weekly(end=EndCondition.after_count(2)), JAN_1, YEAR_END)
        assert isinstance(occ, Occurrences)
        assert occ.to_list() == [JAN_1, date(2024, 1, 8)]
        assert "weekly" in repr(occ)

    def test_limit(self):
        rule = RecurrenceRule("daily", end=EndCondition.on_date(date(2024, 2, 1)))
        assert expand(rule, JAN_1, YEAR_END).limit == date(2024, 2, 1)
        assert expand(rule, JAN_1, date(2024, 1, 15)).limit == date(2024, 1, 15)

    def test_invalid_rule_raises_with_all_errors(self):
        rule = RecurrenceRule("monthly", interval=0)
        with pytest.raises(RecurrenceError) as exc_info:
            expand(rule, JAN_1, YEAR_END)
        assert len(exc_info.value.errors) == 2

    def test_until_not_after_anchor_raises(self):
        rule = RecurrenceRule("daily", end=EndCondition.on_date(JAN_1))
        with pytest.raises(RecurrenceError):
            expand(rule, JAN_1, YEAR_END)

    def test_bad_anchor_raises(self):
        with pytest.raises(RecurrenceError):
            expand(RecurrenceRule("daily"), "2024-01-01", YEAR_END)


# ── Last representable date ───────────────────────────────────────────────────

class TestDateMax:

    def test_yearly_stops_before_year_10000(self):
        rule = RecurrenceRule("yearly", interval=1000)
        assert list(expand(rule, date(9000, 1, 31), date.max)) == [date(9000, 1, 31)]

    def test_yearly_count_runs_out_of_calendar(self):
        rule = RecurrenceRule("yearly", end=EndCondition.after_count(5))
        assert list(expand(rule, date(9998, 6, 1), date.max)) == [
            date(9998, 6, 1), date(9999, 6, 1),
        ]

    def test_monthly_by_date_stops_at_december_9999(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=31)
        assert list(expand(rule, date(9999, 11, 15), date.max)) == [
            date(9999, 11, 30), date(9999, 12, 31),
        ]

    def test_monthly_ordinal_terminates(self):
        dates = list(expand(monthly_ordinal(6, 5), date(9999, 11, 1), date.max))
        assert len(dates) == 2
        assert all(d.year == 9999 and d.month in (11, 12) for d in dates)

    def test_weekly_target_after_date_max(self):
        # The next matching weekday would fall after date.max.
        max_dow = (date.max.weekday() + 1) % 7
        rule = weekly(weekly_day_of_week=(max_dow + 1) % 7)
        assert list(expand(rule, date.max, date.max)) == []


# ── Properties ────────────────────────────────────────────────────────────────

rules = st.one_of(
    st.builds(RecurrenceRule, type=st.just("daily"), interval=st.integers(1, 10)),
    st.builds(RecurrenceRule, type=st.just("weekly"), interval=st.integers(1, 4),
              weekly_day_of_week=st.one_of(st.none(), st.integers(0, 6))),
    st.builds(RecurrenceRule, type=st.just("monthly"), interval=st.integers(1, 6),
              monthly_pattern=st.just("by_date"), monthly_date=st.integers(1, 31)),
    st.builds(RecurrenceRule, type=st.just("monthly"), interval=st.integers(1, 6),
              monthly_pattern=st.just("by_weekday_ordinal"),
              monthly_week_of_month=st.integers(1, 6), monthly_day_of_week=st.integers(0, 6)),
    st.builds(RecurrenceRule, type=st.just("yearly"), interval=st.integers(1, 3)),
)


class TestProperties:

    @settings(max_examples=100, deadline=None)
    @given(rule=rules,
           anchor=st.dates(min_value=date(2000, 1, 1), max_value=date(2030, 12, 31)),
           span=st.integers(min_value=0, max_value=800))
    def test_strictly_increasing_within_window(self, rule, anchor, span):
        window_end = anchor + timedelta(days=span)
        dates = list(expand(rule, anchor, window_end))
        assert all(anchor <= d <= window_end for d in dates)
        assert all(a < b for a, b in zip(dates, dates[1:]))

    @settings(max_examples=50, deadline=None)
    @given(rule=rules, count=st.integers(1, 20),
           anchor=st.dates(min_value=date(2000, 1, 1), max_value=date(2030, 12, 31)))
    def test_count_is_upper_bound(self, rule, count, anchor):
        counted = replace(rule, end=EndCondition.after_count(count))
        dates = list(expand(counted, anchor, anchor + timedelta(days=365 * 5)))
        assert len(dates) <= count
