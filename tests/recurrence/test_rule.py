"""
tests/recurrence/test_rule.py

Covers:
  - Aggregated validation messages
  - Enum coercion from plain strings
  - Human-readable descriptions
"""

from datetime import date

import pytest

from planner.recurrence import (
    EndCondition,
    EndKind,
    MonthlyPattern,
    RecurrenceRule,
    RecurrenceType,
    describe,
    validate_rule,
)


class TestValidateRule:

    def test_valid_rules(self):
        assert validate_rule(RecurrenceRule("daily")).is_valid
        assert validate_rule(RecurrenceRule("weekly", weekly_day_of_week=3)).is_valid
        assert validate_rule(RecurrenceRule("monthly", monthly_pattern="by_date",
                                            monthly_date=31)).is_valid
        assert validate_rule(RecurrenceRule("yearly", interval=5)).is_valid

    def test_unknown_type(self):
        result = validate_rule(RecurrenceRule("hourly"))
        assert result.errors == (
            "Invalid recurrence type: hourly. Must be daily, weekly, monthly, or yearly",
        )

    def test_interval(self):
        result = validate_rule(RecurrenceRule("daily", interval=0))
        assert result.errors == ("Recurrence interval must be at least 1",)

    def test_weekly_day_range(self):
        result = validate_rule(RecurrenceRule("weekly", weekly_day_of_week=7))
        assert result.errors == ("Weekly day of week must be between 0 (Sunday) and 6 (Saturday)",)

    def test_monthly_needs_pattern(self):
        result = validate_rule(RecurrenceRule("monthly"))
        assert result.errors == (
            "Monthly recurrence must specify pattern (by_date or by_weekday_ordinal)",
        )

    def test_monthly_date_missing_and_out_of_range(self):
        missing = RecurrenceRule("monthly", monthly_pattern="by_date")
        assert validate_rule(missing).errors == ("Monthly date pattern must specify date (1-31)",)
        bad = RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=32)
        assert validate_rule(bad).errors == ("Monthly date must be between 1 and 31",)

    def test_monthly_ordinal_ranges(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_weekday_ordinal",
                              monthly_week_of_month=7, monthly_day_of_week=-1)
        assert len(validate_rule(rule).errors) == 2

    def test_monthly_ordinal_incomplete(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_weekday_ordinal",
                              monthly_week_of_month=1)
        assert validate_rule(rule).errors == (
            "Monthly weekday pattern must specify week of month and day of week",
        )

    def test_unknown_monthly_pattern(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_moon")
        assert validate_rule(rule).errors == ("Invalid monthly pattern: by_moon",)

    def test_count(self):
        rule = RecurrenceRule("daily", end=EndCondition.after_count(0))
        assert validate_rule(rule).errors == ("Recurrence count must be at least 1",)

    def test_until_relative_to_anchor(self):
        rule = RecurrenceRule("daily", end=EndCondition.on_date(date(2024, 1, 1)))
        assert validate_rule(rule).is_valid
        assert validate_rule(rule, date(2024, 1, 1)).errors == (
            "Recurrence end date must be after the start date",
        )

    def test_errors_are_aggregated(self):
        rule = RecurrenceRule("weekly", interval=-1, weekly_day_of_week=9,
                              end=EndCondition.after_count(0))
        assert len(validate_rule(rule).errors) == 3

    def test_bool_is_not_an_interval(self):
        assert not validate_rule(RecurrenceRule("daily", interval=True)).is_valid


class TestCoercion:

    def test_strings_become_enums(self):
        rule = RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=1)
        assert rule.type is RecurrenceType.MONTHLY
        assert rule.monthly_pattern is MonthlyPattern.BY_DATE

    def test_end_condition_constructors(self):
        assert EndCondition.never().kind is EndKind.NEVER
        assert EndCondition.after_count(3).count == 3
        assert EndCondition.on_date(date(2024, 5, 1)).until == date(2024, 5, 1)

    def test_rules_are_hashable(self):
        assert hash(RecurrenceRule("daily")) == hash(RecurrenceRule("daily"))


class TestDescribe:

    @pytest.mark.parametrize("rule, text", [
        (RecurrenceRule("daily"), "Every day"),
        (RecurrenceRule("weekly", interval=2, weekly_day_of_week=1), "Every 2 weeks on Monday"),
        (RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=22),
         "Every month on the 22nd"),
        (RecurrenceRule("monthly", monthly_pattern="by_date", monthly_date=11),
         "Every month on the 11th"),
        (RecurrenceRule("monthly", monthly_pattern="by_weekday_ordinal",
                        monthly_week_of_month=6, monthly_day_of_week=5),
         "Every month on the last Friday"),
        (RecurrenceRule("yearly", end=EndCondition.on_date(date(2030, 1, 1))),
         "Every year, until 2030-01-01"),
        (RecurrenceRule("daily", interval=3, end=EndCondition.after_count(1)),
         "Every 3 days, 1 time"),
        (RecurrenceRule("hourly"), "Unknown recurrence pattern"),
    ])
    def test_text(self, rule, text):
        assert describe(rule) == text
