from copy import copy, deepcopy
from datetime import date as py_date

import pytest

from wallclock import (
    SATURDAY,
    Date,
    InvalidField,
    InvalidShift,
    NaiveDateTime,
    Period,
    ShiftOverflow,
)

from .common import AlwaysEqual, AlwaysLarger, AlwaysSmaller, NeverEqual


class TestInit:

    def test_valid(self):
        d = Date(2021, 1, 2)
        assert d.year == 2021
        assert d.month == 1
        assert d.day == 2

    @pytest.mark.parametrize(
        "fields",
        [(2021, 2, 29), (2021, 13, 1), (2021, 1, 0), (0, 1, 1), (10_000, 1, 1)],
    )
    def test_invalid(self, fields):
        with pytest.raises(InvalidField):
            Date(*fields)


def test_canonical_format():
    d = Date(2021, 1, 2)
    assert d.canonical_format() == "2021-01-02"
    assert str(d) == "2021-01-02"
    assert repr(d) == "Date(2021-01-02)"


def test_equality():
    d = Date(2021, 1, 2)
    same = Date(2021, 1, 2)
    different = Date(2021, 1, 3)
    assert d == same
    assert d != different
    assert hash(d) == hash(same)
    assert not d == NeverEqual()
    assert d == AlwaysEqual()


def test_comparison():
    d = Date(2021, 5, 1)
    assert d < Date(2021, 5, 2)
    assert d <= Date(2021, 5, 1)
    assert d > Date(2020, 12, 31)
    assert d >= Date(2021, 5, 1)
    assert d < AlwaysLarger()
    assert d > AlwaysSmaller()


def test_py_date():
    d = Date(2021, 1, 2)
    assert d.py_date() == py_date(2021, 1, 2)
    assert Date.from_py_date(py_date(2021, 1, 2)) == d


class TestShift:

    @pytest.mark.parametrize(
        "start, months, expect",
        [
            (Date(2024, 1, 31), 1, Date(2024, 2, 29)),
            (Date(2023, 1, 31), 1, Date(2023, 2, 28)),
            (Date(2016, 1, 1), -1, Date(2015, 12, 1)),
            (Date(2016, 12, 1), -12, Date(2015, 12, 1)),
            (Date(2016, 12, 1), -11, Date(2016, 1, 1)),
            (Date(2016, 9, 15), 5, Date(2017, 2, 15)),
            (Date(2016, 3, 15), -5, Date(2015, 10, 15)),
            (Date(2016, 1, 1), -37, Date(2012, 12, 1)),
            (Date(1970, 1, 1), -24, Date(1968, 1, 1)),
            (Date(1970, 1, 1), -13, Date(1968, 12, 1)),
        ],
    )
    def test_months(self, start, months, expect):
        assert start.shift(months=months) == expect

    def test_years_clamp_leap_day(self):
        assert Date(2016, 2, 29).shift(years=2) == Date(2018, 2, 28)
        assert Date(2016, 2, 29).shift(years=4) == Date(2020, 2, 29)

    def test_units_are_clamped_one_after_the_other(self):
        # 2017-02-28 after the year, then March 28
        assert Date(2016, 2, 29).shift(years=1, months=1) == Date(2017, 3, 28)

    def test_logical_order_regardless_of_input_order(self):
        d = Date(2023, 1, 31)
        assert d.shift([("days", 1), ("months", 1)]) == Date(2023, 3, 1)
        assert d.shift(months=1, days=1) == Date(2023, 3, 1)

    def test_weeks(self):
        assert Date(2021, 1, 2).shift(weeks=-2) == Date(2020, 12, 19)

    def test_clock_units_roll_over_days(self):
        d = Date(2021, 1, 2)
        assert d.shift(hours=25) == Date(2021, 1, 3)
        assert d.shift(minutes=-1) == Date(2021, 1, 1)
        assert d.shift(hours=23) == d

    def test_zero_is_identity(self):
        d = Date(2021, 1, 2)
        assert d.shift() is d
        assert d.shift(days=0, months=0) is d
        assert d.shift(Period.ZERO) is d

    def test_repeated_units_are_summed(self):
        d = Date(2021, 1, 2)
        assert d.shift([("days", 1), ("days", 2)]) == Date(2021, 1, 5)

    @pytest.mark.parametrize(
        "start, kwargs",
        [
            (Date(9999, 12, 31), dict(days=1)),
            (Date(9999, 1, 1), dict(years=1)),
            (Date(1, 1, 1), dict(months=-1)),
            (Date(1, 1, 1), dict(hours=-1)),
        ],
    )
    def test_overflow(self, start, kwargs):
        with pytest.raises(ShiftOverflow):
            start.shift(**kwargs)

    def test_range_checked_after_months_carry(self):
        assert Date(9999, 12, 1).shift(years=1, months=-12) == Date(
            9999, 12, 1
        )
        assert Date(1, 1, 31).shift(years=-1, months=13) == Date(1, 2, 28)
        with pytest.raises(ShiftOverflow):
            Date(9999, 12, 1).shift(years=1, months=-11)

    @pytest.mark.parametrize(
        "deltas",
        [
            [("fortnights", 1)],
            [("days", 1.5)],
            [("days", True)],
            [("days",)],
            {"days": "1"},
        ],
    )
    def test_invalid(self, deltas):
        with pytest.raises(InvalidShift):
            Date(2021, 1, 2).shift(deltas)

    def test_period_arithmetic(self):
        d = Date(2021, 1, 31)
        assert d + Period(months=1) == Date(2021, 2, 28)
        assert d - Period(years=1, days=1) == Date(2020, 1, 30)

        with pytest.raises(TypeError, match="unsupported operand"):
            d + 1  # type: ignore[operator]


def test_at():
    d = Date(2021, 1, 2)
    assert d.at(3, 4, 5) == NaiveDateTime(2021, 1, 2, 3, 4, 5)
    assert d.at(microsecond=500_000).precision == 1
    with pytest.raises(InvalidField):
        d.at(24)


def test_derived_fields():
    d = Date(2021, 1, 2)
    assert d.day_of_week() == SATURDAY
    assert d.day_of_year() == 2
    assert d.iso_week() == (2020, 53)
    assert d.quarter() == 1
    assert d.days_in_month() == 31
    assert not d.is_leap_year()
    assert d.gregorian_days() == 738_157
    assert Date(2017, 1, 1).julian_day_number() == 2_457_755


def test_copy():
    d = Date(2021, 1, 2)
    assert copy(d) is d
    assert deepcopy(d) is d
