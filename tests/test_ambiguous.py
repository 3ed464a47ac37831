import logging

import pytest

from wallclock import (
    AmbiguousDateTime,
    Date,
    InvalidField,
    InvalidShift,
    InvalidTimezone,
    NaiveDateTime,
    OffsetRule,
    Period,
    ShiftOverflow,
    StaticPeriodTable,
    ZonedDateTime,
    ZonePeriod,
    construct,
    gregorian_seconds,
    propagate,
)

from .common import CDT, CHICAGO_2016, CST

CHICAGO = "America/Chicago"


def overlap(table=None):
    return construct((2016, 11, 6, 1, 30), CHICAGO, table=table)


def gap(table=None):
    return construct((2016, 3, 13, 2, 30), CHICAGO, table=table)


@pytest.fixture(params=[None, CHICAGO_2016], ids=["zoneinfo", "static"])
def table(request):
    return request.param


class TestConstruct:

    def test_unambiguous(self, table):
        d = construct((2016, 6, 1, 12), CHICAGO, table=table)
        assert isinstance(d, ZonedDateTime)
        assert d.rule == CDT

    def test_gap(self, table):
        d = gap(table)
        assert isinstance(d, AmbiguousDateTime)
        assert d.kind == "gap"
        assert d.before.naive() == NaiveDateTime(2016, 3, 13, 2, 30)
        assert d.before.rule == CST
        assert d.after.naive() == NaiveDateTime(2016, 3, 13, 3, 30)
        assert d.after.rule == CDT
        assert d.secondary is None

    def test_overlap(self, table):
        d = overlap(table)
        assert isinstance(d, AmbiguousDateTime)
        assert d.kind == "ambiguous"
        assert d.before.naive() == d.after.naive()
        assert d.before.offset.in_hours() == -5
        assert d.after.offset.in_hours() == -6

    def test_from_naive(self):
        naive = NaiveDateTime(2016, 6, 1, microsecond=5_000, precision=6)
        d = construct(naive, CHICAGO)
        assert d.naive().exact_eq(naive)

    def test_from_date(self):
        d = construct(Date(2016, 11, 6), CHICAGO)
        assert isinstance(d, ZonedDateTime)
        assert d.naive() == NaiveDateTime(2016, 11, 6)

    def test_precision(self):
        d = construct((2023, 1, 1, 0, 0, 0, 5), "UTC", precision=6)
        assert d.precision == 6
        assert construct((2023, 1, 1, 0, 0, 0, 5), "UTC").precision == 6
        assert construct((2023, 1, 1), "UTC").precision == 0

    def test_strict(self):
        with pytest.raises(InvalidField):
            construct((2023, 2, 31), "Europe/Paris")

    def test_normalized(self):
        d = construct((2023, 2, 31, 25), "Europe/Paris", strict=False)
        assert isinstance(d, ZonedDateTime)
        assert d.naive() == NaiveDateTime(2023, 2, 28, 23)
        assert d.offset.in_hours() == 1

    @pytest.mark.parametrize("fields", [(2023, 1), (2023, 1, 1, 0, 0, 0, 0, 0)])
    def test_wrong_number_of_fields(self, fields):
        with pytest.raises(InvalidField, match="fields"):
            construct(fields, "UTC")

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            construct("2023-01-01", "UTC")  # type: ignore[arg-type]

    def test_unknown_zone(self):
        with pytest.raises(InvalidTimezone):
            construct((2023, 1, 1), "Nowhere/Special")

    def test_gap_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="wallclock"):
            gap()
        assert "falls in a gap" in caplog.text


# Two transitions 30 minutes apart: moving out of the first gap
# lands in the second one.
_A = OffsetRule("Test/Double", "A", 0)
_B = OffsetRule("Test/Double", "B", 3_600)
_C = OffsetRule("Test/Double", "C", 7_200)
_T1 = gregorian_seconds(2020, 1, 1)
_T2 = _T1 + 1_800
DOUBLE_GAP = StaticPeriodTable(
    {
        "Test/Double": [
            ZonePeriod(None, _T1, _A),
            ZonePeriod(_T1, _T2, _B),
            ZonePeriod(_T2, None, _C),
        ]
    }
)


def test_gap_retry_is_not_repeated(caplog):
    with caplog.at_level(logging.DEBUG, logger="wallclock"):
        d = construct((2020, 1, 1, 0, 45), "Test/Double", table=DOUBLE_GAP)
    assert isinstance(d, AmbiguousDateTime)
    assert d.kind == "gap"
    assert d.before.rule == _A
    assert d.after.naive() == NaiveDateTime(2020, 1, 1, 2, 45)
    assert d.after.rule == _C
    assert d.after.as_zoned("Test/Double").exact_eq(d.after)
    assert d.after.as_zoned("UTC").naive() == NaiveDateTime(2020, 1, 1, 0, 45)
    assert "not conclusive" in caplog.text


@pytest.mark.parametrize(
    "fields, tz",
    [
        ((1, 1, 1), "Asia/Tokyo"),
        ((1, 1, 1, 8, 59, 59), "Asia/Tokyo"),
        ((9999, 12, 31, 23), "America/Chicago"),
        ((9999, 12, 31, 18), "America/Chicago"),
    ],
)
def test_instant_out_of_range(fields, tz):
    with pytest.raises(ShiftOverflow):
        construct(fields, tz)
    with pytest.raises(ShiftOverflow):
        ZonedDateTime(*fields, tz=tz)


@pytest.mark.parametrize(
    "fields, tz",
    [
        ((1, 1, 1, 12), "Asia/Tokyo"),
        ((1, 1, 1), "America/Chicago"),
        ((9999, 12, 31, 17), "America/Chicago"),
        ((9999, 12, 31, 23), "Asia/Tokyo"),
    ],
)
def test_instant_at_range_edges(fields, tz):
    d = construct(fields, tz)
    assert isinstance(d, ZonedDateTime)
    assert d.as_zoned("UTC").as_zoned(tz).exact_eq(d)


class TestAmbiguousDateTime:

    def test_repr(self):
        assert repr(gap()) == (
            "AmbiguousDateTime(gap: "
            "2016-03-13 02:30:00-06:00[America/Chicago] ~ "
            "2016-03-13 03:30:00-05:00[America/Chicago])"
        )

    def test_resolve(self):
        d = overlap()
        assert d.resolve("before") is d.before
        assert d.resolve("after") is d.after
        with pytest.raises(ValueError, match="choice"):
            d.resolve("earlier")  # type: ignore[arg-type]

    def test_equality(self):
        assert overlap() == overlap()
        assert hash(overlap()) == hash(overlap())
        assert overlap() != gap()
        assert overlap() != overlap().before

    def test_invalid_kind(self):
        d = overlap()
        with pytest.raises(ValueError, match="kind"):
            AmbiguousDateTime(d.before, d.after, "fold")  # type: ignore[arg-type]


class TestPropagate:

    def test_single_value(self):
        d = ZonedDateTime(2016, 6, 1, tz=CHICAGO)
        assert propagate(d, lambda z: z.shift(days=1)).day == 2

    def test_not_zoned(self):
        with pytest.raises(TypeError):
            propagate(NaiveDateTime(2016, 6, 1), lambda z: z)  # type: ignore

    def test_collapses_when_both_sides_agree(self, table):
        result = overlap(table).shift(days=1)
        assert isinstance(result, ZonedDateTime)
        assert result.naive() == NaiveDateTime(2016, 11, 7, 1, 30)
        assert result.rule == CST

    def test_gap_collapses_in_utc(self):
        result = gap().as_zoned("UTC")
        assert isinstance(result, ZonedDateTime)
        assert result.naive() == NaiveDateTime(2016, 3, 13, 8, 30)

    def test_keeps_ambiguity_when_sides_differ(self):
        result = overlap().as_zoned("UTC")
        assert isinstance(result, AmbiguousDateTime)
        assert result.kind == "ambiguous"
        assert result.before.naive() == NaiveDateTime(2016, 11, 6, 6, 30)
        assert result.after.naive() == NaiveDateTime(2016, 11, 6, 7, 30)

    def test_gap_keeps_kind(self, table):
        result = gap(table).shift(days=1)
        assert isinstance(result, AmbiguousDateTime)
        assert result.kind == "gap"
        assert result.before.naive() == NaiveDateTime(2016, 3, 14, 2, 30)
        assert result.after.naive() == NaiveDateTime(2016, 3, 14, 3, 30)
        assert result.before.rule == result.after.rule == CDT

    def test_both_sides_ambiguous(self, table):
        result = overlap(table).shift(minutes=10)
        assert isinstance(result, AmbiguousDateTime)
        assert result.kind == "ambiguous"
        assert result.before.naive() == NaiveDateTime(2016, 11, 6, 1, 40)
        assert result.secondary == result

    def test_after_side_ambiguous(self, table):
        # 03:30 moves back into the gap, 02:30 CST moves out of it
        result = gap(table).shift(hours=-1)
        assert isinstance(result, AmbiguousDateTime)
        assert result.kind == "gap"
        assert result.after.naive() == NaiveDateTime(2016, 3, 13, 3, 30)
        assert isinstance(result.secondary, ZonedDateTime)
        assert result.secondary.naive() == NaiveDateTime(2016, 3, 13, 1, 30)

    def test_before_side_ambiguous(self, table):
        result = gap(table).shift(minutes=20)
        assert isinstance(result, AmbiguousDateTime)
        assert result.kind == "gap"
        assert result.before.naive() == NaiveDateTime(2016, 3, 13, 2, 50)
        assert isinstance(result.secondary, ZonedDateTime)
        assert result.secondary.naive() == NaiveDateTime(2016, 3, 13, 3, 50)

    def test_one_side_fails(self):
        def only_standard_time(z):
            if z.std_offset:
                raise ShiftOverflow("not today")
            return z.shift(hours=1)

        result = propagate(overlap(), only_standard_time)
        assert isinstance(result, ZonedDateTime)
        assert result.naive() == NaiveDateTime(2016, 11, 6, 2, 30)

    def test_both_sides_fail(self):
        with pytest.raises(InvalidTimezone):
            overlap().as_zoned("Nowhere/Special")

    def test_both_sides_fail_raises_after_error(self):
        def fail(z):
            raise InvalidShift(z.abbreviation)

        with pytest.raises(InvalidShift, match="CST"):
            propagate(overlap(), fail)

    def test_other_errors_are_not_caught(self):
        with pytest.raises(ZeroDivisionError):
            propagate(overlap(), lambda z: 1 / 0)  # type: ignore

    def test_arithmetic(self):
        assert (overlap() + Period(days=1)).naive() == NaiveDateTime(
            2016, 11, 7, 1, 30
        )
        assert (overlap() - Period(days=1)).naive() == NaiveDateTime(
            2016, 11, 5, 1, 30
        )
        with pytest.raises(TypeError, match="unsupported operand"):
            overlap() + 1  # type: ignore[operator]

    def test_replace(self):
        result = overlap().replace(hour=12)
        assert isinstance(result, ZonedDateTime)
        assert result.rule == CST
        assert isinstance(overlap().replace(minute=0), AmbiguousDateTime)

    def test_boundaries(self):
        start = gap().beginning_of_day()
        assert isinstance(start, ZonedDateTime)
        assert start.naive() == NaiveDateTime(2016, 3, 13)
        end = overlap().end_of_month()
        assert isinstance(end, ZonedDateTime)
        assert end.naive() == NaiveDateTime(2016, 11, 30, 23, 59, 59)
        assert overlap().beginning_of_week().naive() == NaiveDateTime(
            2016, 10, 31
        )
