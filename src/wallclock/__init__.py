# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - Why is everything in one file?
#   - Flat is better than nested
#   - It prevents circular imports since the classes 'know' about each other
#   - It's easier to vendor (i.e. copy-paste) this library if needed
# - All "instant seconds" are counted from 0000-01-01T00:00:00 in the
#   proleptic Gregorian calendar. UNIX time only appears at the boundary
#   (timestamp/from_timestamp).
# - Ambiguity is never an exception. The resolver returns Gap/AmbiguousOffset,
#   and everything built on top of it returns AmbiguousDateTime.
#   The only exception is the strict ZonedDateTime() constructor.
from __future__ import annotations

__version__ = "0.1.0"

import logging
import re
from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from datetime import (
    date as _date,
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
)
from operator import attrgetter
from typing import (
    TYPE_CHECKING,
    Callable,
    ClassVar,
    Iterable,
    Literal,
    Mapping,
    Tuple,
    Union,
    overload,
)
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    # calendar
    "MIN_YEAR",
    "MAX_YEAR",
    "UNIX_EPOCH_SECONDS",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
    "is_leap_year",
    "days_in_month",
    "validate_date",
    "validate_time",
    "normalize_date",
    "normalize_time",
    "normalize_subsecond",
    "precision_of",
    "gregorian_days",
    "date_from_gregorian_days",
    "gregorian_seconds",
    "from_gregorian_seconds",
    "day_of_week",
    "day_of_year",
    "iso_week",
    "quarter",
    "julian_day_number",
    "julian_day_of_week",
    # zone resolution
    "OffsetRule",
    "AmbiguousOffset",
    "Gap",
    "ZonePeriod",
    "PeriodTable",
    "ZoneInfoPeriodTable",
    "StaticPeriodTable",
    "Resolver",
    "resolve",
    # values
    "Date",
    "DateTime",
    "NaiveDateTime",
    "ZonedDateTime",
    "AmbiguousDateTime",
    "Duration",
    "Period",
    # engine
    "construct",
    "shift",
    "propagate",
    # errors
    "WallclockError",
    "InvalidField",
    "InvalidTimezone",
    "InvalidShift",
    "ShiftOverflow",
    "AmbiguousTime",
]

_log = logging.getLogger(__name__)

MIN_YEAR = 1
MAX_YEAR = 9999
UNIX_EPOCH_SECONDS = 62_167_219_200
"""Seconds from 0000-01-01T00:00:00 to the UNIX epoch (1970-01-01)"""

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(1, 8)

_SECS_PER_DAY = 86_400
_US_PER_SEC = 1_000_000
# date.toordinal() counts 0001-01-01 as day 1, while gregorian days
# count 0000-01-01 as day 0. Year 0 is a leap year.
_ORDINAL_OFFSET = 365
_MAX_ORDINAL = _date.max.toordinal()
_DAYS_IN_MONTH = (0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class WallclockError(Exception):
    """Base class for all errors raised by this library"""


class InvalidField(WallclockError, ValueError):
    """A calendar or clock field fails strict validation"""


class InvalidTimezone(WallclockError, LookupError):
    """A timezone is not known to the period table"""

    @classmethod
    def for_zone(cls, tz: object) -> InvalidTimezone:
        return cls(f"No timezone found for: {tz!r}")


class InvalidShift(WallclockError, ValueError):
    """A shift was requested with an unknown unit or a non-integer amount"""


class ShiftOverflow(WallclockError, OverflowError):
    """A result would fall outside the supported range of years"""

    @classmethod
    def out_of_range(cls) -> ShiftOverflow:
        return cls(f"Result is outside the years {MIN_YEAR}..{MAX_YEAR}")


class AmbiguousTime(WallclockError):
    """The strict constructor was given a wall-clock time that is
    ambiguous or skipped, and no ``disambiguate=`` choice was made.

    The possible values are available as :attr:`candidates`.
    """

    def __init__(self, candidates: AmbiguousDateTime) -> None:
        self.candidates = candidates
        if candidates.kind == "gap":
            problem = "doesn't exist"
        else:
            problem = "is ambiguous"
        super().__init__(
            f"{candidates.before.naive()} {problem} "
            f"in timezone {candidates.before.tz}"
        )


# ---------------------------------------------------------------------------
# Calendar normalizer
# ---------------------------------------------------------------------------


def is_leap_year(year: int) -> bool:
    """Whether the year is a leap year in the proleptic Gregorian calendar

    >>> is_leap_year(2000), is_leap_year(1900), is_leap_year(2024)
    (True, False, True)
    """
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """The number of days in the given month

    Raises
    ------
    InvalidField
        If the month is not in 1..12
    """
    if not 1 <= month <= 12:
        raise InvalidField(f"Month must be in 1..12, got {month}")
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month]


def validate_date(year: int, month: int, day: int) -> bool:
    """Strictly check a date, without clamping anything"""
    return (
        MIN_YEAR <= year <= MAX_YEAR
        and 1 <= month <= 12
        and 1 <= day <= days_in_month(year, month)
    )


def validate_time(
    hour: int, minute: int, second: int, microsecond: int = 0
) -> bool:
    """Strictly check a time of day. Leap seconds are not supported."""
    return (
        0 <= hour <= 23
        and 0 <= minute <= 59
        and 0 <= second <= 59
        and 0 <= microsecond <= 999_999
    )


def _clamp(value: int, low: int, high: int) -> int:
    return low if value < low else high if value > high else value


def normalize_date(year: int, month: int, day: int) -> Date:
    """Clamp the fields into a valid date. Never fails.

    This is a "best effort" correction, used when setting fields.
    Use :func:`validate_date` if you'd rather reject invalid dates.

    >>> normalize_date(2023, 2, 31)
    Date(2023-02-28)
    >>> normalize_date(2023, 14, 0)
    Date(2023-12-01)
    """
    year = _clamp(year, MIN_YEAR, MAX_YEAR)
    month = _clamp(month, 1, 12)
    day = _clamp(day, 1, days_in_month(year, month))
    return Date._from_py_unchecked(_date(year, month, day))


def normalize_time(hour: int, minute: int, second: int) -> tuple[int, int, int]:
    """Clamp the fields into a valid time of day. Never fails."""
    return _clamp(hour, 0, 23), _clamp(minute, 0, 59), _clamp(second, 0, 59)


def normalize_subsecond(microsecond: int, precision: int) -> tuple[int, int]:
    """Clamp the microseconds and their precision. Never fails."""
    return _clamp(microsecond, 0, 999_999), _clamp(precision, 0, 6)


def precision_of(microsecond: int) -> int:
    """The number of significant fractional digits, ignoring trailing zeros

    >>> precision_of(0), precision_of(5_000), precision_of(123_456)
    (0, 3, 6)
    """
    if not microsecond:
        return 0
    return len(f"{microsecond % _US_PER_SEC:06d}".rstrip("0"))


def _checked_py_date(year: int, month: int, day: int) -> _date:
    if not validate_date(year, month, day):
        raise InvalidField(
            f"Invalid date: year={year}, month={month}, day={day}"
        )
    return _date(year, month, day)


def gregorian_days(year: int, month: int, day: int) -> int:
    """Days since 0000-01-01 in the proleptic Gregorian calendar

    >>> gregorian_days(1, 1, 1)
    366
    """
    return _checked_py_date(year, month, day).toordinal() + _ORDINAL_OFFSET


def date_from_gregorian_days(days: int, /) -> Date:
    """Inverse of :func:`gregorian_days`

    Raises
    ------
    ShiftOverflow
        If the day count is outside the supported range
    """
    return Date._from_py_unchecked(_ordinal_to_date(days - _ORDINAL_OFFSET))


def gregorian_seconds(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
) -> int:
    """Seconds since 0000-01-01T00:00:00, ignoring any timezone

    >>> gregorian_seconds(1970, 1, 1) == UNIX_EPOCH_SECONDS
    True
    """
    if not validate_time(hour, minute, second):
        raise InvalidField(
            f"Invalid time: hour={hour}, minute={minute}, second={second}"
        )
    return (
        gregorian_days(year, month, day) * _SECS_PER_DAY
        + hour * 3600
        + minute * 60
        + second
    )


def from_gregorian_seconds(seconds: int, /) -> NaiveDateTime:
    """Inverse of :func:`gregorian_seconds`"""
    return NaiveDateTime._new(_secs_to_naive(seconds), 0)


def day_of_week(year: int, month: int, day: int) -> int:
    """The ISO day of the week: 1 is Monday and 7 is Sunday"""
    return _checked_py_date(year, month, day).isoweekday()


def day_of_year(year: int, month: int, day: int) -> int:
    """The ordinal day within the year, starting at 1"""
    return _checked_py_date(year, month, day).timetuple().tm_yday


def iso_week(year: int, month: int, day: int) -> tuple[int, int]:
    """The ISO (year, week number) of the date

    >>> iso_week(2021, 1, 2)
    (2020, 53)
    """
    iso = _checked_py_date(year, month, day).isocalendar()
    return iso[0], iso[1]


def quarter(month: int) -> int:
    """The quarter (1..4) in which the month falls"""
    if not 1 <= month <= 12:
        raise InvalidField(f"Month must be in 1..12, got {month}")
    return (month - 1) // 3 + 1


def julian_day_number(year: int, month: int, day: int) -> int:
    """The Julian day number of a (proleptic Gregorian) date.

    This counts days from noon on 1 January 4713 BC (Julian calendar).
    It's only a pure conversion; the Julian calendar isn't supported
    any further.

    >>> julian_day_number(2017, 1, 1)
    2457755
    """
    _checked_py_date(year, month, day)
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    return (
        day
        + (153 * m + 2) // 5
        + 365 * y
        + y // 4
        - y // 100
        + y // 400
        - 32045
    )


def julian_day_of_week(
    year: int, month: int, day: int, weekstart: Literal["sun", "mon"] = "sun"
) -> int:
    """The day of the week derived from the Julian day number.

    With ``weekstart="sun"`` Sunday is 0 and Saturday is 6.
    With ``weekstart="mon"`` Monday is 1 and Sunday is 7.
    """
    cardinal = (julian_day_number(year, month, day) + 1) % 7
    if weekstart == "sun":
        return cardinal
    elif weekstart == "mon":
        return (cardinal + 6) % 7 + 1
    raise ValueError(f"weekstart must be 'sun' or 'mon', got {weekstart!r}")


# ---------------------------------------------------------------------------
# Zone resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OffsetRule:
    """The UTC offset and abbreviation in force in a zone

    Example: America/Chicago observing CDT is
    ``OffsetRule("America/Chicago", "CDT", utc_offset=-21600, std_offset=3600)``
    """

    full_name: str
    abbreviation: str
    utc_offset: int
    """Offset from UTC in seconds, without DST"""
    std_offset: int = 0
    """The DST delta in seconds, on top of :attr:`utc_offset`"""

    @property
    def total_offset(self) -> int:
        """The offset actually applied to UTC, in seconds"""
        return self.utc_offset + self.std_offset


@dataclass(frozen=True)
class AmbiguousOffset:
    """A wall-clock reading occurs twice: once under each rule"""

    before: OffsetRule
    after: OffsetRule


@dataclass(frozen=True)
class Gap:
    """A wall-clock reading was skipped. ``after`` is the rule that
    becomes active immediately after the gap."""

    before: OffsetRule
    after: OffsetRule

    @property
    def size(self) -> int:
        """How many seconds the clocks jumped forward"""
        return self.after.total_offset - self.before.total_offset


Resolution = Union[OffsetRule, AmbiguousOffset, Gap]
Mode = Literal["utc", "wall"]


@dataclass(frozen=True)
class ZonePeriod:
    """A row of a :class:`StaticPeriodTable`: a rule with its
    ``[valid_from, valid_until)`` range in UTC gregorian seconds.
    ``None`` means the range is unbounded on that side."""

    valid_from: int | None
    valid_until: int | None
    rule: OffsetRule

    def contains(self, utc_seconds: int) -> bool:
        return (self.valid_from is None or self.valid_from <= utc_seconds) and (
            self.valid_until is None or utc_seconds < self.valid_until
        )

    def contains_wall(self, wall_seconds: int) -> bool:
        return self.contains(wall_seconds - self.rule.total_offset)


class PeriodTable(ABC):
    """The timezone database, as seen by the :class:`Resolver`.

    Implementations must be read-only once constructed.
    All instants are gregorian seconds (since 0000-01-01T00:00:00).
    """

    __slots__ = ()

    @abstractmethod
    def __contains__(self, zone: object) -> bool:
        """Whether the zone name is known"""

    @abstractmethod
    def rule_at(self, zone: str, utc_seconds: int) -> OffsetRule:
        """The rule in force at the given UTC instant"""

    @abstractmethod
    def candidates(
        self, zone: str, wall_seconds: int
    ) -> tuple[OffsetRule, OffsetRule]:
        """The rules in force just before and just after any transition
        near the given wall-clock reading. Both are the same rule
        if there is no transition nearby."""


def _rule_from_py(zone: str, dt: _datetime) -> OffsetRule:
    offset = dt.utcoffset() or _timedelta()
    dst = dt.dst() or _timedelta()
    return OffsetRule(
        full_name=zone,
        abbreviation=dt.tzname() or "",
        utc_offset=int((offset - dst).total_seconds()),
        std_offset=int(dst.total_seconds()),
    )


class ZoneInfoPeriodTable(PeriodTable):
    """Period table backed by the IANA database through :mod:`zoneinfo`.

    Zone data comes from the system or the ``tzdata`` package.
    The search path is configured the standard way
    (``PYTHONTZPATH`` or :func:`zoneinfo.reset_tzpath`).
    """

    __slots__ = ()

    def __contains__(self, zone: object) -> bool:
        if not isinstance(zone, str):
            return False
        try:
            ZoneInfo(zone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            _log.debug("Zone %r could not be loaded: %s", zone, e)
            return False
        return True

    def rule_at(self, zone: str, utc_seconds: int) -> OffsetRule:
        try:
            local = (
                _secs_to_naive(utc_seconds)
                .replace(tzinfo=_UTC)
                .astimezone(ZoneInfo(zone))
            )
        except OverflowError as e:
            raise ShiftOverflow.out_of_range() from e
        return _rule_from_py(zone, local)

    def candidates(
        self, zone: str, wall_seconds: int
    ) -> tuple[OffsetRule, OffsetRule]:
        # PEP 495: fold=0 gives the offset before a transition,
        # fold=1 the offset after it. This holds for gaps and overlaps.
        wall = _secs_to_naive(wall_seconds).replace(tzinfo=ZoneInfo(zone))
        return (
            _rule_from_py(zone, wall),
            _rule_from_py(zone, wall.replace(fold=1)),
        )

    def __repr__(self) -> str:
        return "ZoneInfoPeriodTable()"


def _check_periods(
    zone: str, periods: Iterable[ZonePeriod]
) -> tuple[tuple[ZonePeriod, ...], tuple[float, ...]]:
    ordered = tuple(
        sorted(
            periods,
            key=lambda p: (
                float("-inf") if p.valid_from is None else p.valid_from
            ),
        )
    )
    if not ordered:
        raise ValueError(f"Zone {zone!r} has no periods")
    for period in ordered:
        if period.rule.full_name != zone:
            raise ValueError(
                f"Period for {zone!r} has a rule named "
                f"{period.rule.full_name!r}"
            )
    for prev, nxt in zip(ordered, ordered[1:]):
        if (
            prev.valid_until is None
            or nxt.valid_from is None
            or prev.valid_until > nxt.valid_from
        ):
            raise ValueError(f"Periods of {zone!r} overlap")
    starts = tuple(
        float("-inf") if p.valid_from is None else p.valid_from
        for p in ordered
    )
    return ordered, starts


class StaticPeriodTable(PeriodTable):
    """An explicit, in-memory period table.

    Example
    -------

    >>> cst = OffsetRule("America/Chicago", "CST", -21600)
    >>> cdt = OffsetRule("America/Chicago", "CDT", -21600, 3600)
    >>> switch = gregorian_seconds(2016, 3, 13, 8)
    >>> table = StaticPeriodTable({
    ...     "America/Chicago": [
    ...         ZonePeriod(None, switch, cst),
    ...         ZonePeriod(switch, None, cdt),
    ...     ]
    ... })

    Periods are sorted by ``valid_from`` and must not overlap.
    Each rule's ``full_name`` must equal the zone name it's listed under.
    """

    __slots__ = ("_zones",)

    def __init__(self, zones: Mapping[str, Iterable[ZonePeriod]]) -> None:
        self._zones = {
            zone: _check_periods(zone, periods)
            for zone, periods in zones.items()
        }

    def __contains__(self, zone: object) -> bool:
        return zone in self._zones

    def _periods(self, zone: str) -> tuple[ZonePeriod, ...]:
        try:
            return self._zones[zone][0]
        except KeyError:
            raise InvalidTimezone.for_zone(zone) from None

    def rule_at(self, zone: str, utc_seconds: int) -> OffsetRule:
        periods = self._periods(zone)
        index = bisect_right(self._zones[zone][1], utc_seconds) - 1
        if index >= 0 and periods[index].contains(utc_seconds):
            return periods[index].rule
        raise InvalidTimezone(
            f"No period of {zone!r} covers {_secs_to_naive(utc_seconds)} UTC"
        )

    def candidates(
        self, zone: str, wall_seconds: int
    ) -> tuple[OffsetRule, OffsetRule]:
        periods = self._periods(zone)
        matches = [p for p in periods if p.contains_wall(wall_seconds)]
        if matches:
            return matches[0].rule, matches[-1].rule
        # Skipped reading: report the rules on either side of the hole
        for prev, nxt in zip(periods, periods[1:]):
            # _check_periods guarantees inner bounds are set
            assert prev.valid_until is not None and nxt.valid_from is not None
            if (
                prev.valid_until + prev.rule.total_offset
                <= wall_seconds
                < nxt.valid_from + nxt.rule.total_offset
            ):
                return prev.rule, nxt.rule
        raise InvalidTimezone(
            f"No period of {zone!r} covers {_secs_to_naive(wall_seconds)}"
        )

    def __repr__(self) -> str:
        return f"StaticPeriodTable({sorted(self._zones)!r})"


_UTC_ALIASES = frozenset({"Z", "UT", "UTC", "GMT"})
_match_numeric_offset = re.compile(r"([+-])(\d{2}):?(\d{2})?").fullmatch


def _zone_key(tz: str | int) -> str:
    """Normalize shorthand zone identities to IANA names"""
    if isinstance(tz, bool) or not isinstance(tz, (str, int)):
        raise TypeError(f"Timezone must be a str or int, got {tz!r}")
    if isinstance(tz, int):
        hours = tz
    elif tz in _UTC_ALIASES:
        return "Etc/UTC"
    elif match := _match_numeric_offset(tz):
        sign, hh, mm = match.groups()
        if mm and int(mm):
            raise InvalidTimezone(
                f"Only whole-hour offsets can be used as a timezone, got {tz!r}"
            )
        hours = -int(hh) if sign == "-" else int(hh)
    else:
        return tz
    if hours == 0:
        return "Etc/UTC"
    if not -12 <= hours <= 14:
        raise InvalidTimezone.for_zone(tz)
    # POSIX-style names have an inverted sign
    return f"Etc/GMT{-hours:+d}"


class Resolver:
    """Finds the offset rule for a zone at an instant, given a period table.

    Example
    -------

    >>> r = Resolver(ZoneInfoPeriodTable())
    >>> r.resolve("America/Chicago", gregorian_seconds(2016, 3, 13, 2, 30))
    Gap(before=OffsetRule(...CST...), after=OffsetRule(...CDT...))
    """

    __slots__ = ("table",)

    def __init__(self, table: PeriodTable) -> None:
        self.table = table

    def zone_name(self, tz: str | int) -> str:
        """Normalize the timezone identity and check that it's known.

        Raises
        ------
        InvalidTimezone
            If the zone isn't in the period table
        """
        name = _zone_key(tz)
        if name not in self.table:
            raise InvalidTimezone.for_zone(tz)
        return name

    def resolve(
        self, tz: str | int, seconds: int, mode: Mode = "wall"
    ) -> Resolution:
        """Resolve the rule at ``seconds``, read either as a UTC instant
        or as a wall-clock reading in the zone.

        In ``"utc"`` mode, the result is always a single rule.
        In ``"wall"`` mode, the reading may occur twice
        (:class:`AmbiguousOffset`) or not at all (:class:`Gap`).
        """
        zone = self.zone_name(tz)
        if mode == "utc":
            return self.table.rule_at(zone, seconds)
        elif mode != "wall":
            raise ValueError(f"mode must be 'utc' or 'wall', got {mode!r}")

        before, after = self.table.candidates(zone, seconds)
        if before == after:
            return before
        rule_at = self.table.rule_at
        before_ok = rule_at(zone, seconds - before.total_offset) == before
        after_ok = rule_at(zone, seconds - after.total_offset) == after
        if before_ok and after_ok:
            _log.debug(
                "%s is ambiguous in %s (%s or %s)",
                _secs_to_naive(seconds),
                zone,
                before.abbreviation,
                after.abbreviation,
            )
            return AmbiguousOffset(before, after)
        elif before_ok:
            return before
        elif after_ok:
            return after
        _log.debug(
            "%s falls in a gap in %s (%s -> %s)",
            _secs_to_naive(seconds),
            zone,
            before.abbreviation,
            after.abbreviation,
        )
        return Gap(before, after)

    def __repr__(self) -> str:
        return f"Resolver({self.table!r})"


_DEFAULT_RESOLVER = Resolver(ZoneInfoPeriodTable())


def _resolver_for(table: PeriodTable | None) -> Resolver:
    return _DEFAULT_RESOLVER if table is None else Resolver(table)


def resolve(
    tz: str | int,
    seconds: int,
    mode: Mode = "wall",
    *,
    table: PeriodTable | None = None,
) -> Resolution:
    """Shortcut for ``Resolver(table).resolve(tz, seconds, mode)``.
    Without a table, the IANA database from :mod:`zoneinfo` is used."""
    return _resolver_for(table).resolve(tz, seconds, mode)


# ---------------------------------------------------------------------------
# Amounts of time
# ---------------------------------------------------------------------------


class Duration:
    """A fixed amount of clock time, stored with microsecond precision.

    The inputs are summed, so 90 minutes equals 1 hour and 30 minutes.

    >>> Duration(hours=1, minutes=30)
    Duration(01:30:00)
    """

    __slots__ = ("_micros",)

    def __init__(
        self,
        *,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: int = 0,
    ) -> None:
        assert type(microseconds) is int  # catch this common mistake
        # Cast individual components to int to avoid floating point errors
        self._micros = (
            int(hours * 3_600_000_000)
            + int(minutes * 60_000_000)
            + int(seconds * 1_000_000)
            + int(milliseconds * 1_000)
            + microseconds
        )

    ZERO: ClassVar[Duration]

    def in_hours(self) -> float:
        return self._micros / 3_600_000_000

    def in_minutes(self) -> float:
        return self._micros / 60_000_000

    def in_seconds(self) -> float:
        return self._micros / 1_000_000

    def in_microseconds(self) -> int:
        return self._micros

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._micros == other._micros

    def __hash__(self) -> int:
        return hash(self._micros)

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._micros < other._micros

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._micros <= other._micros

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._micros > other._micros

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._micros >= other._micros

    def __bool__(self) -> bool:
        return bool(self._micros)

    def __add__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(microseconds=self._micros + other._micros)

    def __sub__(self, other: Duration) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(microseconds=self._micros - other._micros)

    def __mul__(self, other: float) -> Duration:
        if not isinstance(other, (int, float)):
            return NotImplemented
        return Duration(microseconds=int(self._micros * other))

    def __neg__(self) -> Duration:
        return Duration(microseconds=-self._micros)

    def __abs__(self) -> Duration:
        return Duration(microseconds=abs(self._micros))

    @overload
    def __truediv__(self, other: float) -> Duration: ...

    @overload
    def __truediv__(self, other: Duration) -> float: ...

    def __truediv__(self, other: float | Duration) -> Duration | float:
        if isinstance(other, Duration):
            return self._micros / other._micros
        elif isinstance(other, (int, float)):
            return Duration(microseconds=int(self._micros / other))
        return NotImplemented

    def as_tuple(self) -> tuple[int, int, int, int]:
        """(hours, minutes, seconds, microseconds), all with the same sign

        >>> Duration(hours=-1, minutes=-30).as_tuple()
        (-1, -30, 0, 0)
        """
        hours, rem = divmod(abs(self._micros), 3_600_000_000)
        mins, rem = divmod(rem, 60_000_000)
        secs, us = divmod(rem, 1_000_000)
        if self._micros < 0:
            return -hours, -mins, -secs, -us
        return hours, mins, secs, us

    def py_timedelta(self) -> _timedelta:
        return _timedelta(microseconds=self._micros)

    @classmethod
    def from_py_timedelta(cls, td: _timedelta, /) -> Duration:
        return cls(
            microseconds=(td.days * _SECS_PER_DAY + td.seconds) * _US_PER_SEC
            + td.microseconds
        )

    def as_period(self) -> Period:
        """The clock components as a :class:`Period`"""
        hrs, mins, secs, us = self.as_tuple()
        return Period(hours=hrs, minutes=mins, seconds=secs, microseconds=us)

    def canonical_format(self) -> str:
        """Format as ``[-]HH:MM:SS[.ffffff]``. Hours may exceed 24.

        >>> Duration(hours=400, microseconds=500).canonical_format()
        '400:00:00.0005'
        """
        hrs, mins, secs, us = abs(self).as_tuple()
        return (
            f"{'-' * (self._micros < 0)}{hrs:02}:{mins:02}:{secs:02}"
            + f".{us:06}".rstrip("0") * bool(us)
        )

    __str__ = canonical_format

    def __repr__(self) -> str:
        return f"Duration({self})"


Duration.ZERO = Duration()


_PERIOD_UNITS = (
    "years",
    "months",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "microseconds",
)


class Period:
    """A bag of calendar and clock units, applied by :func:`shift`.

    The fields are kept as given: "90 minutes" isn't "1 hour and 30 minutes".
    Only microseconds overflow into seconds.

    >>> Period(months=1, days=-3, hours=2)
    Period(P1M-3DT2H)
    """

    __slots__ = (
        "_years",
        "_months",
        "_weeks",
        "_days",
        "_hours",
        "_minutes",
        "_seconds",
        "_microseconds",
    )

    ZERO: ClassVar[Period]

    def __init__(
        self,
        *,
        years: int = 0,
        months: int = 0,
        weeks: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        microseconds: int = 0,
    ) -> None:
        self._years = years
        self._months = months
        self._weeks = weeks
        self._days = days
        self._hours = hours
        self._minutes = minutes
        extra_seconds, self._microseconds = divmod(microseconds, _US_PER_SEC)
        self._seconds = seconds + extra_seconds

    years = property(attrgetter("_years"))
    months = property(attrgetter("_months"))
    weeks = property(attrgetter("_weeks"))
    days = property(attrgetter("_days"))
    hours = property(attrgetter("_hours"))
    minutes = property(attrgetter("_minutes"))
    seconds = property(attrgetter("_seconds"))
    microseconds = property(attrgetter("_microseconds"))

    def as_tuple(self) -> tuple[int, int, int, int, int, int, int, int]:
        return (
            self._years,
            self._months,
            self._weeks,
            self._days,
            self._hours,
            self._minutes,
            self._seconds,
            self._microseconds,
        )

    def deltas(self) -> tuple[tuple[str, int], ...]:
        """The non-zero fields as ``(unit, amount)`` pairs, largest first

        >>> Period(weeks=2, minutes=-5).deltas()
        (('weeks', 2), ('minutes', -5))
        """
        return tuple(
            (unit, amount)
            for unit, amount in zip(_PERIOD_UNITS, self.as_tuple())
            if amount
        )

    def time_component(self) -> Duration:
        return Duration(
            hours=self._hours,
            minutes=self._minutes,
            seconds=self._seconds,
            microseconds=self._microseconds,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __bool__(self) -> bool:
        return any(self.as_tuple())

    def __neg__(self) -> Period:
        return Period(**{unit: -amount for unit, amount in self.deltas()})

    def __mul__(self, factor: int) -> Period:
        if not isinstance(factor, int):
            return NotImplemented
        return Period(
            **{unit: amount * factor for unit, amount in self.deltas()}
        )

    def __add__(self, other: Period | Duration) -> Period:
        if isinstance(other, Duration):
            other = other.as_period()
        elif not isinstance(other, Period):
            return NotImplemented
        return Period(
            **{
                unit: mine + theirs
                for unit, mine, theirs in zip(
                    _PERIOD_UNITS, self.as_tuple(), other.as_tuple()
                )
            }
        )

    def __radd__(self, other: Duration) -> Period:
        if isinstance(other, Duration):
            return self + other
        return NotImplemented

    def __sub__(self, other: Period | Duration) -> Period:
        if not isinstance(other, (Period, Duration)):
            return NotImplemented
        return self + (-other)

    def replace(self, **fields: int) -> Period:
        """A new period with the given fields replaced

        >>> Period(years=1, days=2).replace(days=5)
        Period(P1Y5D)
        """
        if unknown := fields.keys() - set(_PERIOD_UNITS):
            raise TypeError(f"Unknown field(s): {', '.join(sorted(unknown))}")
        return Period(**{**dict(zip(_PERIOD_UNITS, self.as_tuple())), **fields})

    def canonical_format(self) -> str:
        """Format in the ISO 8601 duration format, e.g. ``P1Y2MT3H``.
        Signs are kept per field."""
        if self._microseconds:
            total = self._seconds * _US_PER_SEC + self._microseconds
            secs, us = divmod(abs(total), _US_PER_SEC)
            seconds = f"{'-' * (total < 0)}{secs}." + f"{us:06d}".rstrip("0")
        else:
            seconds = str(self._seconds)
        date = (
            f"{self._years}Y" * bool(self._years),
            f"{self._months}M" * bool(self._months),
            f"{self._weeks}W" * bool(self._weeks),
            f"{self._days}D" * bool(self._days),
        )
        time = (
            f"{self._hours}H" * bool(self._hours),
            f"{self._minutes}M" * bool(self._minutes),
            f"{seconds}S" * bool(self._seconds or self._microseconds),
        )
        return "P" + (
            "".join((*date, "T" if any(time) else "", *time)) or "0D"
        )

    __str__ = canonical_format

    def __repr__(self) -> str:
        return f"Period({self})"


Period.ZERO = Period()


# ---------------------------------------------------------------------------
# Shift engine: pure calendar arithmetic
# ---------------------------------------------------------------------------

_CLOCK_UNITS = {
    "hours": 3_600_000_000,
    "minutes": 60_000_000,
    "seconds": 1_000_000,
    "milliseconds": 1_000,
    "microseconds": 1,
}

Deltas = Union[
    Period, Duration, Mapping[str, object], Iterable[Tuple[str, object]]
]


def _collect_shifts(
    deltas: Deltas, units: Mapping[str, object]
) -> tuple[int, int, int, int]:
    """Partition the deltas into (years, months, days, microseconds).
    Weeks are folded into days, clock units into microseconds."""
    if isinstance(deltas, Period):
        pairs: Iterable[object] = deltas.deltas()
    elif isinstance(deltas, Duration):
        pairs = (("duration", deltas),)
    elif isinstance(deltas, Mapping):
        pairs = deltas.items()
    else:
        pairs = deltas
    years = months = days = micros = 0
    for item in (*pairs, *units.items()):
        try:
            unit, amount = item  # type: ignore[misc]
        except (TypeError, ValueError):
            raise InvalidShift(
                f"Expected a (unit, amount) pair, got {item!r}"
            ) from None
        if unit == "duration":
            if not isinstance(amount, Duration):
                raise InvalidShift(f"Expected a Duration, got {amount!r}")
            micros += amount.in_microseconds()
            continue
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidShift(
                f"Shift amounts must be integers, got {unit}={amount!r}"
            )
        if unit == "years":
            years += amount
        elif unit == "months":
            months += amount
        elif unit == "weeks":
            days += amount * 7
        elif unit == "days":
            days += amount
        elif unit in _CLOCK_UNITS:
            micros += amount * _CLOCK_UNITS[unit]
        else:
            raise InvalidShift(f"Unknown shift unit: {unit!r}")
    return years, months, days, micros


def _ordinal_to_date(ordinal: int) -> _date:
    if not 1 <= ordinal <= _MAX_ORDINAL:
        raise ShiftOverflow.out_of_range()
    return _date.fromordinal(ordinal)


def _shift_date(d: _date, years: int, months: int, days: int) -> _date:
    """Apply logical units: years, then months, then days.
    The day is clamped to the end of the month after each step."""
    year, month, day = d.year, d.month, d.day
    if years:
        year += years
        day = min(day, days_in_month(year, month))
    if months:
        year_overflow, month_index = divmod(month - 1 + months, 12)
        year += year_overflow
        month = month_index + 1
        day = min(day, days_in_month(year, month))
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ShiftOverflow.out_of_range()
    result = _date(year, month, day)
    if days:
        result = _ordinal_to_date(result.toordinal() + days)
    return result


def _wall_seconds(dt: _datetime) -> int:
    return (
        (dt.toordinal() + _ORDINAL_OFFSET) * _SECS_PER_DAY
        + dt.hour * 3600
        + dt.minute * 60
        + dt.second
    )


def _secs_to_naive(seconds: int, microsecond: int = 0) -> _datetime:
    days, rem = divmod(seconds, _SECS_PER_DAY)
    d = _ordinal_to_date(days - _ORDINAL_OFFSET)
    hour, rem = divmod(rem, 3600)
    minute, second = divmod(rem, 60)
    return _datetime(d.year, d.month, d.day, hour, minute, second, microsecond)


def _shift_wall(
    dt: _datetime,
    precision: int,
    years: int,
    months: int,
    days: int,
    micros: int,
) -> tuple[_datetime, int]:
    """Shift a wall-clock reading. No timezone is involved here."""
    d = _shift_date(dt.date(), years, months, days)
    shifted = _datetime.combine(d, dt.time())
    if not micros:
        return shifted, precision
    seconds, us = divmod(
        _wall_seconds(shifted) * _US_PER_SEC + shifted.microsecond + micros,
        _US_PER_SEC,
    )
    return _secs_to_naive(seconds, us), max(precision, precision_of(us))


def _max_fraction(precision: int) -> int:
    # 999_999 truncated to the given number of digits
    return 999_999 - 999_999 % 10 ** (6 - precision)


def _format_fraction(microsecond: int, precision: int) -> str:
    return f".{microsecond:06d}"[: precision + 1] if precision else ""


def _format_offset(seconds: int) -> str:
    sign = "-" if seconds < 0 else "+"
    hrs, rem = divmod(abs(seconds), 3600)
    mins, secs = divmod(rem, 60)
    return f"{sign}{hrs:02}:{mins:02}" + f":{secs:02}" * bool(secs)


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class Date:
    """A date without a time component

    >>> Date(2021, 1, 2)
    Date(2021-01-02)
    """

    __slots__ = ("_py_date",)

    def __init__(self, year: int, month: int, day: int) -> None:
        self._py_date = _checked_py_date(year, month, day)

    year = property(attrgetter("_py_date.year"))
    month = property(attrgetter("_py_date.month"))
    day = property(attrgetter("_py_date.day"))

    @classmethod
    def _from_py_unchecked(cls, d: _date, /) -> Date:
        self = _object_new(cls)
        self._py_date = d
        return self

    @classmethod
    def from_py_date(cls, d: _date, /) -> Date:
        return cls._from_py_unchecked(d)

    def py_date(self) -> _date:
        return self._py_date

    def canonical_format(self) -> str:
        return self._py_date.isoformat()

    __str__ = canonical_format

    def __repr__(self) -> str:
        return f"Date({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date == other._py_date

    def __hash__(self) -> int:
        return hash(self._py_date)

    def __lt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date < other._py_date

    def __le__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date <= other._py_date

    def __gt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date > other._py_date

    def __ge__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._py_date >= other._py_date

    def shift(self, deltas: Deltas = (), /, **units: int) -> Date:
        """Shift the date. Units are applied in the order years, months,
        then weeks and days, regardless of the order given.
        Clock units are applied to midnight, and the time is dropped.

        >>> Date(2020, 2, 29).shift(years=1)
        Date(2021-02-28)
        >>> Date(2023, 1, 31).shift(months=1, days=1)
        Date(2023-03-01)
        """
        years, months, days, micros = _collect_shifts(deltas, units)
        if not (years or months or days or micros):
            return self
        shifted, _ = _shift_wall(
            _datetime.combine(self._py_date, _datetime.min.time()),
            0,
            years,
            months,
            days,
            micros,
        )
        return Date._from_py_unchecked(shifted.date())

    def __add__(self, delta: Period) -> Date:
        if not isinstance(delta, Period):
            return NotImplemented
        return self.shift(delta)

    def __sub__(self, delta: Period) -> Date:
        if not isinstance(delta, Period):
            return NotImplemented
        return self.shift(-delta)

    def at(
        self,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        microsecond: int = 0,
        *,
        precision: int | None = None,
    ) -> NaiveDateTime:
        """Combine with a time of day"""
        return NaiveDateTime(
            self.year,
            self.month,
            self.day,
            hour,
            minute,
            second,
            microsecond,
            precision=precision,
        )

    def gregorian_days(self) -> int:
        return self._py_date.toordinal() + _ORDINAL_OFFSET

    def day_of_week(self) -> int:
        """The ISO day of the week, where 1 is Monday and 7 is Sunday

        >>> Date(2021, 1, 2).day_of_week() == SATURDAY
        True
        """
        return self._py_date.isoweekday()

    def day_of_year(self) -> int:
        return self._py_date.timetuple().tm_yday

    def iso_week(self) -> tuple[int, int]:
        iso = self._py_date.isocalendar()
        return iso[0], iso[1]

    def quarter(self) -> int:
        return quarter(self.month)

    def days_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    def is_leap_year(self) -> bool:
        return is_leap_year(self.year)

    def julian_day_number(self) -> int:
        return julian_day_number(self.year, self.month, self.day)

    def __copy__(self) -> Date:
        return self

    def __deepcopy__(self, _: object) -> Date:
        return self


_FIELD_NAMES = frozenset(
    {
        "year",
        "month",
        "day",
        "hour",
        "minute",
        "second",
        "microsecond",
        "precision",
    }
)


def _checked_fields(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    precision: int | None,
) -> tuple[_datetime, int]:
    _checked_py_date(year, month, day)
    if not validate_time(hour, minute, second, microsecond):
        raise InvalidField(
            f"Invalid time: hour={hour}, minute={minute}, "
            f"second={second}, microsecond={microsecond}"
        )
    if precision is None:
        precision = precision_of(microsecond)
    elif not 0 <= precision <= 6:
        raise InvalidField(f"Precision must be in 0..6, got {precision}")
    return (
        _datetime(year, month, day, hour, minute, second, microsecond),
        precision,
    )


def _normalized_fields(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    precision: int | None,
) -> tuple[_datetime, int]:
    d = normalize_date(year, month, day)
    hour, minute, second = normalize_time(hour, minute, second)
    microsecond, precision = normalize_subsecond(
        microsecond,
        precision_of(microsecond) if precision is None else precision,
    )
    return (
        _datetime(d.year, d.month, d.day, hour, minute, second, microsecond),
        precision,
    )


def _replaced_fields(
    dt: _datetime, precision: int, fields: Mapping[str, int], validate: bool
) -> tuple[_datetime, int]:
    if unknown := fields.keys() - _FIELD_NAMES:
        raise TypeError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    if "precision" in fields:
        precision = fields["precision"]
    elif "microsecond" in fields:
        precision = precision_of(fields["microsecond"])
    return (_normalized_fields if validate else _checked_fields)(
        fields.get("year", dt.year),
        fields.get("month", dt.month),
        fields.get("day", dt.day),
        fields.get("hour", dt.hour),
        fields.get("minute", dt.minute),
        fields.get("second", dt.second),
        fields.get("microsecond", dt.microsecond),
        precision,
    )


_Result = Union["NaiveDateTime", "ZonedDateTime", "AmbiguousDateTime"]


class DateTime(ABC):
    """Abstract base class for :class:`NaiveDateTime` and :class:`ZonedDateTime`

    Holds the calendar fields and the fractional-second precision:
    how many of the 6 microsecond digits are significant.
    """

    __slots__ = ("_py_dt", "_precision", "__weakref__")
    _py_dt: _datetime
    _precision: int

    if TYPE_CHECKING:

        @property
        def year(self) -> int: ...

        @property
        def month(self) -> int: ...

        @property
        def day(self) -> int: ...

        @property
        def hour(self) -> int: ...

        @property
        def minute(self) -> int: ...

        @property
        def second(self) -> int: ...

        @property
        def microsecond(self) -> int: ...

    else:
        # Defining properties this way is faster than declaring a `def`,
        # but the type checker doesn't like it.
        year = property(attrgetter("_py_dt.year"))
        month = property(attrgetter("_py_dt.month"))
        day = property(attrgetter("_py_dt.day"))
        hour = property(attrgetter("_py_dt.hour"))
        minute = property(attrgetter("_py_dt.minute"))
        second = property(attrgetter("_py_dt.second"))
        microsecond = property(attrgetter("_py_dt.microsecond"))

    @property
    def precision(self) -> int:
        """The number of significant fractional-second digits (0..6)"""
        return self._precision

    def date(self) -> Date:
        return Date._from_py_unchecked(self._py_dt.date())

    def naive(self) -> NaiveDateTime:
        """The wall-clock fields, without any zone"""
        return NaiveDateTime._new(self._py_dt, self._precision)

    @abstractmethod
    def canonical_format(self, sep: Literal[" ", "T"] = "T") -> str:
        """Format as text. Each subclass has a different format."""

    def __str__(self) -> str:
        return self.canonical_format(" ")

    @abstractmethod
    def _rebuild(self, dt: _datetime, precision: int) -> _Result:
        """Create a value of the same kind from new wall-clock fields"""

    def shift(self, deltas: Deltas = (), /, **units: int) -> _Result:
        """Shift by calendar and clock units.

        Logical units (years, months, weeks, days) are applied first,
        largest to smallest, clamping the day at the end of the month.
        Clock units (hours down to microseconds) are then added as a single
        amount to the wall-clock time.

        >>> d = NaiveDateTime(2024, 1, 31, 12)
        >>> d.shift(months=1)
        NaiveDateTime(2024-02-29 12:00:00)
        >>> d.shift([("hours", 1), ("months", 1)])
        NaiveDateTime(2024-02-29 13:00:00)
        """
        years, months, days, micros = _collect_shifts(deltas, units)
        if not (years or months or days or micros):
            return self
        return self._rebuild(
            *_shift_wall(
                self._py_dt, self._precision, years, months, days, micros
            )
        )

    def beginning_of_day(self) -> _Result:
        return self._rebuild(
            self._py_dt.replace(hour=0, minute=0, second=0, microsecond=0),
            self._precision,
        )

    def end_of_day(self) -> _Result:
        return self._rebuild(
            self._py_dt.replace(
                hour=23,
                minute=59,
                second=59,
                microsecond=_max_fraction(self._precision),
            ),
            self._precision,
        )

    def beginning_of_week(self, weekstart: int = MONDAY) -> _Result:
        """Midnight on the first day of the week (1 is Monday, 7 is Sunday)"""
        if not MONDAY <= weekstart <= SUNDAY:
            raise ValueError(f"weekstart must be in 1..7, got {weekstart}")
        days_back = (self._py_dt.isoweekday() - weekstart) % 7
        start = _shift_date(self._py_dt.date(), 0, 0, -days_back)
        return self._rebuild(
            _datetime.combine(start, _datetime.min.time()), self._precision
        )

    def end_of_week(self, weekstart: int = MONDAY) -> _Result:
        if not MONDAY <= weekstart <= SUNDAY:
            raise ValueError(f"weekstart must be in 1..7, got {weekstart}")
        days_ahead = (weekstart - self._py_dt.isoweekday() - 1) % 7
        end = _shift_date(self._py_dt.date(), 0, 0, days_ahead)
        return self._rebuild(
            _datetime(
                end.year,
                end.month,
                end.day,
                23,
                59,
                59,
                _max_fraction(self._precision),
            ),
            self._precision,
        )

    def beginning_of_month(self) -> _Result:
        return self._rebuild(
            _datetime(self.year, self.month, 1), self._precision
        )

    def end_of_month(self) -> _Result:
        return self._rebuild(
            _datetime(
                self.year,
                self.month,
                days_in_month(self.year, self.month),
                23,
                59,
                59,
                _max_fraction(self._precision),
            ),
            self._precision,
        )

    def beginning_of_quarter(self) -> _Result:
        return self._rebuild(
            _datetime(self.year, 3 * quarter(self.month) - 2, 1),
            self._precision,
        )

    def end_of_quarter(self) -> _Result:
        month = 3 * quarter(self.month)
        return self._rebuild(
            _datetime(
                self.year,
                month,
                days_in_month(self.year, month),
                23,
                59,
                59,
                _max_fraction(self._precision),
            ),
            self._precision,
        )

    def beginning_of_year(self) -> _Result:
        return self._rebuild(_datetime(self.year, 1, 1), self._precision)

    def end_of_year(self) -> _Result:
        return self._rebuild(
            _datetime(
                self.year, 12, 31, 23, 59, 59, _max_fraction(self._precision)
            ),
            self._precision,
        )

    def day_of_week(self) -> int:
        return self._py_dt.isoweekday()

    def day_of_year(self) -> int:
        return self._py_dt.timetuple().tm_yday

    def iso_week(self) -> tuple[int, int]:
        return iso_week(self.year, self.month, self.day)

    def quarter(self) -> int:
        return quarter(self.month)

    def days_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    def is_leap_year(self) -> bool:
        return is_leap_year(self.year)

    def julian_day_number(self) -> int:
        return julian_day_number(self.year, self.month, self.day)

    # We don't need to copy, because it's immutable
    def __copy__(self) -> DateTime:
        return self

    def __deepcopy__(self, _: object) -> DateTime:
        return self


class NaiveDateTime(DateTime):
    """Calendar fields without any timezone.

    Shifting a naive datetime never needs a timezone lookup.
    Use :meth:`assume_zoned` to attach a zone.

    >>> NaiveDateTime(2020, 8, 15, 23, 12, microsecond=500_000)
    NaiveDateTime(2020-08-15 23:12:00.5)
    """

    __slots__ = ()

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        microsecond: int = 0,
        *,
        precision: int | None = None,
    ) -> None:
        self._py_dt, self._precision = _checked_fields(
            year, month, day, hour, minute, second, microsecond, precision
        )

    @classmethod
    def _new(cls, dt: _datetime, precision: int) -> NaiveDateTime:
        self = _object_new(cls)
        self._py_dt = dt
        self._precision = precision
        return self

    def _rebuild(self, dt: _datetime, precision: int) -> NaiveDateTime:
        return self._new(dt, precision)

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> NaiveDateTime:
        if d.tzinfo is not None:
            raise ValueError(
                "Can only create NaiveDateTime from a naive datetime, "
                f"got datetime with tzinfo={d.tzinfo!r}"
            )
        return cls._new(d.replace(fold=0), precision_of(d.microsecond))

    def py_datetime(self) -> _datetime:
        return self._py_dt

    def canonical_format(self, sep: Literal[" ", "T"] = "T") -> str:
        return self._py_dt.isoformat(sep, "seconds") + _format_fraction(
            self._py_dt.microsecond, self._precision
        )

    def __repr__(self) -> str:
        return f"NaiveDateTime({self})"

    def gregorian_seconds(self) -> int:
        """Seconds since 0000-01-01T00:00:00 (the microseconds are dropped)"""
        return _wall_seconds(self._py_dt)

    if TYPE_CHECKING:

        def shift(
            self, deltas: Deltas = (), /, **units: int
        ) -> NaiveDateTime: ...

    def replace(self, *, validate: bool = True, **fields: int) -> NaiveDateTime:
        """Set fields. With ``validate=True`` (the default), out-of-range
        values are clamped (e.g. day 31 in April becomes 30).
        With ``validate=False``, they raise :class:`InvalidField`.

        >>> NaiveDateTime(2023, 1, 31).replace(month=2)
        NaiveDateTime(2023-02-28 00:00:00)
        """
        return self._new(
            *_replaced_fields(self._py_dt, self._precision, fields, validate)
        )

    def assume_zoned(
        self, tz: str | int, /, *, table: PeriodTable | None = None
    ) -> ZonedDateTime | AmbiguousDateTime:
        """Interpret the fields as a wall-clock reading in the given zone

        >>> NaiveDateTime(2016, 11, 6, 1, 30).assume_zoned("America/Chicago")
        AmbiguousDateTime(ambiguous: 2016-11-06 01:30:00-05:00[...] ~ ...)
        """
        return _construct(
            self._py_dt, self._precision, tz, _resolver_for(table)
        )

    def exact_eq(self, other: NaiveDateTime, /) -> bool:
        """Equal in fields *and* precision"""
        return (
            self._py_dt == other._py_dt
            and self._precision == other._precision
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NaiveDateTime):
            return NotImplemented
        return self._py_dt == other._py_dt

    def __hash__(self) -> int:
        return hash(self._py_dt)

    def __lt__(self, other: NaiveDateTime) -> bool:
        if not isinstance(other, NaiveDateTime):
            return NotImplemented
        return self._py_dt < other._py_dt

    def __le__(self, other: NaiveDateTime) -> bool:
        if not isinstance(other, NaiveDateTime):
            return NotImplemented
        return self._py_dt <= other._py_dt

    def __gt__(self, other: NaiveDateTime) -> bool:
        if not isinstance(other, NaiveDateTime):
            return NotImplemented
        return self._py_dt > other._py_dt

    def __ge__(self, other: NaiveDateTime) -> bool:
        if not isinstance(other, NaiveDateTime):
            return NotImplemented
        return self._py_dt >= other._py_dt

    def __add__(self, delta: Period | Duration) -> NaiveDateTime:
        if not isinstance(delta, (Period, Duration)):
            return NotImplemented
        return self.shift(delta)

    if TYPE_CHECKING:

        @overload
        def __sub__(self, other: NaiveDateTime) -> Duration: ...

        @overload
        def __sub__(self, other: Period | Duration) -> NaiveDateTime: ...

        def __sub__(
            self, other: NaiveDateTime | Period | Duration
        ) -> NaiveDateTime | Duration: ...

    else:

        def __sub__(self, other):
            """Subtract a time amount, or another naive datetime

            >>> d = NaiveDateTime(2020, 8, 15, hour=23, minute=12)
            >>> d - NaiveDateTime(2020, 8, 14)
            Duration(47:12:00)
            """
            if isinstance(other, NaiveDateTime):
                return Duration.from_py_timedelta(self._py_dt - other._py_dt)
            elif isinstance(other, (Period, Duration)):
                return self.shift(-other)
            return NotImplemented


class ZonedDateTime(DateTime):
    """A wall-clock reading in a timezone, with the offset rule in force.

    The strict constructor refuses to guess: if the reading is ambiguous
    (clocks set back) or skipped (clocks set forward), it raises
    :class:`AmbiguousTime` unless ``disambiguate="before"`` or ``"after"``
    is given. To get the ambiguity as a value instead, use
    :func:`construct` or :meth:`NaiveDateTime.assume_zoned`.

    >>> ZonedDateTime(2024, 12, 8, hour=11, tz="Europe/London")
    ZonedDateTime(2024-12-08 11:00:00+00:00[Europe/London])
    >>> # AmbiguousTime: 01:30 occurs twice on this day
    >>> ZonedDateTime(2016, 11, 6, 1, 30, tz="America/Chicago")
    >>> ZonedDateTime(2016, 11, 6, 1, 30, tz="America/Chicago", disambiguate="after")
    ZonedDateTime(2016-11-06 01:30:00-06:00[America/Chicago])

    The zone identity is an IANA name. ``"UTC"``, ``"Z"`` and whole-hour
    offsets like ``"+02:00"`` or ``-5`` are accepted as shorthands.

    Without ``table=``, zones are looked up in the IANA database
    through :mod:`zoneinfo`.
    """

    __slots__ = ("_rule", "_resolver")
    _rule: OffsetRule
    _resolver: Resolver

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        microsecond: int = 0,
        *,
        tz: str | int,
        precision: int | None = None,
        disambiguate: Literal["before", "after"] | None = None,
        table: PeriodTable | None = None,
    ) -> None:
        result = _construct(
            *_checked_fields(
                year, month, day, hour, minute, second, microsecond, precision
            ),
            tz,
            _resolver_for(table),
        )
        if isinstance(result, AmbiguousDateTime):
            if disambiguate is None:
                raise AmbiguousTime(result)
            result = result.resolve(disambiguate)
        self._py_dt = result._py_dt
        self._precision = result._precision
        self._rule = result._rule
        self._resolver = result._resolver

    @classmethod
    def _new(
        cls,
        dt: _datetime,
        precision: int,
        rule: OffsetRule,
        resolver: Resolver,
    ) -> ZonedDateTime:
        self = _object_new(cls)
        self._py_dt = dt
        self._precision = precision
        self._rule = rule
        self._resolver = resolver
        return self

    def _rebuild(
        self, dt: _datetime, precision: int
    ) -> ZonedDateTime | AmbiguousDateTime:
        return _construct(dt, precision, self._rule.full_name, self._resolver)

    @classmethod
    def from_timestamp(
        cls,
        ts: float,
        /,
        tz: str | int,
        *,
        table: PeriodTable | None = None,
    ) -> ZonedDateTime:
        """Create from a UNIX timestamp. Never ambiguous.

        >>> ZonedDateTime.from_timestamp(0, tz="America/Chicago")
        ZonedDateTime(1969-12-31 18:00:00-06:00[America/Chicago])
        """
        if isinstance(ts, int):
            micros = ts * _US_PER_SEC
        else:
            micros = round(ts * _US_PER_SEC)
        utc_micros = UNIX_EPOCH_SECONDS * _US_PER_SEC + micros
        return _from_utc(
            utc_micros,
            precision_of(utc_micros % _US_PER_SEC),
            tz,
            _resolver_for(table),
        )

    @classmethod
    def now(
        cls, tz: str | int, /, *, table: PeriodTable | None = None
    ) -> ZonedDateTime:
        """The current time in the given timezone"""
        utc = _datetime.now(_UTC).replace(tzinfo=None)
        return _from_utc(
            _wall_seconds(utc) * _US_PER_SEC + utc.microsecond,
            6,
            tz,
            _resolver_for(table),
        )

    if TYPE_CHECKING:

        @property
        def tz(self) -> str: ...

        @property
        def abbreviation(self) -> str: ...

        @property
        def utc_offset(self) -> int: ...

        @property
        def std_offset(self) -> int: ...

    else:
        tz = property(attrgetter("_rule.full_name"))
        abbreviation = property(attrgetter("_rule.abbreviation"))
        utc_offset = property(attrgetter("_rule.utc_offset"))
        std_offset = property(attrgetter("_rule.std_offset"))

    @property
    def rule(self) -> OffsetRule:
        return self._rule

    @property
    def offset(self) -> Duration:
        """The total offset from UTC (including DST)"""
        return Duration(seconds=self._rule.total_offset)

    def canonical_format(self, sep: Literal[" ", "T"] = "T") -> str:
        return (
            self._py_dt.isoformat(sep, "seconds")
            + _format_fraction(self._py_dt.microsecond, self._precision)
            + _format_offset(self._rule.total_offset)
            + f"[{self._rule.full_name}]"
        )

    def __repr__(self) -> str:
        return f"ZonedDateTime({self})"

    def _utc_micros(self) -> int:
        return (
            _wall_seconds(self._py_dt) - self._rule.total_offset
        ) * _US_PER_SEC + self._py_dt.microsecond

    def gregorian_seconds(self) -> int:
        """The UTC instant as seconds since 0000-01-01T00:00:00"""
        return _wall_seconds(self._py_dt) - self._rule.total_offset

    def gregorian_microseconds(self) -> int:
        return self._utc_micros()

    def timestamp(self) -> float:
        """The UNIX timestamp

        >>> ZonedDateTime(1970, 1, 1, tz="UTC").timestamp()
        0.0
        """
        return (
            self._utc_micros() - UNIX_EPOCH_SECONDS * _US_PER_SEC
        ) / _US_PER_SEC

    def as_zoned(
        self, tz: str | int, /, *, table: PeriodTable | None = None
    ) -> ZonedDateTime:
        """The same moment in another timezone. Never ambiguous.

        >>> d = ZonedDateTime(2016, 6, 1, 12, tz="America/Chicago")
        >>> d.as_zoned("Europe/Amsterdam")
        ZonedDateTime(2016-06-01 19:00:00+02:00[Europe/Amsterdam])
        """
        return _from_utc(
            self._utc_micros(),
            self._precision,
            tz,
            self._resolver if table is None else Resolver(table),
        )

    def is_ambiguous(self) -> bool:
        """Whether the wall-clock reading occurs twice in this zone"""
        return isinstance(
            self._resolver.resolve(
                self._rule.full_name, _wall_seconds(self._py_dt), "wall"
            ),
            AmbiguousOffset,
        )

    if TYPE_CHECKING:

        def replace(
            self,
            *,
            validate: bool = True,
            tz: str | int = ...,
            **fields: int,
        ) -> ZonedDateTime | AmbiguousDateTime: ...

    else:

        def replace(self, *, validate=True, tz=None, **fields):
            """Set fields (and optionally the zone), keeping the other
            wall-clock fields. The zone is resolved again, so the result
            may be ambiguous.

            With ``validate=True`` (the default), out-of-range values are
            clamped. With ``validate=False`` they raise :class:`InvalidField`.

            >>> d = ZonedDateTime(2016, 1, 31, 12, tz="America/Chicago")
            >>> d.replace(month=2)
            ZonedDateTime(2016-02-29 12:00:00-06:00[America/Chicago])
            """
            return _construct(
                *_replaced_fields(
                    self._py_dt, self._precision, fields, validate
                ),
                self._rule.full_name if tz is None else tz,
                self._resolver,
            )

    def exact_eq(self, other: ZonedDateTime, /) -> bool:
        """Equal in fields, precision *and* zone identity.
        ``==`` only checks whether two values are the same moment."""
        return (
            self._py_dt == other._py_dt
            and self._precision == other._precision
            and self._rule == other._rule
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._utc_micros() == other._utc_micros()

    def __hash__(self) -> int:
        return hash(self._utc_micros())

    def __lt__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._utc_micros() < other._utc_micros()

    def __le__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._utc_micros() <= other._utc_micros()

    def __gt__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._utc_micros() > other._utc_micros()

    def __ge__(self, other: ZonedDateTime) -> bool:
        if not isinstance(other, ZonedDateTime):
            return NotImplemented
        return self._utc_micros() >= other._utc_micros()

    def __add__(
        self, delta: Period | Duration
    ) -> ZonedDateTime | AmbiguousDateTime:
        """Shift by a period or duration. See :meth:`shift`.

        >>> d = ZonedDateTime(2016, 3, 12, 12, tz="America/Chicago")
        >>> d + Period(days=1)
        ZonedDateTime(2016-03-13 12:00:00-05:00[America/Chicago])
        """
        if not isinstance(delta, (Period, Duration)):
            return NotImplemented
        return self.shift(delta)

    if TYPE_CHECKING:

        @overload
        def __sub__(self, other: ZonedDateTime) -> Duration: ...

        @overload
        def __sub__(
            self, other: Period | Duration
        ) -> ZonedDateTime | AmbiguousDateTime: ...

        def __sub__(
            self, other: ZonedDateTime | Period | Duration
        ) -> ZonedDateTime | AmbiguousDateTime | Duration: ...

    else:

        def __sub__(self, other):
            """Subtract a time amount, or another zoned datetime.
            The difference between two datetimes is the exact elapsed time.
            """
            if isinstance(other, ZonedDateTime):
                return Duration(
                    microseconds=self._utc_micros() - other._utc_micros()
                )
            elif isinstance(other, (Period, Duration)):
                return self.shift(-other)
            return NotImplemented


class AmbiguousDateTime:
    """Two candidate values for one wall-clock reading.

    - ``kind == "ambiguous"``: the reading occurs twice (clocks set back).
      Both sides have the same fields, but different offsets.
    - ``kind == "gap"``: the reading doesn't exist (clocks set forward).
      ``before`` holds the reading with the offset from before the gap.
      ``after`` is the reading moved forward by the size of the gap,
      with the offset from after it.

    Nothing picks a side for you. Choose with :attr:`before`, :attr:`after`
    or :meth:`resolve`. Operations like :meth:`shift` are applied to both
    sides (see :func:`propagate`).
    """

    __slots__ = ("_before", "_after", "_kind", "_secondary")

    def __init__(
        self,
        before: ZonedDateTime,
        after: ZonedDateTime,
        kind: Literal["ambiguous", "gap"] = "ambiguous",
        secondary: ZonedDateTime | AmbiguousDateTime | None = None,
    ) -> None:
        if kind not in ("ambiguous", "gap"):
            raise ValueError(f"kind must be 'ambiguous' or 'gap', got {kind!r}")
        self._before = before
        self._after = after
        self._kind = kind
        self._secondary = secondary

    @property
    def before(self) -> ZonedDateTime:
        return self._before

    @property
    def after(self) -> ZonedDateTime:
        return self._after

    @property
    def kind(self) -> Literal["ambiguous", "gap"]:
        return self._kind

    @property
    def secondary(self) -> ZonedDateTime | AmbiguousDateTime | None:
        """When an operation produced ambiguity on both sides, only the
        ``after`` side's ambiguity is surfaced. The ``before`` side's
        result is kept here."""
        return self._secondary

    def resolve(self, choice: Literal["before", "after"], /) -> ZonedDateTime:
        if choice == "before":
            return self._before
        elif choice == "after":
            return self._after
        raise ValueError(f"choice must be 'before' or 'after', got {choice!r}")

    def _with_secondary(
        self, secondary: ZonedDateTime | AmbiguousDateTime | None
    ) -> AmbiguousDateTime:
        return AmbiguousDateTime(
            self._before, self._after, self._kind, secondary
        )

    def shift(
        self, deltas: Deltas = (), /, **units: int
    ) -> ZonedDateTime | AmbiguousDateTime:
        years, months, days, micros = _collect_shifts(deltas, units)
        if not (years or months or days or micros):
            return self
        collected = (
            ("years", years),
            ("months", months),
            ("days", days),
            ("microseconds", micros),
        )
        return propagate(self, lambda d: d.shift(collected))

    def replace(
        self, **kwargs: object
    ) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, lambda d: d.replace(**kwargs))

    def as_zoned(
        self, tz: str | int, /, *, table: PeriodTable | None = None
    ) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, lambda d: d.as_zoned(tz, table=table))

    def beginning_of_day(self) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, ZonedDateTime.beginning_of_day)

    def end_of_day(self) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, ZonedDateTime.end_of_day)

    def beginning_of_week(
        self, weekstart: int = MONDAY
    ) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, lambda d: d.beginning_of_week(weekstart))

    def end_of_week(
        self, weekstart: int = MONDAY
    ) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, lambda d: d.end_of_week(weekstart))

    def beginning_of_month(self) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, ZonedDateTime.beginning_of_month)

    def end_of_month(self) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, ZonedDateTime.end_of_month)

    def beginning_of_year(self) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, ZonedDateTime.beginning_of_year)

    def end_of_year(self) -> ZonedDateTime | AmbiguousDateTime:
        return propagate(self, ZonedDateTime.end_of_year)

    def __add__(
        self, delta: Period | Duration
    ) -> ZonedDateTime | AmbiguousDateTime:
        if not isinstance(delta, (Period, Duration)):
            return NotImplemented
        return self.shift(delta)

    def __sub__(
        self, delta: Period | Duration
    ) -> ZonedDateTime | AmbiguousDateTime:
        if not isinstance(delta, (Period, Duration)):
            return NotImplemented
        return self.shift(-delta)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AmbiguousDateTime):
            return NotImplemented
        return (
            self._kind == other._kind
            and self._before.exact_eq(other._before)
            and self._after.exact_eq(other._after)
        )

    def __hash__(self) -> int:
        return hash((self._kind, self._before, self._after))

    def __repr__(self) -> str:
        return (
            f"AmbiguousDateTime({self._kind}: {self._before} ~ {self._after})"
        )

    def __copy__(self) -> AmbiguousDateTime:
        return self

    def __deepcopy__(self, _: object) -> AmbiguousDateTime:
        return self


# ---------------------------------------------------------------------------
# Constructor, shift and propagation entry points
# ---------------------------------------------------------------------------


def _construct(
    dt: _datetime, precision: int, tz: str | int, resolver: Resolver
) -> ZonedDateTime | AmbiguousDateTime:
    """Resolve a (valid) wall-clock reading in a zone"""
    seconds = _wall_seconds(dt)
    resolved = resolver.resolve(tz, seconds, "wall")
    if isinstance(resolved, OffsetRule):
        _check_instant(seconds, resolved)
        return ZonedDateTime._new(dt, precision, resolved, resolver)
    elif isinstance(resolved, AmbiguousOffset):
        _check_instant(seconds, resolved.before)
        _check_instant(seconds, resolved.after)
        return AmbiguousDateTime(
            ZonedDateTime._new(dt, precision, resolved.before, resolver),
            ZonedDateTime._new(dt, precision, resolved.after, resolver),
            "ambiguous",
        )
    _check_instant(seconds, resolved.before)
    before = ZonedDateTime._new(dt, precision, resolved.before, resolver)
    # A gap: move the reading forward by the size of the gap, once
    moved = seconds + resolved.size
    retried = resolver.resolve(tz, moved, "wall")
    if isinstance(retried, OffsetRule):
        _check_instant(moved, retried)
        after = ZonedDateTime._new(
            _secs_to_naive(moved, dt.microsecond), precision, retried, resolver
        )
    else:
        # read the instant under the pre-gap rule in the zone instead
        _log.debug(
            "Retry after gap in %s was not conclusive, converting from UTC",
            resolved.after.full_name,
        )
        after = _from_utc(
            (seconds - resolved.before.total_offset) * _US_PER_SEC
            + dt.microsecond,
            precision,
            tz,
            resolver,
        )
    return AmbiguousDateTime(before, after, "gap")


def _check_instant(wall_seconds: int, rule: OffsetRule) -> None:
    # the UTC instant must be representable too, not only the wall reading
    utc_days = (wall_seconds - rule.total_offset) // _SECS_PER_DAY
    _ordinal_to_date(utc_days - _ORDINAL_OFFSET)


def _from_utc(
    utc_micros: int, precision: int, tz: str | int, resolver: Resolver
) -> ZonedDateTime:
    seconds, us = divmod(utc_micros, _US_PER_SEC)
    rule = resolver.resolve(tz, seconds, "utc")
    # utc mode always resolves to a single rule
    assert isinstance(rule, OffsetRule)
    return ZonedDateTime._new(
        _secs_to_naive(seconds + rule.total_offset, us),
        precision,
        rule,
        resolver,
    )


RawFields = Union[
    Tuple[int, int, int],
    Tuple[int, int, int, int],
    Tuple[int, int, int, int, int],
    Tuple[int, int, int, int, int, int],
    Tuple[int, int, int, int, int, int, int],
]


def construct(
    fields: NaiveDateTime | Date | RawFields,
    tz: str | int,
    /,
    *,
    precision: int | None = None,
    strict: bool = True,
    table: PeriodTable | None = None,
) -> ZonedDateTime | AmbiguousDateTime:
    """Build a zoned value from calendar fields and a zone.

    ``fields`` is a naive datetime, a date (at midnight), or a raw
    ``(year, month, day[, hour[, minute[, second[, microsecond]]]])`` tuple.
    Raw tuples are validated strictly (``strict=True``, raising
    :class:`InvalidField`) or clamped into range (``strict=False``).
    ``precision`` only applies to raw tuples.

    >>> construct((2016, 3, 13, 2, 30), "America/Chicago")
    AmbiguousDateTime(gap: 2016-03-13 02:30:00-06:00[...] ~ 2016-03-13 03:30:00-05:00[...])
    >>> construct((2023, 2, 31), "Europe/Paris", strict=False)
    ZonedDateTime(2023-02-28 00:00:00+01:00[Europe/Paris])

    Raises
    ------
    InvalidField
        If strict validation fails
    InvalidTimezone
        If the zone is not in the period table
    """
    if isinstance(fields, NaiveDateTime):
        dt, prec = fields._py_dt, fields._precision
    elif isinstance(fields, Date):
        dt, prec = _datetime.combine(fields._py_date, _datetime.min.time()), 0
    elif isinstance(fields, tuple):
        if not 3 <= len(fields) <= 7:
            raise InvalidField(
                f"Expected 3 to 7 fields (year..microsecond), got {len(fields)}"
            )
        padded = (*fields, *(0,) * (7 - len(fields)))
        dt, prec = (_checked_fields if strict else _normalized_fields)(
            *padded, precision
        )
    else:
        raise TypeError(f"Cannot construct from {fields!r}")
    return _construct(dt, prec, tz, _resolver_for(table))


Value = Union[Date, NaiveDateTime, ZonedDateTime, AmbiguousDateTime]


@overload
def shift(value: Date, deltas: Deltas = ..., /, **units: int) -> Date: ...


@overload
def shift(
    value: NaiveDateTime, deltas: Deltas = ..., /, **units: int
) -> NaiveDateTime: ...


@overload
def shift(
    value: ZonedDateTime | AmbiguousDateTime,
    deltas: Deltas = ...,
    /,
    **units: int,
) -> ZonedDateTime | AmbiguousDateTime: ...


def shift(value: Value, deltas: Deltas = (), /, **units: int) -> Value:
    """Shift any value by an ordered list of ``(unit, amount)`` deltas
    and/or keyword units.

    >>> shift(Date(2024, 1, 31), [("months", 1)])
    Date(2024-02-29)
    >>> shift(ZonedDateTime(2016, 3, 13, 1, 30, tz="America/Chicago"), hours=1)
    AmbiguousDateTime(gap: 2016-03-13 02:30:00-06:00[...] ~ 2016-03-13 03:30:00-05:00[...])

    Raises
    ------
    InvalidShift
        For unknown units or non-integer amounts
    ShiftOverflow
        If the result would be outside the supported years
    """
    if isinstance(
        value, (Date, NaiveDateTime, ZonedDateTime, AmbiguousDateTime)
    ):
        return value.shift(deltas, **units)
    raise TypeError(f"Cannot shift {value!r}")


def _attempt(
    op: Callable[[ZonedDateTime], ZonedDateTime | AmbiguousDateTime],
    value: ZonedDateTime,
) -> tuple[ZonedDateTime | AmbiguousDateTime | None, WallclockError | None]:
    try:
        return op(value), None
    except WallclockError as e:
        return None, e


def propagate(
    value: ZonedDateTime | AmbiguousDateTime,
    op: Callable[[ZonedDateTime], ZonedDateTime | AmbiguousDateTime],
    /,
) -> ZonedDateTime | AmbiguousDateTime:
    """Apply an operation defined on a single zoned value to a possibly
    ambiguous one. Both sides of an ambiguity are handled independently:

    - if one side fails, the other side's result is returned;
    - if both results are the same value, that value is returned;
    - if both results are single but different, the ambiguity is kept;
    - if a side produces a new ambiguity, the ``after`` side's one is
      surfaced and the other result is kept as
      :attr:`~AmbiguousDateTime.secondary`.
    """
    if isinstance(value, ZonedDateTime):
        return op(value)
    elif not isinstance(value, AmbiguousDateTime):
        raise TypeError(f"Expected a zoned value, got {value!r}")

    before, before_exc = _attempt(op, value.before)
    after, after_exc = _attempt(op, value.after)
    if after_exc is not None:
        if before_exc is not None:
            raise after_exc
        _log.debug("Only the 'before' side survived: %s", after_exc)
        return before  # type: ignore[return-value]
    elif before_exc is not None:
        _log.debug("Only the 'after' side survived: %s", before_exc)
        return after  # type: ignore[return-value]
    assert before is not None and after is not None

    if isinstance(after, AmbiguousDateTime):
        return after._with_secondary(before)
    elif isinstance(before, AmbiguousDateTime):
        return before._with_secondary(after)
    elif before.exact_eq(after):
        return after
    return AmbiguousDateTime(before, after, value.kind)


# Helpers that pre-compute/lookup as much as possible
_UTC = _timezone.utc
_object_new = object.__new__
