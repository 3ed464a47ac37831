from wallclock import (
    OffsetRule,
    StaticPeriodTable,
    ZonePeriod,
    gregorian_seconds,
)


class AlwaysEqual:
    def __eq__(self, other):
        return True


class NeverEqual:
    def __eq__(self, other):
        return False


class AlwaysLarger:
    def __lt__(self, other):
        return False

    def __le__(self, other):
        return False

    def __gt__(self, other):
        return True

    def __ge__(self, other):
        return True


class AlwaysSmaller:
    def __lt__(self, other):
        return True

    def __le__(self, other):
        return True

    def __gt__(self, other):
        return False

    def __ge__(self, other):
        return False


CST = OffsetRule("America/Chicago", "CST", -21_600)
CDT = OffsetRule("America/Chicago", "CDT", -21_600, 3_600)
UTC_RULE = OffsetRule("Etc/UTC", "UTC", 0)

# 2016-03-13 02:00 CST and 2016-11-06 02:00 CDT, in UTC
SPRING_FORWARD = gregorian_seconds(2016, 3, 13, 8)
FALL_BACK = gregorian_seconds(2016, 11, 6, 7)

CHICAGO_2016 = StaticPeriodTable(
    {
        "America/Chicago": [
            ZonePeriod(None, SPRING_FORWARD, CST),
            ZonePeriod(SPRING_FORWARD, FALL_BACK, CDT),
            ZonePeriod(FALL_BACK, None, CST),
        ],
        "Etc/UTC": [ZonePeriod(None, None, UTC_RULE)],
    }
)
