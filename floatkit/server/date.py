"""
Date Helper

Static helpers over datetime for formatting, parsing, ordering and
simple arithmetic.

Wherever a date is accepted it may be a datetime, a date, the string
"now" or an ISO-8601 string. Month and year arithmetic overflows the
way calendar normalisation does: 31 January + 1 month is 3 March
(2 March in leap years).
"""

import re
import time
from datetime import date as date_type
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo


DEFAULT_FORMAT = "%Y-%m-%d %H:%M:%S"

DURATION_PATTERN = re.compile(
    r"^P(?!$)"
    r"(?:(?P<years>\d+)Y)?"
    r"(?:(?P<months>\d+)M)?"
    r"(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T(?=\d)"
    r"(?:(?P<hours>\d+)H)?"
    r"(?:(?P<minutes>\d+)M)?"
    r"(?:(?P<seconds>\d+)S)?)?$"
)

DateLike = Union[datetime, date_type, str]


class Date:
    """Date/time helpers. All methods are static."""

    _timezone: Optional[tzinfo] = None

    @staticmethod
    def set_default_timezone(timezone: str) -> None:
        """Use `timezone` (IANA name) for "now" from here on."""
        Date._timezone = ZoneInfo(timezone)

    @staticmethod
    def now() -> datetime:
        return datetime.now(Date._timezone)

    @staticmethod
    def parse(value: DateLike) -> datetime:
        """
        Turn a date-like value into a datetime.

        Naive results take the default timezone once one is set, so they
        compare with now().
        """
        if isinstance(value, datetime):
            return value
        if isinstance(value, date_type):
            return datetime(value.year, value.month, value.day, tzinfo=Date._timezone)
        if value.strip().lower() == "now":
            return Date.now()
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None and Date._timezone is not None:
            parsed = parsed.replace(tzinfo=Date._timezone)
        return parsed

    @staticmethod
    def get(
        value: DateLike = "now",
        fmt: str = DEFAULT_FORMAT,
        as_object: bool = False,
    ) -> Union[str, datetime]:
        parsed = Date.parse(value)
        if as_object:
            return parsed
        return parsed.strftime(fmt)

    @staticmethod
    def difference(start: DateLike, expire: DateLike, unit: Optional[str] = None) -> int:
        """
        Signed distance from `start` to `expire`.

        In seconds by default, in whole days with unit="days".
        """
        delta = Date.parse(expire) - Date.parse(start)
        seconds = delta.total_seconds()
        if unit == "days":
            return int(seconds / 86400)
        if unit is not None:
            raise ValueError(f"Unsupported unit: {unit}")
        return int(seconds)

    @staticmethod
    def create(value: str, fmt: str) -> datetime:
        return datetime.strptime(value, fmt)

    @staticmethod
    def to_string(value: str, fmt: str, to: str = DEFAULT_FORMAT) -> str:
        return Date.create(value, fmt).strftime(to)

    @staticmethod
    def order(dates: list[str], sort: str = "asc", fmt: str = DEFAULT_FORMAT) -> list[str]:
        sort = sort.lower()
        if sort not in ("asc", "desc"):
            raise ValueError(f"Unsupported sort order: {sort}")
        return sorted(dates, key=lambda d: Date.create(d, fmt), reverse=sort == "desc")

    @staticmethod
    def time_now() -> int:
        """Current Unix timestamp."""
        return int(time.time())

    @staticmethod
    def shift(
        value: datetime,
        years: int = 0,
        months: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
    ) -> datetime:
        """Add calendar units, letting overflowing days roll forward."""
        total_months = value.year * 12 + (value.month - 1) + years * 12 + months
        year, month = divmod(total_months, 12)
        shifted = value.replace(year=year, month=month + 1, day=1)
        shifted += timedelta(days=value.day - 1)
        return shifted + timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds)

    @staticmethod
    def new_time(
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        months: int = 0,
        days: int = 0,
        years: int = 0,
    ) -> int:
        """Unix timestamp of now plus the given offsets."""
        shifted = Date.shift(
            Date.now().replace(microsecond=0),
            years=years,
            months=months,
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
        )
        return int(shifted.timestamp())

    @staticmethod
    def parse_duration(duration: str) -> dict[str, int]:
        """Split an ISO-8601 duration ("P1Y2M", "PT30M") into its parts."""
        match = DURATION_PATTERN.match(duration)
        if not match:
            raise ValueError(f"Invalid ISO-8601 duration: {duration}")
        return {key: int(val or 0) for key, val in match.groupdict().items()}

    @staticmethod
    def expire_in(duration: str = "P1Y", value: DateLike = "now") -> int:
        """Seconds covered by `duration` when starting at `value`."""
        start = Date.parse(value).replace(microsecond=0)
        parts = Date.parse_duration(duration)
        expire = Date.shift(
            start,
            years=parts["years"],
            months=parts["months"],
            days=parts["days"] + parts["weeks"] * 7,
            hours=parts["hours"],
            minutes=parts["minutes"],
            seconds=parts["seconds"],
        )
        return int((expire - start).total_seconds())
