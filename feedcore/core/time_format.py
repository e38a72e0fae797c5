"""
Date display helpers shared by every entity and screen.

Absolute strings are rendered with Babel so the short/medium/long styles
follow the CLDR data of the requested locale. Relative ages ("3 days ago")
are computed from a calendar difference with ``dateutil.relativedelta``.
"""

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Optional, Union

from babel.dates import (
    format_date,
    format_datetime,
    get_date_format,
    get_datetime_format,
    get_time_format,
    get_timezone,
)
from dateutil.relativedelta import relativedelta

from feedcore.core.config import settings


class DateStyle(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    ISO8601 = "iso8601"


@dataclass(frozen=True)
class CustomFormat:
    """A CLDR date pattern such as ``yyyy-MM-dd HH:mm``"""
    pattern: str


class TimeZoneOption(str, Enum):
    LOCAL = "local"
    UTC = "utc"


StyleArg = Union[DateStyle, CustomFormat, str]
ZoneArg = Union[TimeZoneOption, tzinfo, str, None]

ISO8601_PATTERN = "%Y-%m-%dT%H:%M:%SZ"
NOT_AVAILABLE = "N/A"
UNKNOWN = "Unknown"
JUST_NOW = "Just now"
YESTERDAY = "Yesterday"
NEVER_UPDATED = "Never updated"


def resolve_zone(zone: ZoneArg) -> tzinfo:
    if zone is None or zone == "" or zone == TimeZoneOption.LOCAL:
        return get_timezone()
    if zone == TimeZoneOption.UTC:
        return timezone.utc
    if isinstance(zone, tzinfo):
        return zone
    return get_timezone(zone)


def _aware(timestamp: datetime) -> datetime:
    # Naive timestamps come from the wire and are UTC
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def _ago(count: int, unit: str) -> str:
    if count == 1:
        return f"1 {unit} ago"
    return f"{count} {unit}s ago"


class TimeFormatter:
    """Renders timestamps for feed rows and the post detail screen"""

    def __init__(self, locale: Optional[str] = None, time_zone: ZoneArg = None):
        self.locale = locale or settings.DISPLAY_LOCALE
        self.calendar_zone = resolve_zone(time_zone)

    @classmethod
    def from_settings(cls) -> "TimeFormatter":
        return cls(locale=settings.DISPLAY_LOCALE, time_zone=settings.DISPLAY_TIMEZONE or None)

    def _zone(self, time_zone: ZoneArg) -> tzinfo:
        # No explicit zone means the formatter's own calendar zone
        if time_zone is None:
            return self.calendar_zone
        return resolve_zone(time_zone)

    def format_absolute(
        self,
        timestamp: Optional[datetime],
        style: StyleArg = DateStyle.MEDIUM,
        include_time: bool = True,
        time_zone: ZoneArg = None,
        locale: Optional[str] = None,
    ) -> str:
        if timestamp is None:
            return NOT_AVAILABLE

        timestamp = _aware(timestamp)
        locale = locale or self.locale

        if isinstance(style, str) and not isinstance(style, DateStyle):
            try:
                style = DateStyle(style.lower())
            except ValueError:
                style = CustomFormat(style)

        if style == DateStyle.ISO8601:
            # Always UTC, whatever zone was asked for
            return timestamp.astimezone(timezone.utc).strftime(ISO8601_PATTERN)

        zone = self._zone(time_zone)

        if isinstance(style, CustomFormat):
            return format_datetime(timestamp, style.pattern, tzinfo=zone, locale=locale)

        if not include_time:
            return format_date(timestamp.astimezone(zone).date(), style.value, locale=locale)
        return format_datetime(timestamp, style.value, tzinfo=zone, locale=locale)

    def format_relative(self, timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
        """
        Age of ``timestamp`` relative to ``now`` using the first non-zero
        calendar unit: years, months, days, hours, minutes.

        Whole weeks replace day counts from seven days on; leftover days
        are dropped rather than carried into another unit.
        """
        if timestamp is None:
            return UNKNOWN

        now = _aware(now) if now is not None else datetime.now(timezone.utc)
        diff = relativedelta(
            now.astimezone(self.calendar_zone),
            _aware(timestamp).astimezone(self.calendar_zone),
        )

        if diff.years > 0:
            return _ago(diff.years, "year")
        if diff.months > 0:
            return _ago(diff.months, "month")
        if diff.days > 0:
            if diff.days == 1:
                return YESTERDAY
            if diff.days < 7:
                return _ago(diff.days, "day")
            return _ago(diff.days // 7, "week")
        if diff.hours > 0:
            return _ago(diff.hours, "hour")
        if diff.minutes > 0:
            return _ago(diff.minutes, "minute")
        return JUST_NOW

    def format_last_update(
        self,
        updated_at: Optional[datetime],
        time_zone: ZoneArg = None,
        locale: Optional[str] = None,
    ) -> str:
        """Medium date with short time, or "Never updated" for unedited posts"""
        if updated_at is None:
            return NEVER_UPDATED
        locale = locale or self.locale
        # Fill the locale's date-time glue with the date and time patterns so
        # quoted literals in all three stay LDML-quoted for Babel
        pattern = (
            get_datetime_format("medium", locale=locale)
            .replace("{0}", get_time_format("short", locale=locale).pattern)
            .replace("{1}", get_date_format("medium", locale=locale).pattern)
        )
        return format_datetime(_aware(updated_at), pattern, tzinfo=self._zone(time_zone), locale=locale)
