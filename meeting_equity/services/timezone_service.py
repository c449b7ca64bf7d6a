"""Timezone conversion between UTC instants and participant wall-clock time."""

from dataclasses import dataclass
from datetime import datetime
from typing import Union

import pytz

from meeting_equity.errors import InvalidArgument, InvalidTimezone

TimezoneLike = Union[str, pytz.BaseTzInfo]

# Country -> commonly used zones. Only covers countries people pick most often;
# anything else resolves through pytz.country_timezones.
COUNTRY_TIMEZONES: dict[str, list[dict[str, str]]] = {
    "US": [
        {"timezone": "America/New_York", "name": "Eastern Time", "abbreviation": "EST"},
        {"timezone": "America/Chicago", "name": "Central Time", "abbreviation": "CST"},
        {"timezone": "America/Denver", "name": "Mountain Time", "abbreviation": "MST"},
        {"timezone": "America/Los_Angeles", "name": "Pacific Time", "abbreviation": "PST"},
        {"timezone": "America/Anchorage", "name": "Alaska Time", "abbreviation": "AKST"},
        {"timezone": "Pacific/Honolulu", "name": "Hawaii Time", "abbreviation": "HST"},
    ],
    "GB": [{"timezone": "Europe/London", "name": "Greenwich Mean Time", "abbreviation": "GMT"}],
    "FR": [{"timezone": "Europe/Paris", "name": "Central European Time", "abbreviation": "CET"}],
    "DE": [{"timezone": "Europe/Berlin", "name": "Central European Time", "abbreviation": "CET"}],
    "ES": [
        {"timezone": "Europe/Madrid", "name": "Central European Time", "abbreviation": "CET"},
        {"timezone": "Atlantic/Canary", "name": "Canary Islands", "abbreviation": "WET"},
    ],
    "JP": [{"timezone": "Asia/Tokyo", "name": "Japan Standard Time", "abbreviation": "JST"}],
    "CN": [{"timezone": "Asia/Shanghai", "name": "China Standard Time", "abbreviation": "CST"}],
    "AU": [
        {"timezone": "Australia/Sydney", "name": "Australian Eastern Time", "abbreviation": "AEST"},
        {"timezone": "Australia/Melbourne", "name": "Australian Eastern Time", "abbreviation": "AEST"},
        {"timezone": "Australia/Perth", "name": "Australian Western Time", "abbreviation": "AWST"},
    ],
    "IN": [{"timezone": "Asia/Kolkata", "name": "India Standard Time", "abbreviation": "IST"}],
    "AE": [{"timezone": "Asia/Dubai", "name": "Gulf Standard Time", "abbreviation": "GST"}],
    "IL": [{"timezone": "Asia/Jerusalem", "name": "Israel Standard Time", "abbreviation": "IST"}],
}


@dataclass(frozen=True)
class TimezoneOffset:
    """UTC offset of a zone at a given instant."""
    minutes: int
    is_dst: bool
    offset_string: str  # e.g. "+05:30", "-08:00"


def get_timezone(timezone: TimezoneLike) -> pytz.BaseTzInfo:
    """Resolve an IANA identifier to a pytz zone, raising InvalidTimezone."""
    if isinstance(timezone, pytz.BaseTzInfo):
        return timezone
    if not timezone or not isinstance(timezone, str):
        raise InvalidTimezone(str(timezone))
    try:
        return pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezone(timezone) from None


def is_valid_timezone(timezone: str) -> bool:
    """Check whether the identifier is a known IANA zone."""
    try:
        get_timezone(timezone)
    except InvalidTimezone:
        return False
    return True


def _as_utc(instant: datetime) -> datetime:
    # Naive instants are read as UTC
    if instant.tzinfo is None:
        return pytz.UTC.localize(instant)
    return instant.astimezone(pytz.UTC)


def to_local(instant: datetime, timezone: TimezoneLike) -> datetime:
    """
    Project an absolute instant onto a zone's wall clock.

    Args:
        instant: Aware datetime (naive values are treated as UTC)
        timezone: IANA identifier, e.g. "America/New_York"

    Returns:
        Aware datetime in the target zone, with the DST rule valid at the instant
    """
    tz = get_timezone(timezone)
    return _as_utc(instant).astimezone(tz)


def to_utc(local_time: datetime, timezone: TimezoneLike) -> datetime:
    """
    Convert a wall-clock time in ``timezone`` back to a UTC instant.

    Aware inputs are converted directly. Naive inputs are localized; for
    ambiguous or skipped wall times (DST transitions) the standard-time
    reading is used.
    """
    tz = get_timezone(timezone)
    if local_time.tzinfo is None:
        local_time = tz.normalize(tz.localize(local_time, is_dst=False))
    return local_time.astimezone(pytz.UTC)


def _offset_minutes(instant: datetime, tz: pytz.BaseTzInfo) -> int:
    offset = _as_utc(instant).astimezone(tz).utcoffset()
    return int(offset.total_seconds() // 60) if offset is not None else 0


def _format_offset(minutes: int) -> str:
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def offset_at(instant: datetime, timezone: TimezoneLike) -> TimezoneOffset:
    """
    UTC offset of ``timezone`` at ``instant``.

    ``is_dst`` compares the offset with the one on January 1 of the same local
    year. Zones whose DST covers January (southern hemisphere) report the
    inverse, so the flag is informational only; classification uses the
    converted wall clock and never reads it.
    """
    tz = get_timezone(timezone)
    minutes = _offset_minutes(instant, tz)
    local_year = to_local(instant, tz).year
    january = tz.localize(datetime(local_year, 1, 1, 12, 0))
    january_minutes = _offset_minutes(january, tz)
    return TimezoneOffset(
        minutes=minutes,
        is_dst=minutes != january_minutes,
        offset_string=_format_offset(minutes),
    )


def format_with_timezone(instant: datetime, timezone: TimezoneLike) -> str:
    """Format like ``"2:00 PM EST (America/New_York)"``."""
    tz = get_timezone(timezone)
    local = to_local(instant, tz)
    hour = local.hour % 12 or 12
    suffix = "PM" if local.hour >= 12 else "AM"
    return f"{hour}:{local.minute:02d} {suffix} {local.tzname()} ({tz.zone})"


def get_timezones_for_country(country_code: str) -> list[dict[str, str]]:
    """
    Zones for a country code.

    Returns the curated table entry when there is one, otherwise the zones
    pytz lists for the country (name and abbreviation left to the zone id).
    """
    if not country_code or len(country_code) != 2:
        raise InvalidArgument(
            "Valid ISO 3166-1 alpha-2 country code required",
            field="country_code",
            value=country_code,
        )
    code = country_code.upper()
    if code in COUNTRY_TIMEZONES:
        return [dict(entry) for entry in COUNTRY_TIMEZONES[code]]
    zones = pytz.country_timezones.get(code, [])
    return [{"timezone": zone, "name": zone, "abbreviation": ""} for zone in zones]
