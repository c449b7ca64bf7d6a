"""Working-hours status classification for a participant's local time."""

import re
from datetime import date, datetime
from typing import Mapping, Optional

from meeting_equity.errors import InvalidArgument
from meeting_equity.models.entities import (
    DEFAULT_WORK_CONFIG,
    CountryWorkConfig,
    Holiday,
    Participant,
    ParticipantStatus,
    StatusTier,
)

REASON_HOLIDAY = "national holiday"
REASON_NON_WORKING_DAY = "non-working day"
REASON_GREEN = "optimal hours"
REASON_ORANGE_EARLY = "acceptable, early"
REASON_ORANGE_LATE = "acceptable, late"
REASON_RED = "outside working hours"

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_to_minutes(time_string: str) -> int:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into minutes since midnight (seconds dropped)."""
    hours, minutes = time_string.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def is_working_day(day: date, config: CountryWorkConfig) -> bool:
    """Whether the calendar day's weekday is in the config's work days."""
    return day.isoweekday() in config.work_days


def resolve_config(
    country_code: str,
    configs: Optional[Mapping[str, CountryWorkConfig]] = None,
    default: CountryWorkConfig = DEFAULT_WORK_CONFIG,
) -> CountryWorkConfig:
    """Config for a country, falling back to the default."""
    if not configs:
        return default
    return configs.get(country_code.upper()) or configs.get(country_code) or default


def determine_status(
    local_time: datetime,
    config: CountryWorkConfig,
    holiday: Optional[Holiday] = None,
    is_work_day: Optional[bool] = None,
) -> tuple[StatusTier, str]:
    """
    Classify a local wall-clock time.

    Rules are checked in priority order and the first match wins:
    holiday, non-working day, green window, orange windows, red.
    All windows are half-open (start <= t < end).

    Args:
        local_time: Participant's wall-clock time
        config: Working-hours policy for the participant's country
        holiday: Holiday falling on the local calendar day, if any
        is_work_day: Precomputed work-day flag; derived from the local weekday when omitted

    Returns:
        Tuple of (status tier, human-readable reason)
    """
    if holiday is not None:
        return "critical", REASON_HOLIDAY

    if is_work_day is None:
        is_work_day = is_working_day(local_time.date(), config)
    if not is_work_day:
        return "critical", REASON_NON_WORKING_DAY

    minutes = local_time.hour * 60 + local_time.minute

    if parse_time_to_minutes(config.green_start) <= minutes < parse_time_to_minutes(config.green_end):
        return "green", REASON_GREEN

    morning_start = parse_time_to_minutes(config.orange_morning_start)
    morning_end = parse_time_to_minutes(config.orange_morning_end)
    if morning_start <= minutes < morning_end:
        return "orange", REASON_ORANGE_EARLY

    evening_start = parse_time_to_minutes(config.orange_evening_start)
    evening_end = parse_time_to_minutes(config.orange_evening_end)
    if evening_start <= minutes < evening_end:
        return "orange", REASON_ORANGE_LATE

    return "red", REASON_RED


def classify_participant(
    participant: Participant,
    local_time: datetime,
    config: CountryWorkConfig,
    holiday: Optional[Holiday] = None,
    is_work_day: Optional[bool] = None,
) -> ParticipantStatus:
    """Run determine_status and wrap the outcome for one participant."""
    status, reason = determine_status(local_time, config, holiday, is_work_day)
    return ParticipantStatus(
        participant=participant,
        status=status,
        reason=reason,
        local_time=local_time,
        holiday=holiday,
    )


def format_time_range(start_time: str, end_time: str) -> str:
    """Format ``("09:00:00", "17:00:00")`` as ``"9:00 AM - 5:00 PM"``."""

    def _format(time_string: str) -> str:
        hours_str, minutes = time_string.split(":")[:2]
        hours = int(hours_str)
        suffix = "PM" if hours >= 12 else "AM"
        return f"{hours % 12 or 12}:{minutes} {suffix}"

    return f"{_format(start_time)} - {_format(end_time)}"


def validate_work_config(config: CountryWorkConfig) -> CountryWorkConfig:
    """
    Check a config at entry time.

    Classification trusts its config, so malformed strings or overlapping
    windows have to be rejected before a config is stored.

    Raises:
        InvalidArgument: On a malformed time string, an empty/reversed window,
            overlapping windows, or an out-of-range work day
    """
    if not config.country_code or (config.country_code != "*" and len(config.country_code) != 2):
        raise InvalidArgument("Invalid country code", field="country_code", value=config.country_code)

    fields = (
        "green_start",
        "green_end",
        "orange_morning_start",
        "orange_morning_end",
        "orange_evening_start",
        "orange_evening_end",
    )
    minutes: dict[str, int] = {}
    for name in fields:
        value = getattr(config, name)
        match = _TIME_PATTERN.match(value or "")
        if not match:
            raise InvalidArgument(f"Malformed time string for {name}", field=name, value=value)
        hours, mins, secs = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
        if hours > 24 or mins > 59 or secs > 59 or (hours == 24 and (mins or secs)):
            raise InvalidArgument(f"Time out of range for {name}", field=name, value=value)
        minutes[name] = hours * 60 + mins

    if minutes["green_start"] >= minutes["green_end"]:
        raise InvalidArgument("Green window must start before it ends", field="green_start")
    if minutes["orange_morning_start"] > minutes["orange_morning_end"]:
        raise InvalidArgument("Morning orange window is reversed", field="orange_morning_start")
    if minutes["orange_evening_start"] > minutes["orange_evening_end"]:
        raise InvalidArgument("Evening orange window is reversed", field="orange_evening_start")
    if minutes["orange_morning_end"] > minutes["green_start"]:
        raise InvalidArgument("Morning orange window overlaps green hours", field="orange_morning_end")
    if minutes["orange_evening_start"] < minutes["green_end"]:
        raise InvalidArgument("Evening orange window overlaps green hours", field="orange_evening_start")

    invalid_days = [day for day in config.work_days if day not in range(1, 8)]
    if invalid_days:
        raise InvalidArgument("Work days must be ISO weekdays 1-7", field="work_days", value=invalid_days)

    return config
