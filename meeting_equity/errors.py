"""
Error taxonomy for the meeting-equity engine.

InvalidArgument fails fast and is never retried. TransientFetchFailure is
raised inside a holiday fetch attempt and drives the retry loop; callers of
HolidayService never see it because exhausted retries degrade to an empty
holiday list. HolidayNotFound marks a 404 from the holiday source, which is
an authoritative empty result.
"""

from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidArgument(SchedulingError):
    """Malformed country code, year, timezone or time string."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        self.field = field
        self.value = value
        super().__init__(message, details)


class InvalidTimezone(InvalidArgument):
    """The identifier is not a recognized IANA zone."""

    def __init__(self, timezone: str):
        super().__init__(f"Invalid timezone: {timezone}", field="timezone", value=timezone)


class TransientFetchFailure(SchedulingError):
    """Network error or non-404 error status from the holiday source."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, {"status_code": status_code} if status_code else None)


class HolidayNotFound(SchedulingError):
    """The holiday source has no data for the country/year."""

    def __init__(self, country_code: str, year: int):
        self.country_code = country_code
        self.year = year
        super().__init__(
            f"No holiday data for {country_code} {year}",
            {"country_code": country_code, "year": year},
        )
