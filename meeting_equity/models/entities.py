"""Domain models for the meeting-equity engine."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

from meeting_equity.errors import InvalidArgument

StatusTier = Literal["green", "orange", "red", "critical"]


@dataclass(frozen=True)
class Participant:
    """Represents a meeting participant."""
    id: str
    timezone: str  # IANA identifier, e.g. "America/New_York"
    country_code: str  # ISO 3166-1 alpha-2
    name: Optional[str] = None


@dataclass(frozen=True)
class CountryWorkConfig:
    """Working-hours policy for one country."""
    country_code: str
    green_start: str = "09:00"
    green_end: str = "17:00"
    orange_morning_start: str = "08:00"
    orange_morning_end: str = "09:00"
    orange_evening_start: str = "17:00"
    orange_evening_end: str = "18:00"
    work_days: frozenset[int] = frozenset({1, 2, 3, 4, 5})

    @classmethod
    def from_pattern(cls, country_code: str, work_week_pattern: str, **hours: str) -> "CountryWorkConfig":
        """
        Build a config from a work-week pattern string.

        Patterns concatenate day codes: ``"MTWTF"`` is Monday to Friday,
        ``"SuMTWTh"`` is Sunday to Thursday. A bare ``T`` after ``W`` means
        Thursday, matching how the patterns are written by hand.
        """
        return cls(
            country_code=country_code.upper(),
            work_days=parse_work_week_pattern(work_week_pattern),
            **hours,
        )


def parse_work_week_pattern(pattern: str) -> frozenset[int]:
    """Parse a work-week pattern like ``"MTWTF"`` into ISO weekday numbers."""
    days: set[int] = set()
    i = 0
    while i < len(pattern):
        two = pattern[i:i + 2]
        if two == "Su":
            days.add(7)
            i += 2
            continue
        if two == "Sa":
            days.add(6)
            i += 2
            continue
        if two == "Th":
            days.add(4)
            i += 2
            continue
        char = pattern[i]
        if char == "M":
            days.add(1)
        elif char == "T":
            days.add(4 if 3 in days else 2)
        elif char == "W":
            days.add(3)
        elif char == "F":
            days.add(5)
        else:
            raise InvalidArgument(
                f"Unknown day code {char!r} in work week pattern {pattern!r}",
                field="work_week_pattern",
                value=pattern,
            )
        i += 1
    return frozenset(days)


DEFAULT_WORK_CONFIG = CountryWorkConfig(country_code="*")


@dataclass(frozen=True)
class Holiday:
    """A public holiday as published by the holiday source."""
    date: date
    name: str
    country_code: str
    local_name: Optional[str] = None
    fixed: bool = False
    global_holiday: bool = True
    counties: Optional[list[str]] = None
    types: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Holiday":
        """Map one entry of the PublicHolidays response."""
        return cls(
            date=date.fromisoformat(payload["date"]),
            name=payload.get("name", ""),
            country_code=payload.get("countryCode", ""),
            local_name=payload.get("localName"),
            fixed=bool(payload.get("fixed", False)),
            global_holiday=bool(payload.get("global", True)),
            counties=payload.get("counties"),
            types=list(payload.get("types") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the source's field names."""
        return {
            "date": self.date.isoformat(),
            "name": self.name,
            "localName": self.local_name,
            "countryCode": self.country_code,
            "fixed": self.fixed,
            "global": self.global_holiday,
            "counties": self.counties,
            "types": list(self.types),
        }


@dataclass
class HolidayCacheEntry:
    """Cached holidays for one (scope, country, year)."""
    scope: str
    country_code: str
    year: int
    holidays: list[Holiday]
    cached_at: datetime


@dataclass(frozen=True)
class ParticipantStatus:
    """Status of one participant at one candidate hour."""
    participant: Participant
    status: StatusTier
    reason: str
    local_time: Optional[datetime] = None
    holiday: Optional[Holiday] = None


@dataclass(frozen=True)
class EquityResult:
    """Aggregate fairness for one candidate hour."""
    score: int
    green: int = 0
    orange: int = 0
    red: int = 0
    critical: int = 0
    total: int = 0
    total_points: int = 0
    max_possible: int = 0


@dataclass(frozen=True)
class HeatmapEntry:
    """Equity evaluation for one hour of a heatmap."""
    hour: int
    result: EquityResult
    statuses: tuple[ParticipantStatus, ...]
    meeting_time: datetime

    @property
    def score(self) -> int:
        return self.result.score
