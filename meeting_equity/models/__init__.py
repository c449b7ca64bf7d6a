from meeting_equity.models.entities import (
    DEFAULT_WORK_CONFIG,
    CountryWorkConfig,
    EquityResult,
    HeatmapEntry,
    Holiday,
    HolidayCacheEntry,
    Participant,
    ParticipantStatus,
)

__all__ = [
    "DEFAULT_WORK_CONFIG",
    "CountryWorkConfig",
    "EquityResult",
    "HeatmapEntry",
    "Holiday",
    "HolidayCacheEntry",
    "Participant",
    "ParticipantStatus",
]
