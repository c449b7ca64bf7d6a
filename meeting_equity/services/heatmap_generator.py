"""24-hour equity heatmaps and best-time suggestions."""

import threading
import time
from collections import OrderedDict
from datetime import date, datetime, time as dt_time, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pytz

from meeting_equity.logging_config import get_logger
from meeting_equity.models.entities import (
    DEFAULT_WORK_CONFIG,
    CountryWorkConfig,
    HeatmapEntry,
    Holiday,
    Participant,
    ParticipantStatus,
)
from meeting_equity.services.equity_scorer import calculate_equity
from meeting_equity.services.holiday_service import HolidayService, is_holiday
from meeting_equity.services.retry import RetryOutcome
from meeting_equity.services.timezone_service import to_local
from meeting_equity.services.working_hours import classify_participant, is_working_day, resolve_config

logger = get_logger(__name__)

HeatmapKey = Tuple[date, Tuple[str, ...]]
HolidayMemo = Dict[Tuple[str, int], RetryOutcome[List[Holiday]]]


class HeatmapCache:
    """Heatmaps keyed by (date, sorted participant ids) with TTL and LRU eviction."""

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.clock = clock
        self._entries: "OrderedDict[HeatmapKey, Tuple[float, List[HeatmapEntry]]]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def make_key(target_date: date, participants: Sequence[Participant]) -> HeatmapKey:
        return (target_date, tuple(sorted(p.id for p in participants)))

    def get(self, key: HeatmapKey) -> Optional[List[HeatmapEntry]]:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            stored_at, heatmap = item
            if self.clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return list(heatmap)

    def put(self, key: HeatmapKey, heatmap: List[HeatmapEntry]) -> None:
        with self._lock:
            self._entries[key] = (self.clock(), list(heatmap))
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class HeatmapGenerator:
    """Scores every UTC hour of a day for a group of participants."""

    def __init__(
        self,
        holiday_service: Optional[HolidayService] = None,
        country_configs: Optional[Mapping[str, CountryWorkConfig]] = None,
        default_config: CountryWorkConfig = DEFAULT_WORK_CONFIG,
        cache: Optional[HeatmapCache] = None,
    ):
        """
        Initialize the generator.

        Args:
            holiday_service: Source of public holidays; without one no day is a holiday
            country_configs: Working-hours policy per country code
            default_config: Policy for countries missing from ``country_configs``
            cache: Heatmap cache; a private one is created when omitted
        """
        self.holiday_service = holiday_service
        self.country_configs: Dict[str, CountryWorkConfig] = {
            code.upper(): config for code, config in (country_configs or {}).items()
        }
        self.default_config = default_config
        self.cache = cache if cache is not None else HeatmapCache()

    def config_for(self, country_code: str) -> CountryWorkConfig:
        return resolve_config(country_code, self.country_configs, self.default_config)

    def _holidays_for(
        self,
        country_code: str,
        year: int,
        memo: HolidayMemo,
    ) -> List[Holiday]:
        if self.holiday_service is None:
            return []
        key = (country_code.upper(), year)
        if key not in memo:
            memo[key] = self.holiday_service.fetch_holidays_outcome(country_code, year)
        outcome = memo[key]
        if outcome.exhausted:
            return []
        return outcome.value or []

    def evaluate_participant(
        self,
        participant: Participant,
        meeting_time: datetime,
        memo: Optional[HolidayMemo] = None,
    ) -> ParticipantStatus:
        """Status of one participant at an absolute meeting time."""
        local_time = to_local(meeting_time, participant.timezone)
        config = self.config_for(participant.country_code)
        holidays = self._holidays_for(participant.country_code, local_time.year, memo if memo is not None else {})
        holiday = is_holiday(local_time, holidays)
        return classify_participant(
            participant,
            local_time,
            config,
            holiday=holiday,
            is_work_day=is_working_day(local_time.date(), config),
        )

    def evaluate_time(
        self,
        meeting_time: datetime,
        participants: Sequence[Participant],
        memo: Optional[HolidayMemo] = None,
    ) -> HeatmapEntry:
        """Score a single meeting time (naive values are read as UTC)."""
        if meeting_time.tzinfo is None:
            meeting_time = pytz.UTC.localize(meeting_time)
        meeting_time = meeting_time.astimezone(pytz.UTC)
        memo = memo if memo is not None else {}
        statuses = [self.evaluate_participant(p, meeting_time, memo) for p in participants]
        return HeatmapEntry(
            hour=meeting_time.hour,
            result=calculate_equity(statuses),
            statuses=tuple(statuses),
            meeting_time=meeting_time,
        )

    def generate(self, target_date: date | datetime, participants: Sequence[Participant]) -> List[HeatmapEntry]:
        """
        Build the 24-hour heatmap for a calendar date.

        Args:
            target_date: Calendar date; hours are evaluated at HH:00 UTC on it
            participants: Group to schedule

        Returns:
            24 HeatmapEntry objects ordered by hour (empty for no participants)
        """
        if not participants:
            return []

        if isinstance(target_date, datetime):
            if target_date.tzinfo is not None:
                target_date = target_date.astimezone(pytz.UTC)
            target_date = target_date.date()

        key = HeatmapCache.make_key(target_date, participants)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("heatmap_cache_hit", date=target_date.isoformat(), participants=len(participants))
            return cached

        midnight = pytz.UTC.localize(datetime.combine(target_date, dt_time.min))
        memo: HolidayMemo = {}
        heatmap = [
            self.evaluate_time(midnight + timedelta(hours=hour), participants, memo)
            for hour in range(24)
        ]

        degraded = sorted(lookup for lookup, outcome in memo.items() if outcome.exhausted)
        if degraded:
            # Holiday data is incomplete; the next request retries the lookups
            logger.info(
                "heatmap_not_cached",
                date=target_date.isoformat(),
                degraded_lookups=[f"{code}/{year}" for code, year in degraded],
            )
        else:
            self.cache.put(key, heatmap)
        logger.info(
            "heatmap_generated",
            date=target_date.isoformat(),
            participants=len(participants),
            best_score=max(entry.score for entry in heatmap),
        )
        return list(heatmap)


def get_top_suggestions(heatmap: Sequence[HeatmapEntry], count: int = 3) -> List[HeatmapEntry]:
    """Best ``count`` hours by score; equal scores keep the earlier hour first."""
    if not heatmap or count <= 0:
        return []
    ranked = sorted(heatmap, key=lambda entry: (-entry.score, entry.hour))
    return ranked[:count]
