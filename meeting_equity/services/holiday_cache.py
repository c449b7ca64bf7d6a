"""Holiday cache keyed by (scope, country code, year) with a freshness window."""

import json
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from meeting_equity.logging_config import get_logger
from meeting_equity.models.entities import Holiday, HolidayCacheEntry

logger = get_logger(__name__)

CacheKey = tuple[str, str, int]

DEFAULT_TTL = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HolidayCache:
    """
    In-memory holiday cache owned by a HolidayService.

    Entries are upserted in place and never deleted explicitly; an entry older
    than ``ttl`` is reported as a miss so the next lookup refreshes it.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Callable[[], datetime] = utc_now):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[CacheKey, HolidayCacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(scope: str, country_code: str, year: int) -> CacheKey:
        return (scope, country_code.upper(), int(year))

    def get_entry(self, scope: str, country_code: str, year: int) -> Optional[HolidayCacheEntry]:
        """Raw entry regardless of age."""
        return self._entries.get(self.make_key(scope, country_code, year))

    def is_fresh(self, entry: HolidayCacheEntry) -> bool:
        return self.clock() - entry.cached_at < self.ttl

    def get(self, scope: str, country_code: str, year: int) -> Optional[list[Holiday]]:
        """Cached holidays if present and younger than the TTL, otherwise None."""
        entry = self.get_entry(scope, country_code, year)
        if entry is None:
            return None
        if not self.is_fresh(entry):
            logger.debug("holiday_cache_stale", scope=scope, country_code=country_code, year=year)
            return None
        return list(entry.holidays)

    def put(self, scope: str, country_code: str, year: int, holidays: list[Holiday]) -> HolidayCacheEntry:
        """Upsert an entry stamped with the current time."""
        key = self.make_key(scope, country_code, year)
        entry = HolidayCacheEntry(
            scope=key[0],
            country_code=key[1],
            year=key[2],
            holidays=list(holidays),
            cached_at=self.clock(),
        )
        with self._lock:
            self._entries[key] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileHolidayCache(HolidayCache):
    """HolidayCache that also writes its entries to a JSON file."""

    def __init__(
        self,
        path: Path | str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(ttl=ttl, clock=clock)
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        with open(self.path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        for record in payload.get("entries", []):
            entry = HolidayCacheEntry(
                scope=record["scope"],
                country_code=record["country_code"],
                year=int(record["year"]),
                holidays=[Holiday.from_api(item) for item in record.get("holidays", [])],
                cached_at=datetime.fromisoformat(record["cached_at"]),
            )
            self._entries[self.make_key(entry.scope, entry.country_code, entry.year)] = entry
        logger.debug("holiday_cache_loaded", path=str(self.path), entries=len(self._entries))

    def _save(self) -> None:
        records = [
            {
                "scope": entry.scope,
                "country_code": entry.country_code,
                "year": entry.year,
                "holidays": [holiday.to_dict() for holiday in entry.holidays],
                "cached_at": entry.cached_at.isoformat(),
            }
            for entry in self._entries.values()
        ]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"entries": records}, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    def put(self, scope: str, country_code: str, year: int, holidays: list[Holiday]) -> HolidayCacheEntry:
        entry = super().put(scope, country_code, year, holidays)
        with self._lock:
            self._save()
        return entry

    def clear(self) -> None:
        super().clear()
        with self._lock:
            self._save()
