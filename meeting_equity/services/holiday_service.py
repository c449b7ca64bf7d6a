"""Public holiday lookup against the Nager.Date API with caching and retries."""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import httpx

from meeting_equity.errors import HolidayNotFound, InvalidArgument, TransientFetchFailure
from meeting_equity.logging_config import get_logger
from meeting_equity.models.entities import Holiday
from meeting_equity.services.holiday_cache import HolidayCache
from meeting_equity.services.retry import RetryOutcome, retry_with_backoff
from meeting_equity.settings import DEFAULT_HOLIDAY_API_BASE_URL

logger = get_logger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100
DEFAULT_SCOPE = "global"


def validate_country_code(country_code: str) -> str:
    """Upper-cased code, or InvalidArgument unless it is exactly two letters."""
    if not isinstance(country_code, str) or len(country_code) != 2 or not country_code.isalpha():
        raise InvalidArgument(
            "Valid ISO 3166-1 alpha-2 country code required",
            field="country_code",
            value=country_code,
        )
    return country_code.upper()


def validate_year(year: int) -> int:
    if isinstance(year, bool) or not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidArgument(f"Valid year required ({MIN_YEAR}-{MAX_YEAR})", field="year", value=year)
    return year


class HolidayService:
    """Client for public holiday data, cached per (scope, country, year)."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        cache: Optional[HolidayCache] = None,
        scope: str = DEFAULT_SCOPE,
        base_url: str = DEFAULT_HOLIDAY_API_BASE_URL,
        timeout: float = 10.0,
        max_attempts: int = 3,
        initial_retry_delay: float = 1.0,
        max_workers: int = 4,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the holiday service.

        Args:
            client: HTTP client; one is created (and owned) when omitted
            cache: Holiday cache; a private in-memory cache when omitted
            scope: Tenant/user scope the cache entries belong to
            base_url: Holiday API base URL
            timeout: Per-attempt timeout in seconds
            max_attempts: Attempts per lookup before degrading to no data
            initial_retry_delay: First backoff delay in seconds (doubles each retry)
            max_workers: Thread pool size for prefetch_holidays
            sleep: Sleep function used between attempts
        """
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)
        self.cache = cache if cache is not None else HolidayCache()
        self.scope = scope
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.initial_retry_delay = initial_retry_delay
        self.max_workers = max_workers
        self.sleep = sleep

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HolidayService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request_holidays(self, country_code: str, year: int) -> List[Holiday]:
        """One attempt against the API. 404 raises HolidayNotFound."""
        url = f"{self.base_url}/PublicHolidays/{year}/{country_code}"
        try:
            response = self.client.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransientFetchFailure(f"Holiday API request failed: {e}") from e

        if response.status_code == 404:
            raise HolidayNotFound(country_code, year)
        if not response.is_success:
            raise TransientFetchFailure(
                f"Holiday API request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            return [Holiday.from_api(item) for item in payload]
        except (ValueError, KeyError, TypeError) as e:
            raise TransientFetchFailure(f"Malformed holiday payload: {e}") from e

    def fetch_from_api(self, country_code: str, year: int) -> RetryOutcome[List[Holiday]]:
        """
        Fetch from the API with retries, bypassing the cache.

        A 404 is not retried: it comes back as a successful outcome with an
        empty list.
        """
        def attempt() -> List[Holiday]:
            try:
                return self._request_holidays(country_code, year)
            except HolidayNotFound:
                logger.info("holiday_data_not_found", country_code=country_code, year=year)
                return []

        return retry_with_backoff(
            attempt,
            max_attempts=self.max_attempts,
            initial_delay=self.initial_retry_delay,
            retry_on=(TransientFetchFailure,),
            sleep=self.sleep,
        )

    def fetch_holidays_outcome(self, country_code: str, year: int) -> RetryOutcome[List[Holiday]]:
        """
        Look up holidays and report how the lookup went.

        A cache hit comes back as a succeeded outcome with zero attempts. An
        exhausted outcome means the source was unreachable and nothing was
        cached, so callers must not treat its empty result as authoritative.

        Raises:
            InvalidArgument: If the country code or year is malformed
        """
        code = validate_country_code(country_code)
        year = validate_year(year)

        cached = self.cache.get(self.scope, code, year)
        if cached is not None:
            logger.debug("holiday_cache_hit", country_code=code, year=year)
            return RetryOutcome(succeeded=True, attempts=0, value=cached)

        outcome = self.fetch_from_api(code, year)
        if outcome.exhausted:
            logger.warning(
                "holiday_fetch_degraded",
                country_code=code,
                year=year,
                attempts=outcome.attempts,
                error=str(outcome.last_error),
            )
            return outcome

        holidays = outcome.value or []
        self.cache.put(self.scope, code, year, holidays)
        logger.info("holidays_cached", country_code=code, year=year, count=len(holidays))
        outcome.value = list(holidays)
        return outcome

    def fetch_holidays(self, country_code: str, year: int) -> List[Holiday]:
        """
        Get public holidays for a country and year.

        Args:
            country_code: ISO 3166-1 alpha-2 code (case-insensitive)
            year: Year between 2000 and 2100

        Returns:
            List of holidays; empty when the source has no data or is unreachable

        Raises:
            InvalidArgument: If the country code or year is malformed
        """
        outcome = self.fetch_holidays_outcome(country_code, year)
        if outcome.exhausted:
            # Scheduling proceeds without holiday awareness
            return []
        return outcome.value or []

    def prefetch_holidays(
        self,
        country_codes: Iterable[str],
        today: Optional[date] = None,
    ) -> Dict[Tuple[str, int], List[Holiday]]:
        """
        Warm the cache with the current and next year for each country.

        Lookups run on a bounded thread pool. A failing country is logged
        and skipped so the rest of the batch still completes.

        Returns:
            Mapping of (country code, year) to holidays for the lookups that succeeded
        """
        today = today or date.today()
        jobs = sorted({
            (code.upper() if isinstance(code, str) else code, year)
            for code in country_codes
            for year in (today.year, today.year + 1)
        }, key=str)

        results: Dict[Tuple[str, int], List[Holiday]] = {}
        if not jobs:
            return results

        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(jobs)))) as executor:
            futures = {job: executor.submit(self.fetch_holidays, *job) for job in jobs}
            for job, future in futures.items():
                try:
                    results[job] = future.result()
                except Exception as e:
                    logger.warning("holiday_prefetch_failed", country_code=job[0], year=job[1], error=str(e))

        logger.info("holidays_prefetched", countries=len({job[0] for job in jobs}), lookups=len(results))
        return results


def is_holiday(day: date | datetime, holidays: Iterable[Holiday]) -> Optional[Holiday]:
    """
    Holiday falling on ``day``'s calendar date, ignoring time of day.

    For an aware datetime the comparison uses its own (local) calendar day,
    so 23:59:59 local time on a holiday still matches.
    """
    target = day.date() if isinstance(day, datetime) else day
    for holiday in holidays:
        if holiday.date == target:
            return holiday
    return None


def get_upcoming_holidays(holidays: Iterable[Holiday], from_date: date, count: int = 5) -> List[Holiday]:
    """Next ``count`` holidays strictly after ``from_date``, soonest first."""
    if isinstance(from_date, datetime):
        from_date = from_date.date()
    upcoming = sorted((h for h in holidays if h.date > from_date), key=lambda h: h.date)
    return upcoming[:count]
