"""Command-line entry point: heatmaps, suggestions and holiday lookups."""

import argparse
import json
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from meeting_equity.errors import InvalidArgument
from meeting_equity.logging_config import get_logger, setup_logging
from meeting_equity.models.entities import CountryWorkConfig, Participant
from meeting_equity.services.heatmap_generator import HeatmapCache, HeatmapGenerator, get_top_suggestions
from meeting_equity.services.holiday_cache import HolidayCache, JsonFileHolidayCache
from meeting_equity.services.holiday_service import HolidayService
from meeting_equity.services.report_formatter import ReportFormatter
from meeting_equity.services.timezone_service import get_timezone
from meeting_equity.services.working_hours import validate_work_config
from meeting_equity.settings import Settings, load_settings

logger = get_logger(__name__)


def parse_participant(value: str) -> Participant:
    """Parse ``id:Timezone/Name:CC`` (an optional fourth part is a display name)."""
    parts = value.split(":")
    if len(parts) not in (3, 4):
        raise argparse.ArgumentTypeError(
            f"participant must look like id:Area/City:CC[:Name], got {value!r}"
        )
    participant_id, tz_name, country_code = parts[:3]
    try:
        get_timezone(tz_name)
    except InvalidArgument as e:
        raise argparse.ArgumentTypeError(e.message) from None
    if len(country_code) != 2 or not country_code.isalpha():
        raise argparse.ArgumentTypeError(f"invalid country code {country_code!r}")
    name = parts[3] if len(parts) == 4 else None
    return Participant(id=participant_id, timezone=tz_name, country_code=country_code.upper(), name=name)


def load_country_configs(path: Optional[str]) -> Dict[str, CountryWorkConfig]:
    """
    Load country configs from JSON.

    The file is a list of objects with the CountryWorkConfig fields; work days
    are given either as ``work_days`` (ISO weekday numbers) or as a
    ``work_week_pattern`` string such as ``"SuMTWTh"``.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except (OSError, ValueError) as e:
        raise InvalidArgument(f"Cannot read country configs: {e}", field="configs", value=path) from e
    if not isinstance(records, list):
        raise InvalidArgument("Country configs must be a JSON list", field="configs", value=path)

    configs: Dict[str, CountryWorkConfig] = {}
    for index, record in enumerate(records):
        try:
            config = _build_country_config(dict(record))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgument(
                f"Malformed country config at index {index}: {e!r}",
                field="configs",
                value=record,
            ) from e
        configs[config.country_code] = validate_work_config(config)
    return configs


def _build_country_config(record: Dict[str, object]) -> CountryWorkConfig:
    country_code = str(record.pop("country_code")).upper()
    pattern = record.pop("work_week_pattern", None)
    if pattern is not None:
        return CountryWorkConfig.from_pattern(country_code, pattern, **record)
    work_days = record.pop("work_days", None)
    if work_days is not None:
        record["work_days"] = frozenset(int(day) for day in work_days)
    return CountryWorkConfig(country_code=country_code, **record)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def build_holiday_service(settings: Settings) -> HolidayService:
    ttl = timedelta(days=settings.holiday_cache_ttl_days)
    if settings.holiday_cache_path:
        cache: HolidayCache = JsonFileHolidayCache(Path(settings.holiday_cache_path), ttl=ttl)
    else:
        cache = HolidayCache(ttl=ttl)
    return HolidayService(
        cache=cache,
        base_url=settings.holiday_api_base_url,
        timeout=settings.holiday_api_timeout,
        max_attempts=settings.holiday_max_attempts,
        initial_retry_delay=settings.holiday_initial_retry_delay,
        max_workers=settings.holiday_prefetch_workers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meeting-equity",
        description="Score how fair each meeting hour is for a distributed group.",
    )
    parser.add_argument("--env-file", help="Path to a .env file with settings")
    parser.add_argument("--no-holidays", action="store_true", help="Skip the holiday lookup")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_scheduling_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--date", type=date.fromisoformat, help="YYYY-MM-DD (UTC), defaults to today in UTC")
        sub.add_argument(
            "-p",
            "--participant",
            dest="participants",
            action="append",
            type=parse_participant,
            required=True,
            help="id:Area/City:CC[:Name], repeatable",
        )
        sub.add_argument("--configs", help="JSON file with per-country working hours")

    heatmap = subparsers.add_parser("heatmap", help="Print the 24-hour equity heatmap")
    add_scheduling_args(heatmap)

    suggest = subparsers.add_parser("suggest", help="Print the best meeting hours")
    add_scheduling_args(suggest)
    suggest.add_argument("-n", "--count", type=int, default=3)
    suggest.add_argument("--timezone", help="Also show times in this zone")
    suggest.add_argument("--json", action="store_true", help="Emit JSON instead of text")

    holidays = subparsers.add_parser("holidays", help="List public holidays")
    holidays.add_argument("country_code")
    holidays.add_argument("year", type=int)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.env_file)
    setup_logging(settings.log_level, settings.log_format)

    try:
        with build_holiday_service(settings) as holiday_service:
            if args.command == "holidays":
                result = holiday_service.fetch_holidays(args.country_code, args.year)
                print(ReportFormatter.format_holidays(args.country_code.upper(), args.year, result))
                return 0

            participants: List[Participant] = args.participants
            generator = HeatmapGenerator(
                holiday_service=None if args.no_holidays else holiday_service,
                country_configs=load_country_configs(args.configs),
                cache=HeatmapCache(
                    ttl_seconds=settings.heatmap_cache_ttl_seconds,
                    max_entries=settings.heatmap_cache_max_entries,
                ),
            )
            heatmap = generator.generate(args.date or utc_today(), participants)

            if args.command == "heatmap":
                print(ReportFormatter.format_heatmap(heatmap))
            else:
                suggestions = get_top_suggestions(heatmap, args.count)
                if args.json:
                    print(json.dumps(ReportFormatter.suggestions_to_dict(suggestions), indent=2))
                else:
                    print(ReportFormatter.format_suggestions(suggestions, args.timezone))
            return 0
    except InvalidArgument as e:
        logger.error("invalid_argument", error=e.message, **e.details)
        print(ReportFormatter.format_error("Invalid Input", e.message), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
