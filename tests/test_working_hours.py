from datetime import date, datetime

import pytest
import pytz

from meeting_equity.errors import InvalidArgument
from meeting_equity.models.entities import (
    DEFAULT_WORK_CONFIG,
    CountryWorkConfig,
    Holiday,
    Participant,
    parse_work_week_pattern,
)
from meeting_equity.services.working_hours import (
    classify_participant,
    determine_status,
    format_time_range,
    is_working_day,
    parse_time_to_minutes,
    resolve_config,
    validate_work_config,
)

# 2025-12-15 is a Monday, 2025-12-13 a Saturday
MONDAY = date(2025, 12, 15)
SATURDAY = date(2025, 12, 13)

CHRISTMAS = Holiday(date=date(2025, 12, 25), name="Christmas Day", country_code="US")


def at(day: date, hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, second)


class TestDetermineStatus:
    def test_early_morning_buffer_is_orange(self):
        config = CountryWorkConfig(
            country_code="US",
            green_start="09:00",
            orange_morning_start="08:00",
            orange_morning_end="09:00",
        )
        assert determine_status(at(MONDAY, 8, 30), config) == ("orange", "acceptable, early")

    def test_green_hours(self):
        assert determine_status(at(MONDAY, 14), DEFAULT_WORK_CONFIG) == ("green", "optimal hours")

    def test_evening_buffer_is_orange_late(self):
        assert determine_status(at(MONDAY, 17, 30), DEFAULT_WORK_CONFIG) == ("orange", "acceptable, late")

    def test_outside_hours_is_red(self):
        assert determine_status(at(MONDAY, 22), DEFAULT_WORK_CONFIG) == ("red", "outside working hours")

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [
            (7, 59, "red"),
            (8, 0, "orange"),
            (8, 59, "orange"),
            (9, 0, "green"),
            (16, 59, "green"),
            (17, 0, "orange"),
            (17, 59, "orange"),
            (18, 0, "red"),
        ],
    )
    def test_boundaries_are_half_open(self, hour, minute, expected):
        status, _ = determine_status(at(MONDAY, hour, minute), DEFAULT_WORK_CONFIG)
        assert status == expected

    def test_config_with_seconds(self):
        config = CountryWorkConfig(country_code="FR", green_start="09:00:00", green_end="17:00:00")
        assert determine_status(at(MONDAY, 9), config)[0] == "green"

    def test_holiday_overrides_green_hours(self):
        assert determine_status(at(MONDAY, 10), DEFAULT_WORK_CONFIG, holiday=CHRISTMAS) == (
            "critical",
            "national holiday",
        )

    @pytest.mark.parametrize("hour", [0, 8, 10, 17, 23])
    def test_holiday_is_critical_at_any_time(self, hour):
        status, reason = determine_status(at(MONDAY, hour), DEFAULT_WORK_CONFIG, holiday=CHRISTMAS, is_work_day=True)
        assert status == "critical"
        assert reason == "national holiday"

    def test_holiday_takes_priority_over_non_working_day(self):
        status, reason = determine_status(at(SATURDAY, 10), DEFAULT_WORK_CONFIG, holiday=CHRISTMAS)
        assert (status, reason) == ("critical", "national holiday")

    def test_non_working_day_during_green_hours(self):
        assert determine_status(at(SATURDAY, 10), DEFAULT_WORK_CONFIG) == ("critical", "non-working day")

    def test_explicit_work_day_flag_wins(self):
        assert determine_status(at(SATURDAY, 10), DEFAULT_WORK_CONFIG, is_work_day=True)[0] == "green"
        assert determine_status(at(MONDAY, 10), DEFAULT_WORK_CONFIG, is_work_day=False)[0] == "critical"

    def test_uses_wall_clock_of_aware_time(self):
        local = pytz.timezone("Asia/Tokyo").localize(at(MONDAY, 10))
        assert determine_status(local, DEFAULT_WORK_CONFIG)[0] == "green"


class TestWorkDays:
    def test_default_is_monday_to_friday(self):
        assert is_working_day(MONDAY, DEFAULT_WORK_CONFIG)
        assert not is_working_day(SATURDAY, DEFAULT_WORK_CONFIG)

    def test_parse_monday_to_friday(self):
        assert parse_work_week_pattern("MTWTF") == frozenset({1, 2, 3, 4, 5})

    def test_parse_sunday_to_thursday(self):
        assert parse_work_week_pattern("SuMTWTh") == frozenset({7, 1, 2, 3, 4})

    def test_parse_explicit_thursday(self):
        assert parse_work_week_pattern("MTWThF") == frozenset({1, 2, 3, 4, 5})

    def test_parse_rejects_unknown_codes(self):
        with pytest.raises(InvalidArgument) as exc_info:
            parse_work_week_pattern("MXF")
        assert exc_info.value.field == "work_week_pattern"
        assert exc_info.value.value == "MXF"

    def test_from_pattern(self):
        config = CountryWorkConfig.from_pattern("il", "SuMTWTh", green_start="08:30")
        assert config.country_code == "IL"
        assert config.green_start == "08:30"
        assert is_working_day(date(2025, 12, 14), config)  # Sunday
        assert not is_working_day(date(2025, 12, 19), config)  # Friday


class TestHelpers:
    def test_parse_time_to_minutes(self):
        assert parse_time_to_minutes("09:30") == 570
        assert parse_time_to_minutes("17:00:59") == 1020

    def test_format_time_range(self):
        assert format_time_range("09:00:00", "17:00:00") == "9:00 AM - 5:00 PM"
        assert format_time_range("00:00", "12:30") == "12:00 AM - 12:30 PM"

    def test_resolve_config_falls_back_to_default(self):
        fr = CountryWorkConfig(country_code="FR", green_start="10:00")
        assert resolve_config("fr", {"FR": fr}) is fr
        assert resolve_config("DE", {"FR": fr}) is DEFAULT_WORK_CONFIG
        assert resolve_config("DE") is DEFAULT_WORK_CONFIG

    def test_classify_participant(self):
        participant = Participant(id="p1", timezone="Europe/Paris", country_code="FR")
        status = classify_participant(participant, at(MONDAY, 8, 15), DEFAULT_WORK_CONFIG)
        assert status.participant is participant
        assert status.status == "orange"
        assert status.reason == "acceptable, early"
        assert status.local_time == at(MONDAY, 8, 15)
        assert status.holiday is None


class TestValidateWorkConfig:
    def test_default_is_valid(self):
        assert validate_work_config(DEFAULT_WORK_CONFIG) is DEFAULT_WORK_CONFIG

    def test_full_day_green_is_valid(self):
        config = CountryWorkConfig(
            country_code="US",
            green_start="00:00",
            green_end="24:00",
            orange_morning_start="00:00",
            orange_morning_end="00:00",
            orange_evening_start="24:00",
            orange_evening_end="24:00",
            work_days=frozenset(range(1, 8)),
        )
        assert validate_work_config(config) is config

    @pytest.mark.parametrize("value", ["9am", "25:00", "09:60", "", "9"])
    def test_malformed_time(self, value):
        with pytest.raises(InvalidArgument) as exc_info:
            validate_work_config(CountryWorkConfig(country_code="US", green_start=value))
        assert exc_info.value.field == "green_start"

    def test_morning_orange_overlapping_green(self):
        with pytest.raises(InvalidArgument):
            validate_work_config(CountryWorkConfig(country_code="US", orange_morning_end="09:30"))

    def test_evening_orange_overlapping_green(self):
        with pytest.raises(InvalidArgument):
            validate_work_config(CountryWorkConfig(country_code="US", orange_evening_start="16:00"))

    def test_reversed_green_window(self):
        with pytest.raises(InvalidArgument):
            validate_work_config(CountryWorkConfig(country_code="US", green_start="17:00", green_end="09:00"))

    def test_bad_work_day(self):
        with pytest.raises(InvalidArgument):
            validate_work_config(CountryWorkConfig(country_code="US", work_days=frozenset({0, 1})))

    def test_bad_country_code(self):
        with pytest.raises(InvalidArgument):
            validate_work_config(CountryWorkConfig(country_code="USA"))
