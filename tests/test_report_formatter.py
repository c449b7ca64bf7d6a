from datetime import date, datetime

from meeting_equity.models.entities import Holiday, Participant, ParticipantStatus
from meeting_equity.services.heatmap_generator import HeatmapGenerator, get_top_suggestions
from meeting_equity.services.report_formatter import ReportFormatter

NEW_YORK = Participant(id="ny", timezone="America/New_York", country_code="US", name="Nia")
LONDON = Participant(id="ldn", timezone="Europe/London", country_code="GB")


def monday_heatmap():
    return HeatmapGenerator().generate(date(2025, 12, 15), [NEW_YORK, LONDON])


def test_format_heatmap_has_a_row_per_hour():
    text = ReportFormatter.format_heatmap(monday_heatmap())
    lines = text.splitlines()

    assert lines[0] == "🗓️ Equity Heatmap for 2025-12-15"
    rows = [line for line in lines if " UTC " in line]
    assert len(rows) == 24
    assert rows[14].startswith("14:00 UTC  100")
    assert "green 2 · orange 0 · red 0 · critical 0" in rows[14]


def test_format_heatmap_empty():
    assert ReportFormatter.format_heatmap([]).startswith("❌ Empty Heatmap")


def test_format_suggestions_lists_each_participant():
    suggestions = get_top_suggestions(monday_heatmap(), 1)
    text = ReportFormatter.format_suggestions(suggestions, display_timezone="America/New_York")

    assert "1. 2025-12-15 14:00 UTC / 9:00 AM EST (America/New_York) - score 100 (excellent)" in text
    assert "Nia (America/New_York, Mon 09:00) - optimal hours" in text
    # no display name falls back to the id
    assert "ldn (Europe/London, Mon 14:00) - optimal hours" in text


def test_format_suggestions_empty():
    text = ReportFormatter.format_suggestions([])
    assert text.startswith("❌ No Suggestions")
    assert "• Add participants to the request" in text


def test_holiday_name_is_shown_in_status_line():
    christmas = Holiday(date=date(2025, 12, 25), name="Christmas Day", country_code="US")
    status = ParticipantStatus(
        participant=NEW_YORK,
        status="critical",
        reason="national holiday",
        local_time=datetime(2025, 12, 25, 10, 0),
        holiday=christmas,
    )
    assert ReportFormatter.format_status_line(status).endswith("national holiday: Christmas Day")


def test_format_holidays_sorted_with_local_names():
    holidays = [
        Holiday(date=date(2025, 12, 25), name="Christmas Day", country_code="DE", local_name="Weihnachtstag"),
        Holiday(date=date(2025, 1, 1), name="New Year's Day", country_code="DE", local_name="Neujahr"),
    ]
    lines = ReportFormatter.format_holidays("DE", 2025, holidays).splitlines()

    assert lines[0] == "🎉 Holidays for DE 2025"
    assert lines[2] == "• 2025-01-01  New Year's Day (Neujahr)"
    assert lines[3] == "• 2025-12-25  Christmas Day (Weihnachtstag)"


def test_format_holidays_empty_is_informational():
    assert ReportFormatter.format_holidays("XK", 2025, []).startswith("ℹ️ Holidays for XK 2025")


def test_suggestions_to_dict():
    data = ReportFormatter.suggestions_to_dict(get_top_suggestions(monday_heatmap(), 2))

    assert [item["hour"] for item in data] == [14, 15]
    first = data[0]
    assert first["meeting_time"] == "2025-12-15T14:00:00+00:00"
    assert first["quality"] == "excellent"
    assert first["breakdown"] == {"green": 2, "orange": 0, "red": 0, "critical": 0, "total": 2}
    assert first["participants"][0] == {
        "id": "ny",
        "status": "green",
        "reason": "optimal hours",
        "local_time": "2025-12-15T09:00:00-05:00",
    }
