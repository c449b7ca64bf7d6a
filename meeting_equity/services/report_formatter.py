"""Structured text rendering of heatmaps, suggestions and holiday lists."""

from typing import Dict, List, Optional, Sequence

from meeting_equity.models.entities import HeatmapEntry, Holiday, ParticipantStatus
from meeting_equity.services.equity_scorer import get_score_quality
from meeting_equity.services.timezone_service import format_with_timezone

STATUS_ICONS = {
    "green": "🟢",
    "orange": "🟠",
    "red": "🔴",
    "critical": "⛔",
}


class ReportFormatter:
    """Formats engine results as plain text in a consistent layout."""

    @staticmethod
    def format_section(title: str, content: List[str], icon: str = "📋") -> str:
        """Format a section with title and content."""
        lines = [f"{icon} {title}", ""]
        lines.extend(content)
        return "\n".join(lines)

    @staticmethod
    def format_breakdown(entry: HeatmapEntry) -> str:
        """One-line tier counts, e.g. ``green 2 · orange 1 · red 0 · critical 0``."""
        result = entry.result
        return (
            f"green {result.green} · orange {result.orange} · "
            f"red {result.red} · critical {result.critical}"
        )

    @staticmethod
    def format_status_line(status: ParticipantStatus) -> str:
        """Format one participant's status at the evaluated time."""
        participant = status.participant
        label = participant.name or participant.id
        icon = STATUS_ICONS.get(status.status, "•")
        local = status.local_time.strftime("%a %H:%M") if status.local_time else "?"
        reason = status.reason
        if status.holiday is not None:
            reason = f"{reason}: {status.holiday.local_name or status.holiday.name}"
        return f"   {icon} {label} ({participant.timezone}, {local}) - {reason}"

    @staticmethod
    def format_heatmap(heatmap: Sequence[HeatmapEntry]) -> str:
        """Format the 24-hour heatmap as a bar per hour."""
        if not heatmap:
            return ReportFormatter.format_error(
                "Empty Heatmap",
                "No participants were supplied, so there is nothing to score.",
            )

        day = heatmap[0].meeting_time.date().isoformat()
        content = []
        for entry in heatmap:
            bar = "█" * (entry.score // 5)
            content.append(
                f"{entry.hour:02d}:00 UTC  {entry.score:3d}  {bar:<20}  {ReportFormatter.format_breakdown(entry)}"
            )
        return ReportFormatter.format_section(f"Equity Heatmap for {day}", content, icon="🗓️")

    @staticmethod
    def format_suggestions(
        suggestions: Sequence[HeatmapEntry],
        display_timezone: Optional[str] = None,
    ) -> str:
        """Format ranked suggestions with each participant's local status."""
        if not suggestions:
            return ReportFormatter.format_error(
                "No Suggestions",
                "No meeting times could be ranked.",
                ["Add participants to the request", "Try a different date"],
            )

        lines = ["⭐ Best Meeting Times", ""]
        for i, entry in enumerate(suggestions, 1):
            when = entry.meeting_time.strftime("%Y-%m-%d %H:%M UTC")
            if display_timezone:
                when = f"{when} / {format_with_timezone(entry.meeting_time, display_timezone)}"
            quality = get_score_quality(entry.score)
            lines.append(f"{i}. {when} - score {entry.score} ({quality})")
            lines.extend(ReportFormatter.format_status_line(status) for status in entry.statuses)
            lines.append("")
        return "\n".join(lines).rstrip()

    @staticmethod
    def format_holidays(country_code: str, year: int, holidays: Sequence[Holiday]) -> str:
        """Format a holiday list for one country and year."""
        if not holidays:
            return ReportFormatter.format_info(
                f"Holidays for {country_code} {year}",
                "No holiday data available (none published, or the source was unreachable).",
            )
        content = [
            f"• {holiday.date.isoformat()}  {holiday.name}"
            + (f" ({holiday.local_name})" if holiday.local_name and holiday.local_name != holiday.name else "")
            for holiday in sorted(holidays, key=lambda h: h.date)
        ]
        return ReportFormatter.format_section(f"Holidays for {country_code} {year}", content, icon="🎉")

    @staticmethod
    def suggestions_to_dict(suggestions: Sequence[HeatmapEntry]) -> List[Dict[str, object]]:
        """Machine-readable form of suggestions for presentation layers."""
        return [
            {
                "hour": entry.hour,
                "meeting_time": entry.meeting_time.isoformat(),
                "score": entry.score,
                "quality": get_score_quality(entry.score),
                "breakdown": {
                    "green": entry.result.green,
                    "orange": entry.result.orange,
                    "red": entry.result.red,
                    "critical": entry.result.critical,
                    "total": entry.result.total,
                },
                "participants": [
                    {
                        "id": status.participant.id,
                        "status": status.status,
                        "reason": status.reason,
                        "local_time": status.local_time.isoformat() if status.local_time else None,
                    }
                    for status in entry.statuses
                ],
            }
            for entry in suggestions
        ]

    @staticmethod
    def format_error(title: str, message: str, suggestions: Optional[List[str]] = None) -> str:
        """Format an error message with optional suggestions."""
        lines = [f"❌ {title}", "", message]
        if suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in suggestions:
                lines.append(f"• {suggestion}")
        return "\n".join(lines)

    @staticmethod
    def format_info(title: str, message: str, items: Optional[List[str]] = None) -> str:
        """Format an informational message."""
        lines = [f"ℹ️ {title}", "", message]
        if items:
            lines.append("")
            for item in items:
                lines.append(f"• {item}")
        return "\n".join(lines)
