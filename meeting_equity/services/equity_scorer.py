"""Equity scoring: how fair a candidate hour is across all participants."""

import math
from typing import Iterable, Sequence

from meeting_equity.models.entities import EquityResult, ParticipantStatus

STATUS_WEIGHTS = {
    "green": 10,
    "orange": 5,
    "red": -15,
    "critical": -50,
}

BEST_WEIGHT = STATUS_WEIGHTS["green"]
WORST_WEIGHT = STATUS_WEIGHTS["critical"]


def _statuses(participant_statuses: Iterable[ParticipantStatus | str]) -> list[str]:
    return [s if isinstance(s, str) else s.status for s in participant_statuses]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def total_points(participant_statuses: Iterable[ParticipantStatus | str]) -> int:
    """Sum of tier weights; unknown tiers count as zero."""
    return sum(STATUS_WEIGHTS.get(status, 0) for status in _statuses(participant_statuses))


def calculate_score(participant_statuses: Sequence[ParticipantStatus | str]) -> int:
    """
    Normalized equity score from 0 to 100.

    Uses min-max normalization between the all-critical total (N x -50) and
    the all-green total (N x 10), so mixed groups keep a gradient even when
    the raw total is negative. An empty group scores 0.
    """
    statuses = _statuses(participant_statuses)
    if not statuses:
        return 0

    count = len(statuses)
    max_possible = count * BEST_WEIGHT
    min_possible = count * WORST_WEIGHT
    normalized = (total_points(statuses) - min_possible) / (max_possible - min_possible) * 100
    return _round_half_up(max(0.0, min(100.0, normalized)))


def get_breakdown(participant_statuses: Iterable[ParticipantStatus | str]) -> dict[str, int]:
    """Count participants per tier."""
    breakdown = {"green": 0, "orange": 0, "red": 0, "critical": 0, "total": 0}
    for status in _statuses(participant_statuses):
        if status in STATUS_WEIGHTS:
            breakdown[status] += 1
        breakdown["total"] += 1
    return breakdown


def calculate_equity(participant_statuses: Sequence[ParticipantStatus | str]) -> EquityResult:
    """Score plus breakdown for one candidate hour."""
    statuses = _statuses(participant_statuses)
    breakdown = get_breakdown(statuses)
    return EquityResult(
        score=calculate_score(statuses),
        green=breakdown["green"],
        orange=breakdown["orange"],
        red=breakdown["red"],
        critical=breakdown["critical"],
        total=breakdown["total"],
        total_points=total_points(statuses),
        max_possible=len(statuses) * BEST_WEIGHT,
    )


def get_score_quality(score: int) -> str:
    """Bucket a score into excellent / good / fair / poor."""
    if score >= 71:
        return "excellent"
    if score >= 41:
        return "good"
    if score >= 1:
        return "fair"
    return "poor"


def compare_scores(score_a: int, score_b: int) -> int:
    """1 if A is better, -1 if B is better, 0 if equal."""
    if score_a > score_b:
        return 1
    if score_a < score_b:
        return -1
    return 0
