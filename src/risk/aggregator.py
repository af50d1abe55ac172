# src/risk/aggregator.py — v1
"""Portfolio risk aggregation and classification.

Buckets are recomputed from ``default_probability``; the ``risk_severity``
label on an assessment is never trusted for counting. All functions are
pure and safe to call concurrently.
"""

from __future__ import annotations

from collections.abc import Sequence

from rentroll.core.models import (
    ActionPriority,
    PortfolioAnalysis,
    PortfolioRiskSummary,
    PriorityColor,
    RecommendedAction,
    RiskColor,
    RiskSeverity,
    TenantRiskAssessment,
)
from rentroll.core.rounding import round_half_up

HIGH_RISK_THRESHOLD = 60.0
MEDIUM_RISK_THRESHOLD = 30.0
ELEVATED_RISK_THRESHOLD = 15.0

PRIORITY_ORDER: tuple[ActionPriority, ...] = ("immediate", "urgent", "normal", "low")

_PRIORITY_COLORS: dict[str, PriorityColor] = {
    "immediate": "red",
    "urgent": "orange",
    "normal": "blue",
    "low": "gray",
}
FALLBACK_PRIORITY_COLOR: PriorityColor = "gray"


def risk_bucket_for(probability: float) -> RiskSeverity:
    """high >= 60, medium >= 30, low otherwise."""
    if probability >= HIGH_RISK_THRESHOLD:
        return "high"
    if probability >= MEDIUM_RISK_THRESHOLD:
        return "medium"
    return "low"


def risk_color_for(probability: float) -> RiskColor:
    """Same high/medium boundaries, with low split at 15 into yellow and green."""
    if probability >= HIGH_RISK_THRESHOLD:
        return "red"
    if probability >= MEDIUM_RISK_THRESHOLD:
        return "orange"
    if probability >= ELEVATED_RISK_THRESHOLD:
        return "yellow"
    return "green"


def priority_color_for(priority: str | None) -> PriorityColor:
    """Color for an action priority; unknown values get the fallback."""
    if priority is None:
        return FALLBACK_PRIORITY_COLOR
    return _PRIORITY_COLORS.get(str(priority).lower(), FALLBACK_PRIORITY_COLOR)


def summarize(assessments: Sequence[TenantRiskAssessment]) -> PortfolioRiskSummary:
    """Bucket counts and mean default probability (one decimal, 0 when empty)."""
    total = len(assessments)
    if total == 0:
        return PortfolioRiskSummary()

    counts: dict[RiskSeverity, int] = {"high": 0, "medium": 0, "low": 0}
    for a in assessments:
        counts[risk_bucket_for(a.default_probability)] += 1

    mean = sum(a.default_probability for a in assessments) / total
    return PortfolioRiskSummary(
        average_risk=round_half_up(mean, 1),
        high_risk_count=counts["high"],
        medium_risk_count=counts["medium"],
        low_risk_count=counts["low"],
        total_assessed=total,
    )


def prioritize_actions(actions: Sequence[RecommendedAction]) -> list[RecommendedAction]:
    """Most pressing first; order within a priority is preserved."""
    rank = {p: i for i, p in enumerate(PRIORITY_ORDER)}
    return sorted(actions, key=lambda a: rank.get(a.priority, len(rank)))


def analyze_portfolio(
    assessments: Sequence[TenantRiskAssessment],
    actions: Sequence[RecommendedAction] = (),
) -> PortfolioAnalysis:
    return PortfolioAnalysis(
        summary=summarize(assessments),
        assessments=list(assessments),
        actions=prioritize_actions(actions),
    )
