# src/risk/adapter.py — v1
"""Boundary adapter for upstream tenant-analysis records.

Upstream producers emit camelCase or snake_case keys, optional fields and a
``critical`` severity. This module is the only place those shapes are
accepted; everything past it uses the canonical models.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from rentroll.core.models import RecommendedAction, TenantRiskAssessment

logger = logging.getLogger(__name__)

_SEVERITY_ALIASES = {"critical": "high", "severe": "high", "moderate": "medium"}
_PRIORITIES = {"immediate", "urgent", "normal", "low"}


class AssessmentFormatError(ValueError):
    """An upstream record cannot be turned into a canonical record."""


def _pick(raw: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        value = raw.get(name)
        if value is not None and value != "":
            return value
    return default


def _string_set(value: Any) -> frozenset[str]:
    if not value:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(str(v) for v in value if v)


def to_assessment(raw: Mapping[str, Any]) -> TenantRiskAssessment:
    """Build a TenantRiskAssessment from one upstream record.

    Raises:
        AssessmentFormatError: On missing identity or out-of-range numbers.
    """
    severity = str(_pick(raw, "riskSeverity", "risk_severity", default="low")).lower()
    severity = _SEVERITY_ALIASES.get(severity, severity)
    try:
        return TenantRiskAssessment(
            tenant_name=_pick(raw, "tenantName", "tenant_name"),
            unit_number=str(_pick(raw, "unitNumber", "unit_number", default="")),
            default_probability=_pick(
                raw, "defaultProbability", "default_probability", default=0
            ),
            risk_severity=severity,
            risk_factors=_string_set(_pick(raw, "riskFactors", "risk_factors")),
            protective_factors=_string_set(
                _pick(raw, "protectiveFactors", "protective_factors")
            ),
            confidence=_pick(raw, "confidence", "confidence_level", default=0),
            comments=_pick(raw, "comments", default=""),
        )
    except ValidationError as e:
        raise AssessmentFormatError(f"Invalid tenant assessment: {e}") from e


def to_action(raw: Mapping[str, Any]) -> RecommendedAction:
    """Build a RecommendedAction; an unknown priority becomes ``normal``.

    Raises:
        AssessmentFormatError: On missing tenant or action type.
    """
    priority = str(_pick(raw, "priority", "priority_level", default="normal")).lower()
    if priority not in _PRIORITIES:
        logger.warning("Unknown action priority %r, using 'normal'", priority)
        priority = "normal"
    try:
        return RecommendedAction(
            tenant_name=_pick(raw, "tenantName", "tenant_name"),
            unit_number=str(_pick(raw, "unitNumber", "unit_number", default="")),
            action_type=_pick(raw, "actionType", "action_type"),
            priority=priority,
            timeline=_pick(raw, "timeline", default="TBD"),
            description=_pick(raw, "description", default=""),
        )
    except ValidationError as e:
        raise AssessmentFormatError(f"Invalid recommended action: {e}") from e


def to_assessments(records: Iterable[Mapping[str, Any]]) -> list[TenantRiskAssessment]:
    return [_indexed(to_assessment, i, r) for i, r in enumerate(records)]


def to_actions(records: Iterable[Mapping[str, Any]]) -> list[RecommendedAction]:
    return [_indexed(to_action, i, r) for i, r in enumerate(records)]


def _indexed(fn: Any, index: int, record: Mapping[str, Any]) -> Any:
    try:
        return fn(record)
    except AssessmentFormatError as e:
        raise AssessmentFormatError(f"Record {index}: {e}") from e
