# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a sample rent roll sheet, a matching header detection, risk
assessments and a mock LLM client. No external dependencies: all I/O is
mocked or kept under tmp_path.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from rentroll.core.models import (
    HeaderDetectionResult,
    RecommendedAction,
    TenantRiskAssessment,
)
from rentroll.llm.models import LLMResponse


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_rows() -> list[list[Any]]:
    """Rent roll with a title line, a blank line, a header and a total row."""
    return [
        ["Sunset Apartments Rent Roll"],
        [],
        ["Unit", "Floor Plan", "Sq Ft", "Current Rent", "Lease Start",
         "Lease End", "Status", "Market Rent", "Tenant Name"],
        ["101", "1BR", 650, "$1,200.00", "2024-01-01",
         "2024-12-31", "Occupied", 1250, "Alice Smith"],
        [102, "2BR", "900", "1500", datetime(2024, 3, 1),
         "02/28/2025", "", "1,550", "Bob Jones"],
        ["103", "1BR", 650, None, None, None, "Vacant", 1250, None],
        ["Total", None, 2200, 2700, None, None, None, None, None],
    ]


@pytest.fixture
def sample_detection() -> HeaderDetectionResult:
    """Detection matching sample_rows."""
    return HeaderDetectionResult(
        header_row_index=2,
        data_start_row_index=3,
        headers={
            "A": "Unit", "B": "Floor Plan", "C": "Sq Ft", "D": "Current Rent",
            "E": "Lease Start", "F": "Lease End", "G": "Status",
            "H": "Market Rent", "I": "Tenant Name",
        },
        column_mapping={
            "unit_number": "A",
            "floor_plan": "B",
            "square_footage": "C",
            "current_rent": "D",
            "lease_start": "E",
            "lease_end": "F",
            "occupancy_status": "G",
            "market_rent": "H",
            "tenant_name": "I",
        },
        confidence_score=0.95,
    )


@pytest.fixture
def sample_assessments() -> list[TenantRiskAssessment]:
    """One assessment per risk bucket."""
    return [
        TenantRiskAssessment(
            tenant_name="Alice Smith", unit_number="101",
            default_probability=72.0, risk_severity="high",
            risk_factors=frozenset({"late payments"}), confidence=0.8,
        ),
        TenantRiskAssessment(
            tenant_name="Bob Jones", unit_number="102",
            default_probability=35.0, risk_severity="medium", confidence=0.6,
        ),
        TenantRiskAssessment(
            tenant_name="Carol White", unit_number="104",
            default_probability=10.0, confidence=0.9,
        ),
    ]


@pytest.fixture
def sample_actions() -> list[RecommendedAction]:
    return [
        RecommendedAction(
            tenant_name="Carol White", unit_number="104",
            action_type="renewal_offer", priority="low",
        ),
        RecommendedAction(
            tenant_name="Alice Smith", unit_number="101",
            action_type="payment_plan", priority="immediate", timeline="7 days",
        ),
        RecommendedAction(
            tenant_name="Bob Jones", unit_number="102",
            action_type="check_in", priority="normal",
        ),
    ]


# === FIXTURES: Mocks ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Structured header answer for sample_rows."""
    return LLMResponse(
        content=(
            '{"header_row": 2, "data_start_row": 3, "confidence": 0.9, '
            '"column_mapping": {"unit_number": "A", "current_rent": "D", '
            '"tenant_name": "I", "occupancy_status": "G"}}'
        ),
        input_tokens=300,
        output_tokens=60,
        model="gpt-4o-mini",
        provider="openai",
        latency_ms=120,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient returning mock_llm_response."""
    client = AsyncMock()
    client.complete.return_value = mock_llm_response
    client.provider_name = "openai"
    return client
