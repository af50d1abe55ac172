# src/detection/llm_detector.py — v1
"""LLM-backed header detector.

Sends a lettered preview of the leading rows to any BaseLLMClient and
parses a structured answer into a HeaderDetectionResult.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from rentroll.core.columns import column_index_to_letter
from rentroll.core.models import CANONICAL_FIELDS, HeaderDetectionResult
from rentroll.detection.base_detector import BaseHeaderDetector, InferenceError
from rentroll.llm.base_client import BaseLLMClient
from rentroll.llm.models import Message

logger = logging.getLogger(__name__)

PREVIEW_COLUMNS = 26
MAX_CELL_CHARS = 40

SYSTEM_PROMPT = (
    "You analyze rent roll spreadsheets. Given the first rows of a sheet, "
    "each prefixed with its 0-based row index and each cell prefixed with its "
    "column letter, find the header row and the first data row, and map the "
    "columns to these fields: " + ", ".join(CANONICAL_FIELDS) + ". "
    "Use column letters. Leave a field null when no column holds it. "
    "Report your confidence between 0 and 1."
)


class ColumnMappingAnswer(BaseModel):
    """Column letter per canonical field, null when absent."""

    unit_number: str | None = None
    floor_plan: str | None = None
    square_footage: str | None = None
    current_rent: str | None = None
    lease_start: str | None = None
    lease_end: str | None = None
    occupancy_status: str | None = None
    market_rent: str | None = None
    tenant_name: str | None = None


class HeaderAnalysisAnswer(BaseModel):
    """Structured answer requested from the model."""

    header_row: int
    data_start_row: int
    column_mapping: ColumnMappingAnswer
    confidence: float = Field(ge=0.0, le=1.0)


class LLMHeaderDetector(BaseHeaderDetector):
    """Ask an LLM where the header is and what each column holds."""

    def __init__(
        self,
        client: BaseLLMClient,
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ) -> None:
        self._client = client
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def engine_name(self) -> str:
        return f"llm:{self._client.provider_name}"

    async def detect(self, sample_rows: Sequence[Sequence[Any]]) -> HeaderDetectionResult:
        rows = [list(r or ()) for r in sample_rows]
        if not rows:
            raise InferenceError("Cannot detect headers of an empty sheet")

        try:
            response = await self._client.complete(
                messages=[Message(role="user", content=render_preview(rows))],
                system=SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                response_format=HeaderAnalysisAnswer,
            )
        except Exception as e:
            raise InferenceError(f"LLM call failed: {e}") from e

        try:
            answer = HeaderAnalysisAnswer.model_validate_json(response.content)
        except ValidationError as e:
            raise InferenceError(f"Unparseable LLM answer: {e.error_count()} errors") from e

        logger.info(
            "LLM header analysis: row %d, confidence %.2f (%d ms)",
            answer.header_row, answer.confidence, response.latency_ms,
        )
        return _to_detection(answer, rows)


def render_preview(rows: list[list[Any]]) -> str:
    """Render rows as ``<index>: A=<cell> | B=<cell>`` lines, skipping empty cells."""
    lines = []
    for i, row in enumerate(rows):
        cells = []
        for col, cell in enumerate(row[:PREVIEW_COLUMNS]):
            text = "" if cell is None else str(cell).strip()
            if text:
                cells.append(f"{column_index_to_letter(col)}={text[:MAX_CELL_CHARS]}")
        lines.append(f"{i}: " + " | ".join(cells))
    return "\n".join(lines)


def _to_detection(answer: HeaderAnalysisAnswer, rows: list[list[Any]]) -> HeaderDetectionResult:
    mapping = {
        field: ref
        for field, ref in answer.column_mapping.model_dump().items()
        if ref
    }
    headers: dict[str, str] = {}
    if 0 <= answer.header_row < len(rows):
        for col, cell in enumerate(rows[answer.header_row]):
            text = "" if cell is None else str(cell).strip()
            if text:
                headers[column_index_to_letter(col)] = text

    try:
        return HeaderDetectionResult(
            header_row_index=answer.header_row,
            data_start_row_index=answer.data_start_row,
            headers=headers,
            column_mapping=mapping,
            confidence_score=answer.confidence,
        )
    except ValidationError as e:
        raise InferenceError(f"LLM returned an invalid column mapping: {e}") from e
