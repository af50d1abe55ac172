# src/detection/base_detector.py — v1
"""Abstract header-inference engine interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from rentroll.core.models import HeaderDetectionResult


class InferenceError(Exception):
    """The header-inference engine could not produce a result."""


class BaseHeaderDetector(ABC):
    """Locates the header row of a sheet and maps its columns to canonical fields."""

    @abstractmethod
    async def detect(self, sample_rows: Sequence[Sequence[Any]]) -> HeaderDetectionResult:
        """Infer header position and column mapping from the leading rows.

        Raises:
            InferenceError: If the engine fails or returns an unusable answer.
        """

    @property
    @abstractmethod
    def engine_name(self) -> str:
        """Identifier used in logs and processed-file metadata."""
