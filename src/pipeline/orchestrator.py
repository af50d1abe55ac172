# src/pipeline/orchestrator.py — v2
"""Analysis orchestrator: fingerprint, cache, infer, normalize, aggregate.

Per document:
  fingerprinting -> cache_lookup -> (hit) normalizing
                                 -> (miss) inferring -> cache_store -> normalizing
  -> aggregating -> done

A document ends in ``failed`` when inference fails or times out, or when the
detection leaves no usable header. Cache and metadata problems only add
warnings. process() reports everything through ProcessingOutcome.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from rentroll.api.models import DocumentInput, ProcessingOutcome, ProcessingStage
from rentroll.cache.fingerprint import compute_fingerprint
from rentroll.config.settings import Settings
from rentroll.detection.base_detector import InferenceError
from rentroll.logging.context import clear_context, set_document_context, set_stage_context
from rentroll.normalization.column_normalizer import ColumnNormalizer, UnparseableHeaderError
from rentroll.normalization.summary import summarize_units
from rentroll.risk.aggregator import summarize
from rentroll.storage.models import ProcessedFileRecord

if TYPE_CHECKING:
    from rentroll.cache.base_cache_store import BaseCacheStore
    from rentroll.core.models import (
        HeaderDetectionResult,
        PortfolioRiskSummary,
        RentRollSummary,
        TenantRiskAssessment,
    )
    from rentroll.detection.base_detector import BaseHeaderDetector
    from rentroll.normalization.column_normalizer import NormalizationResult
    from rentroll.storage.base_metadata_writer import BaseMetadataWriter

logger = logging.getLogger(__name__)

_Inference = tuple["HeaderDetectionResult", list[str]]


class AnalysisOrchestrator:
    """Run rent-roll sheets through the cached header-detection pipeline.

    Args:
        detector: External header-inference engine.
        cache_store: Inference cache. None = always infer.
        settings: Application settings. Loaded from .env if None.
        normalizer: Column normalizer. Built from settings if None.
        metadata_writer: Persistence collaborator. None = nothing recorded.
    """

    def __init__(
        self,
        detector: BaseHeaderDetector,
        cache_store: BaseCacheStore | None = None,
        settings: Settings | None = None,
        normalizer: ColumnNormalizer | None = None,
        metadata_writer: BaseMetadataWriter | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._detector = detector
        self._cache = cache_store
        self._normalizer = normalizer or ColumnNormalizer(
            min_confidence=self._settings.min_header_confidence
        )
        self._metadata_writer = metadata_writer
        # One shared inference per fingerprint while it is running.
        self._inflight: dict[str, asyncio.Task[_Inference]] = {}

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> AnalysisOrchestrator:
        """Wire detector, cache and metadata writer from configuration."""
        settings = settings or Settings()

        detector: BaseHeaderDetector
        if settings.header_detector == "llm":
            from rentroll.detection.llm_detector import LLMHeaderDetector
            from rentroll.llm.adapters.openai_adapter import OpenAIAdapter

            detector = LLMHeaderDetector(
                OpenAIAdapter(model=settings.llm_model, api_key=settings.openai_api_key),
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        else:
            from rentroll.detection.heuristic_detector import HeuristicHeaderDetector

            detector = HeuristicHeaderDetector()

        cache_store = None
        if settings.cache_enabled:
            from rentroll.cache.memory_store import InMemoryCacheStore

            cache_store = InMemoryCacheStore(ttl_seconds=settings.cache_ttl_seconds)

        metadata_writer = None
        if settings.metadata_enabled:
            from rentroll.storage.local_writer import LocalMetadataWriter

            metadata_writer = LocalMetadataWriter(settings.metadata_root)

        return cls(
            detector=detector,
            cache_store=cache_store,
            settings=settings,
            metadata_writer=metadata_writer,
        )

    @property
    def cache_store(self) -> BaseCacheStore | None:
        return self._cache

    async def process(
        self,
        document: DocumentInput,
        assessments: Sequence[TenantRiskAssessment] | None = None,
        timeout: float | None = None,
    ) -> ProcessingOutcome:
        """Process one sheet end-to-end.

        Args:
            document: Sheet rows plus file identity.
            assessments: Tenant assessments to aggregate. None = no summary.
            timeout: Seconds to wait for inference. Defaults to settings.

        Returns:
            ProcessingOutcome; ``success`` is False with ``error_message``
            on any fatal condition.
        """
        start = time.monotonic()
        document_id = document.document_id or _generate_document_id()
        if timeout is None:
            timeout = self._settings.inference_timeout_seconds

        warnings: list[str] = []
        stage: ProcessingStage = "fingerprinting"
        fingerprint: str | None = None
        cache_hit = False
        detection: HeaderDetectionResult | None = None

        def failed(message: str) -> ProcessingOutcome:
            logger.error("Processing failed during %s: %s", stage, message)
            return ProcessingOutcome(
                success=False,
                document_id=document_id,
                warnings=warnings,
                error_message=message,
                fingerprint=fingerprint,
                cache_hit=cache_hit,
                stage="failed",
                header_detection=detection,
                processing_time_ms=_elapsed_ms(start),
            )

        set_document_context(document_id)
        try:
            set_stage_context(stage)
            fingerprint = compute_fingerprint(
                document.name,
                document.size_bytes,
                document.rows,
                sample_size=self._settings.fingerprint_sample_rows,
            )
            set_document_context(document_id, fingerprint)
            logger.info("Processing %s (%d rows)", document.name, len(document.rows))

            stage = "cache_lookup"
            set_stage_context(stage)
            detection = await self._cache_get(fingerprint, warnings)
            cache_hit = detection is not None

            if detection is None:
                stage = "inferring"
                set_stage_context(stage)
                detection, store_warnings = await self._infer(
                    fingerprint, document.rows, timeout
                )
                warnings.extend(store_warnings)

            stage = "normalizing"
            set_stage_context(stage)
            normalized = self._normalizer.resolve(detection, document.rows)
            warnings.extend(str(w) for w in normalized.warnings)

            summary = None
            if assessments is not None:
                stage = "aggregating"
                set_stage_context(stage)
                summary = summarize(assessments)

            rent_roll_summary = summarize_units(normalized.rows)
            await self._save_metadata(
                document_id, document, fingerprint, cache_hit, detection,
                normalized, rent_roll_summary, summary, warnings,
            )

            stage = "done"
            set_stage_context(stage)
            logger.info(
                "Processed %d rows (cache %s, %d warnings)",
                len(normalized.rows), "hit" if cache_hit else "miss", len(warnings),
            )
            return ProcessingOutcome(
                success=True,
                document_id=document_id,
                canonical_rows=normalized.rows,
                warnings=warnings,
                summary=summary,
                fingerprint=fingerprint,
                cache_hit=cache_hit,
                stage=stage,
                header_detection=detection,
                rent_roll_summary=rent_roll_summary,
                processing_time_ms=_elapsed_ms(start),
            )
        except asyncio.TimeoutError:
            return failed(f"Header inference timed out after {timeout}s")
        except InferenceError as e:
            return failed(f"Header inference failed: {e}")
        except UnparseableHeaderError as e:
            return failed(f"Unparseable header: {e}")
        except Exception as e:
            logger.exception("Unexpected error during %s", stage)
            return failed(f"Unexpected error during {stage}: {e}")
        finally:
            clear_context()

    async def process_many(
        self,
        documents: Sequence[DocumentInput],
        timeout: float | None = None,
    ) -> list[ProcessingOutcome]:
        """Process independent sheets concurrently, outcomes in input order."""
        return list(
            await asyncio.gather(*(self.process(d, timeout=timeout) for d in documents))
        )

    # --- Cache ---

    async def _cache_get(self, key: str, warnings: list[str]) -> HeaderDetectionResult | None:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(key)
        except Exception as e:
            logger.warning("Cache lookup failed, falling back to inference: %s", e)
            warnings.append(f"Cache unavailable: {e}")
            return None

    async def _cache_set(self, key: str, detection: HeaderDetectionResult) -> list[str]:
        if self._cache is None:
            return []
        try:
            await self._cache.set(key, detection)
        except Exception as e:
            logger.warning("Cache store failed: %s", e)
            return [f"Cache unavailable: {e}"]
        return []

    # --- Inference ---

    async def _infer(
        self, key: str, rows: list[list[Any]], timeout: float | None
    ) -> _Inference:
        """Wait for the shared inference of ``key``, starting it if needed.

        The wait is shielded: a caller timing out abandons only its own wait,
        and the inference may still complete and store a whole entry.
        """
        task = self._inflight.get(key)
        if task is None:
            sample = rows[: self._settings.inference_sample_rows]
            task = asyncio.ensure_future(self._infer_and_store(key, sample))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._release(key, t))
        else:
            logger.info("Joining in-flight inference for %s", key)

        if timeout is None:
            return await asyncio.shield(task)
        return await asyncio.wait_for(asyncio.shield(task), timeout)

    async def _infer_and_store(self, key: str, sample: list[list[Any]]) -> _Inference:
        started = time.monotonic()
        try:
            detection = await self._detector.detect(sample)
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"{type(e).__name__}: {e}") from e
        logger.info(
            "Inference by %s took %d ms", self._detector.engine_name, _elapsed_ms(started)
        )
        set_stage_context("cache_store")
        return detection, await self._cache_set(key, detection)

    def _release(self, key: str, task: asyncio.Task[_Inference]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Inference for %s ended with %r", key, task.exception())

    # --- Persistence ---

    async def _save_metadata(
        self,
        document_id: str,
        document: DocumentInput,
        fingerprint: str,
        cache_hit: bool,
        detection: HeaderDetectionResult,
        normalized: NormalizationResult,
        rent_roll_summary: RentRollSummary,
        risk_summary: PortfolioRiskSummary | None,
        warnings: list[str],
    ) -> None:
        if self._metadata_writer is None:
            return
        record = ProcessedFileRecord(
            document_id=document_id,
            file_name=document.name,
            size_bytes=document.size_bytes,
            fingerprint=fingerprint,
            detector=self._detector.engine_name,
            cache_hit=cache_hit,
            header_row_index=detection.header_row_index,
            data_start_row_index=detection.data_start_row_index,
            column_mapping=dict(detection.column_mapping),
            row_count=len(normalized.rows),
            warning_count=len(warnings),
            rent_roll_summary=rent_roll_summary,
            risk_summary=risk_summary,
        )
        try:
            saved = await self._metadata_writer.save(document_id, record)
        except Exception as e:
            logger.warning("Metadata writer raised: %s", e)
            saved = False
        if not saved:
            warnings.append(f"Processed-file metadata not saved for {document_id}")


def _generate_document_id() -> str:
    return f"doc_{uuid.uuid4().hex[:12]}"


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
