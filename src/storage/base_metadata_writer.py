# src/storage/base_metadata_writer.py — v1
"""Abstract processed-file metadata writer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentroll.storage.models import ProcessedFileRecord


class BaseMetadataWriter(ABC):
    """Durably records one metadata record per processed document."""

    @abstractmethod
    async def save(self, document_id: str, record: ProcessedFileRecord) -> bool:
        """Persist ``record``; return False when it could not be stored."""
