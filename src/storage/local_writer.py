# src/storage/local_writer.py — v3
"""Local filesystem metadata writer: one JSON file per document."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from rentroll.storage.base_metadata_writer import BaseMetadataWriter
from rentroll.storage.models import ProcessedFileRecord

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalMetadataWriter(BaseMetadataWriter):
    """Write records under ``base_path/<document_id>.json``."""

    def __init__(self, base_path: str | Path) -> None:
        self._base = Path(base_path).expanduser()

    def path_for(self, document_id: str) -> Path:
        return self._base / f"{_UNSAFE_NAME_CHARS.sub('_', document_id)}.json"

    async def save(self, document_id: str, record: ProcessedFileRecord) -> bool:
        path = self.path_for(document_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to write metadata %s: %s", path, e)
            return False
        return True
