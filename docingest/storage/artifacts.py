"""Persists structured records as JSON artifacts."""

import asyncio
import json
import uuid
from pathlib import Path

from docingest.exceptions import ArtifactError
from docingest.mapping.models import StructuredRecord
from docingest.utils.logger import get_logger

logger = get_logger(__name__)


class ArtifactStore:
    """Writes one ``<uuid4>.json`` file per processed upload.

    Args:
        artifact_dir: Directory for the JSON files. Created on demand.
    """

    def __init__(self, artifact_dir: Path) -> None:
        self.artifact_dir = artifact_dir

    def save_sync(self, record: StructuredRecord) -> str:
        """Write a record and return the artifact file name."""
        name = f"{uuid.uuid4()}.json"
        path = self.artifact_dir / name
        try:
            self.artifact_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(record.model_dump(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Failed to write artifact %s: %s", path, exc)
            raise ArtifactError("Failed to save the structured data") from exc

        logger.info("Saved structured data to %s", path)
        return name

    async def save(self, record: StructuredRecord) -> str:
        return await asyncio.to_thread(self.save_sync, record)
