"""Loads field mapping models from a directory of JSON files."""

import asyncio
import json
import re
from pathlib import Path

import pydantic

from docingest.exceptions import ModelError, ValidationError
from docingest.utils.logger import get_logger

from .models import FieldMappingModel

logger = get_logger(__name__)

_DOCUMENT_TYPE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def validate_document_type(document_type: str) -> str:
    """Reject document type identifiers that are not plain file stems."""
    if not _DOCUMENT_TYPE_PATTERN.fullmatch(document_type):
        raise ValidationError(f"Invalid document type: {document_type!r}")
    return document_type


class ModelStore:
    """Read-only store of ``<document_type>.json`` mapping models.

    Models are read from disk on every load, so edits take effect without
    a restart.

    Args:
        models_dir: Directory holding one JSON file per document type.
    """

    def __init__(self, models_dir: Path) -> None:
        self.models_dir = models_dir

    def path_for(self, document_type: str) -> Path:
        return self.models_dir / f"{validate_document_type(document_type)}.json"

    def load_sync(self, document_type: str) -> FieldMappingModel:
        """Load and validate the model for a document type.

        Args:
            document_type: Identifier of the document type.

        Returns:
            The parsed mapping model.

        Raises:
            ValidationError: If the identifier is not a safe file stem.
            ModelError: If the file is missing, not JSON, or malformed.
        """
        path = self.path_for(document_type)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ModelError(f"No model found for document type '{document_type}'") from exc
        except OSError as exc:
            logger.error("Could not read model %s: %s", path, exc)
            raise ModelError(f"Could not read model for '{document_type}'") from exc

        try:
            model = FieldMappingModel.model_validate(json.loads(raw))
        except (json.JSONDecodeError, pydantic.ValidationError) as exc:
            logger.error("Invalid model %s: %s", path, exc)
            raise ModelError(f"Invalid model for document type '{document_type}'") from exc

        logger.debug("Loaded model %s with %d fields", path, len(model.fields))
        return model

    async def load(self, document_type: str) -> FieldMappingModel:
        return await asyncio.to_thread(self.load_sync, document_type)

    def list_document_types(self) -> list[str]:
        """Return the sorted document types that have a model file."""
        if not self.models_dir.is_dir():
            return []
        return sorted(p.stem for p in self.models_dir.glob("*.json"))
