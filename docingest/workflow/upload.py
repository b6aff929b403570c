"""Per-request orchestration of an upload.

An :class:`UploadWorkflow` takes one upload from receipt to a persisted
structured record::

    RECEIVED -> MODEL_LOADED -> EXTRACTED -> MAPPED -> PERSISTED -> RESPONDED

Any failure moves it to ``FAILED``. Once the upload has been staged on
disk, the staged file is deleted on every exit path, exactly once.
"""

from dataclasses import dataclass
from enum import StrEnum

from docingest.exceptions import ValidationError
from docingest.mapping.field_mapper import map_fields
from docingest.mapping.model_store import ModelStore, validate_document_type
from docingest.mapping.models import StructuredRecord
from docingest.ocr.base import OcrClient
from docingest.storage.artifacts import ArtifactStore
from docingest.storage.uploads import UploadSource, UploadStore
from docingest.utils.logger import get_logger

logger = get_logger(__name__)


class WorkflowState(StrEnum):
    """Lifecycle states of one upload."""

    RECEIVED = "received"
    MODEL_LOADED = "model_loaded"
    EXTRACTED = "extracted"
    MAPPED = "mapped"
    PERSISTED = "persisted"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionServices:
    """Shared, request-independent collaborators of the workflow."""

    ocr_client: OcrClient
    models: ModelStore
    uploads: UploadStore
    artifacts: ArtifactStore


@dataclass
class UploadResult:
    """Outcome of a successful upload."""

    original_text: str
    structured_data: StructuredRecord
    json_file: str


class UploadWorkflow:
    """Processes a single upload. Create one instance per request.

    Args:
        services: Shared collaborators (OCR client and stores).
    """

    def __init__(self, services: IngestionServices) -> None:
        self.services = services
        self.state = WorkflowState.RECEIVED

    def _advance(self, state: WorkflowState) -> None:
        logger.debug("Upload workflow %s -> %s", self.state, state)
        self.state = state

    @staticmethod
    def _validate(source: UploadSource | None, document_type: str | None) -> str:
        if source is None or not document_type:
            raise ValidationError("File or document type was not sent")
        return validate_document_type(document_type)

    async def run(
        self,
        source: UploadSource | None,
        document_type: str | None,
    ) -> UploadResult:
        """Run the workflow to completion.

        Args:
            source: The uploaded file, if any.
            document_type: Identifier of the field mapping model.

        Returns:
            The OCR text, the mapped record and the artifact file name.

        Raises:
            IngestionError: For any failure. ``state`` is ``FAILED`` afterwards.
        """
        try:
            document_type = self._validate(source, document_type)
            logger.info("Processing document of type %s", document_type)
            document = await self.services.uploads.receive(source)
        except BaseException:
            self._advance(WorkflowState.FAILED)
            raise

        try:
            model = await self.services.models.load(document_type)
            self._advance(WorkflowState.MODEL_LOADED)

            content = await self.services.uploads.read(document)
            text = await self.services.ocr_client.process(content, document.mime_type)
            self._advance(WorkflowState.EXTRACTED)

            record = map_fields(text, model)
            self._advance(WorkflowState.MAPPED)

            json_file = await self.services.artifacts.save(record)
            self._advance(WorkflowState.PERSISTED)
        except BaseException:
            self._advance(WorkflowState.FAILED)
            raise
        finally:
            # discard() only logs a failed deletion; the result never depends on it.
            await self.services.uploads.discard(document.path)

        self._advance(WorkflowState.RESPONDED)
        return UploadResult(
            original_text=text,
            structured_data=record,
            json_file=json_file,
        )
