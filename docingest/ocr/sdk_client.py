"""Document AI OCR through the ``google-cloud-documentai`` client library.

Install with the ``sdk`` extra. Behaves like the REST client: one attempt,
explicit timeout, and an :class:`OcrError` when no text comes back.
"""

from typing import Any

from docingest.exceptions import OcrError
from docingest.utils.config import DocumentAIConfig
from docingest.utils.logger import get_logger

from .base import OcrClient

logger = get_logger(__name__)


class DocumentAISdkClient(OcrClient):
    """Document AI client using the official async gRPC client."""

    def __init__(self, config: DocumentAIConfig) -> None:
        try:
            from google.api_core import exceptions as api_exceptions
            from google.cloud import documentai
        except ImportError as exc:
            raise OcrError(
                "google-cloud-documentai is not installed; install the 'sdk' extra"
            ) from exc

        self.config = config
        self._documentai = documentai
        self._api_errors = (api_exceptions.GoogleAPIError,)
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                self._client = self._documentai.DocumentProcessorServiceAsyncClient.from_service_account_file(
                    str(self.config.credentials_path),
                    client_options={"api_endpoint": self.config.api_endpoint},
                )
            except (OSError, ValueError) as exc:
                logger.error("Could not load Document AI credentials: %s", exc)
                raise OcrError("Could not authenticate with the OCR service") from exc
        return self._client

    def build_request(self, content: bytes, mime_type: str) -> Any:
        documentai = self._documentai
        options: dict[str, Any] = {}
        if self.config.language_hints:
            options["ocr_config"] = documentai.OcrConfig(
                hints=documentai.OcrConfig.Hints(
                    language_hints=list(self.config.language_hints)
                )
            )
        if self.config.pages:
            options["individual_page_selector"] = (
                documentai.ProcessOptions.IndividualPageSelector(
                    pages=list(self.config.pages)
                )
            )

        request: dict[str, Any] = {
            "name": self.config.processor_name,
            "raw_document": documentai.RawDocument(content=content, mime_type=mime_type),
        }
        if options:
            request["process_options"] = documentai.ProcessOptions(**options)
        return documentai.ProcessRequest(**request)

    async def process(self, content: bytes, mime_type: str) -> str:
        client = self._get_client()
        request = self.build_request(content, mime_type)

        logger.info("Processing document with Document AI (%s)", mime_type)
        try:
            result = await client.process_document(
                request=request, retry=None, timeout=self.config.timeout_seconds
            )
        except self._api_errors as exc:
            logger.error("Document AI request failed: %s", exc)
            raise OcrError("OCR processing failed") from exc

        document = result.document
        if not document or not document.text:
            logger.warning("Document processed but no text was extracted")
            raise OcrError("Document processed without extracted text")

        logger.info("Extracted %d characters of text", len(document.text))
        return document.text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.transport.close()
