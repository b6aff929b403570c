"""OCR client interface and backend selection."""

from abc import ABC, abstractmethod

from docingest.utils.config import DocumentAIConfig


class OcrClient(ABC):
    """Extracts the full text of one document."""

    @abstractmethod
    async def process(self, content: bytes, mime_type: str) -> str:
        """Return the text of a document.

        Args:
            content: Raw file bytes.
            mime_type: MIME type of ``content``.

        Raises:
            OcrError: If authentication, the remote call, or text extraction
                fails. No retry is attempted.
        """

    async def aclose(self) -> None:
        """Release network resources held by the client."""


def build_ocr_client(config: DocumentAIConfig) -> OcrClient:
    """Create the OCR client selected by ``config.backend``."""
    if config.backend == "sdk":
        from .sdk_client import DocumentAISdkClient

        return DocumentAISdkClient(config)

    from .rest_client import DocumentAIRestClient

    return DocumentAIRestClient(config)
