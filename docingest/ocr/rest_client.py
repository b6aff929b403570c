"""Document AI OCR over the public REST API.

Each call authenticates with the service-account key file, posts the
base64-encoded document to the processor's ``:process`` endpoint and
returns the ``document.text`` field of the response.
"""

import asyncio
import base64
from typing import Any

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from docingest.exceptions import OcrError
from docingest.utils.config import DocumentAIConfig
from docingest.utils.logger import get_logger

from .base import OcrClient

logger = get_logger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class DocumentAIRestClient(OcrClient):
    """Document AI client built on ``httpx`` and ``google-auth``.

    Args:
        config: Processor location and credentials.
        http_client: Client used for the API call. One is created (and
            owned) when omitted.
    """

    def __init__(
        self,
        config: DocumentAIConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def endpoint(self) -> str:
        return f"https://{self.config.api_endpoint}/v1/{self.config.processor_name}:process"

    def build_request(self, content: bytes, mime_type: str) -> dict[str, Any]:
        """Build the JSON body of a ``:process`` call."""
        body: dict[str, Any] = {
            "rawDocument": {
                "content": base64.b64encode(content).decode("ascii"),
                "mimeType": mime_type,
            }
        }
        options: dict[str, Any] = {}
        if self.config.language_hints:
            options["ocrConfig"] = {
                "hints": {"languageHints": list(self.config.language_hints)}
            }
        if self.config.pages:
            options["individualPageSelector"] = {"pages": list(self.config.pages)}
        if options:
            body["processOptions"] = options
        return body

    def _fetch_access_token(self) -> str:
        credentials = service_account.Credentials.from_service_account_file(
            str(self.config.credentials_path),
            scopes=[CLOUD_PLATFORM_SCOPE],
        )
        credentials.refresh(Request())
        return credentials.token

    async def get_access_token(self) -> str:
        """Obtain a fresh bearer token from the service-account key file.

        Raises:
            OcrError: If the key file is unreadable or the token exchange fails.
        """
        logger.debug("Requesting access token for %s", self.config.credentials_path)
        try:
            token = await asyncio.to_thread(self._fetch_access_token)
        except (GoogleAuthError, OSError, ValueError) as exc:
            logger.error("Could not obtain an access token: %s", exc)
            raise OcrError("Could not authenticate with the OCR service") from exc
        if not token:
            raise OcrError("Could not authenticate with the OCR service")
        return token

    async def process(self, content: bytes, mime_type: str) -> str:
        token = await self.get_access_token()
        body = self.build_request(content, mime_type)

        logger.info(
            "Sending %d bytes (%s) to Document AI processor %s",
            len(content),
            mime_type,
            self.config.processor_id,
        )
        try:
            response = await self._http.post(
                self.endpoint,
                json=body,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.config.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.error("Document AI request failed: %r", exc)
            raise OcrError("OCR processing failed") from exc

        if response.is_error:
            logger.error(
                "Document AI returned HTTP %d: %s",
                response.status_code,
                response.text,
            )
            raise OcrError("OCR processing failed")

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Document AI returned a non-JSON body: %s", response.text)
            raise OcrError("OCR processing failed") from exc

        document = payload.get("document") if isinstance(payload, dict) else None
        text = document.get("text") if isinstance(document, dict) else None
        if not text:
            logger.warning("Document processed but no text was extracted")
            raise OcrError("Document processed without extracted text")

        logger.info("Extracted %d characters of text", len(text))
        return text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()
