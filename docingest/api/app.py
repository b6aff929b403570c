"""FastAPI application for the document ingestion service.

Provides the upload endpoint that runs OCR and field mapping, a sink for
client-side log messages, the landing page, and health/model listings.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from docingest import __version__
from docingest.exceptions import IngestionError
from docingest.mapping.model_store import ModelStore
from docingest.ocr.base import OcrClient, build_ocr_client
from docingest.storage.artifacts import ArtifactStore
from docingest.storage.uploads import UploadStore
from docingest.utils.config import AppConfig
from docingest.utils.logger import get_logger
from docingest.workflow.upload import IngestionServices, UploadWorkflow

from .schemas import (
    ErrorResponse,
    HealthResponse,
    LogResponse,
    ModelsResponse,
    UploadResponse,
)

logger = get_logger(__name__)
client_logger = get_logger("docingest.client")


def build_services(config: AppConfig, ocr_client: OcrClient | None = None) -> IngestionServices:
    """Create the shared collaborators of the upload workflow.

    Args:
        config: Validated application configuration.
        ocr_client: OCR client to use. Built from ``config.ocr`` when omitted.

    Returns:
        Services shared by every request.
    """
    storage = config.storage
    return IngestionServices(
        ocr_client=ocr_client or build_ocr_client(config.ocr),
        models=ModelStore(storage.models_dir),
        uploads=UploadStore(storage.upload_dir, storage.max_upload_bytes),
        artifacts=ArtifactStore(storage.artifact_dir),
    )


def create_app(config: AppConfig, ocr_client: OcrClient | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Validated application configuration.
        ocr_client: Optional OCR client, mainly for tests.

    Returns:
        Configured application.
    """
    services = build_services(config, ocr_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await services.ocr_client.aclose()

    app = FastAPI(
        title="Document Ingestion API",
        description="Extract text from documents and map it to structured records",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        """Serve the static landing page."""
        page = config.storage.static_dir / "index.html"
        if not page.is_file():
            raise HTTPException(status_code=404, detail="Landing page not found")
        return FileResponse(page)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Return service health status."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/models", response_model=ModelsResponse)
    async def list_models(request: Request) -> ModelsResponse:
        """List the document types that have a mapping model."""
        models: ModelStore = request.app.state.services.models
        return ModelsResponse(document_types=models.list_document_types())

    @app.post("/log", response_model=LogResponse)
    async def receive_log(request: Request) -> LogResponse:
        """Forward a client-side log message to the server log.

        The body is parsed leniently: a missing or malformed body is logged
        as having no message and still acknowledged.
        """
        try:
            payload = await request.json()
        except ValueError:
            payload = {}
        message = payload.get("message") if isinstance(payload, dict) else None
        client_logger.info("Client log: %s", message or "No log message provided")
        return LogResponse()

    @app.post(
        "/upload",
        response_model=UploadResponse,
        responses={500: {"model": ErrorResponse}},
    )
    async def upload_document(
        request: Request,
        file: Annotated[UploadFile | None, File()] = None,
        document_type: Annotated[str | None, Form(alias="documentType")] = None,
    ) -> UploadResponse | JSONResponse:
        """Run OCR on an uploaded document and map it to structured data.

        Args:
            file: Uploaded document (image or PDF).
            document_type: Identifier of the field mapping model to apply.

        Returns:
            The OCR text, the structured record and the artifact file name,
            or a 500 response carrying an error message.
        """
        workflow = UploadWorkflow(request.app.state.services)
        try:
            result = await workflow.run(file, document_type)
        except IngestionError as exc:
            logger.error("Upload failed: %s", exc)
            return JSONResponse(status_code=500, content={"error": str(exc)})
        except Exception:
            logger.exception("Unexpected error while processing upload")
            return JSONResponse(
                status_code=500,
                content={"error": "Unexpected error while processing the document"},
            )

        return UploadResponse(
            originalText=result.original_text,
            structuredData=result.structured_data,
            jsonFile=result.json_file,
        )

    return app
