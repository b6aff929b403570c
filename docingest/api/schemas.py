"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel

from docingest.mapping.models import StructuredRecord


class UploadResponse(BaseModel):
    """Response schema for a processed upload."""

    originalText: str
    structuredData: StructuredRecord
    jsonFile: str


class ErrorResponse(BaseModel):
    """Response schema for any failed upload."""

    error: str


class LogResponse(BaseModel):
    status: str = "Log received"


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ModelsResponse(BaseModel):
    """Document types that have a field mapping model."""

    document_types: list[str]
