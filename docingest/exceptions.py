"""Exception hierarchy for the document ingestion pipeline."""


class IngestionError(Exception):
    """Base exception for failures while processing an upload."""


class ValidationError(IngestionError):
    """Raised when the uploaded file or document type is missing or invalid."""


class ModelError(IngestionError):
    """Raised when a field mapping model is missing or cannot be parsed."""


class OcrError(IngestionError):
    """Raised when the OCR service cannot produce text for a document."""


class MappingError(IngestionError):
    """Raised when extracted text cannot be mapped onto a model."""


class FieldMappingError(MappingError):
    """Raised when a single field descriptor does not fit the extracted text.

    Args:
        field: Name of the offending field descriptor.
        reason: Human-readable description of the mismatch.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Field '{field}': {reason}")


class ArtifactError(IngestionError):
    """Raised when a structured record cannot be persisted."""


class ConfigError(Exception):
    """Raised when the application configuration is missing or invalid."""


class PortUnavailableError(Exception):
    """Raised when no free TCP port is found within the attempt budget."""
