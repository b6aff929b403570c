"""Shared test fixtures for the document ingestion test suite."""

import json
from pathlib import Path

import pytest

from docingest.exceptions import OcrError
from docingest.ocr.base import OcrClient
from docingest.utils.config import AppConfig, DocumentAIConfig, StorageConfig

SAMPLE_TEXT = (
    "Nome: Maria Silva\n"
    "REPUBLICA FEDERATIVA DO BRASIL\n"
    "RG: 12.345.678-9\n"
    "FILIACAO\n"
    "Joao Silva\n"
    "Ana Souza\n"
    "DATA DE NASCIMENTO\n"
    "01/02/1990"
)

SAMPLE_MODEL = {
    "fields": [
        {"name": "nome", "index": 0, "split": False},
        {"name": "primeiro_nome", "index": 0, "split": True, "part": 1},
        {"name": "registro_geral", "index": 2, "split": True, "part": 1},
        {"name": "filiacao", "index": [4, 5], "split": False},
        {"name": "data_nascimento", "index": 7, "split": False},
    ]
}


class FakeOcrClient(OcrClient):
    """OCR client that returns canned text and records its calls."""

    def __init__(self, text: str = SAMPLE_TEXT, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[bytes, str]] = []
        self.closed = False

    async def process(self, content: bytes, mime_type: str) -> str:
        self.calls.append((content, mime_type))
        if self.error is not None:
            raise self.error
        return self.text

    async def aclose(self) -> None:
        self.closed = True


class FakeUpload:
    """Minimal stand-in for a multipart upload."""

    def __init__(
        self,
        content: bytes,
        filename: str | None = "doc.png",
        content_type: str | None = "image/png",
    ) -> None:
        self.filename = filename
        self.content_type = content_type
        self._content = content
        self._offset = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._content) - self._offset
        chunk = self._content[self._offset : self._offset + size]
        self._offset += len(chunk)
        return chunk


class EchoOcrClient(OcrClient):
    """OCR client whose "text" is the uploaded content itself."""

    async def process(self, content: bytes, mime_type: str) -> str:
        return content.decode("utf-8")


@pytest.fixture
def credentials_file(tmp_path: Path) -> Path:
    """Write a placeholder service-account key file."""
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps({"type": "service_account"}))
    return path


@pytest.fixture
def ocr_config(credentials_file: Path) -> DocumentAIConfig:
    return DocumentAIConfig(
        project_id="demo-project",
        location="us",
        processor_id="proc123",
        credentials_path=credentials_file,
    )


@pytest.fixture
def models_dir(tmp_path: Path) -> Path:
    """Create a model store holding the ``rg`` sample model."""
    path = tmp_path / "models"
    path.mkdir()
    (path / "rg.json").write_text(json.dumps(SAMPLE_MODEL))
    return path


@pytest.fixture
def app_config(tmp_path: Path, ocr_config: DocumentAIConfig, models_dir: Path) -> AppConfig:
    """Application config with every storage directory under ``tmp_path``."""
    return AppConfig(
        ocr=ocr_config,
        storage=StorageConfig(
            upload_dir=tmp_path / "uploads",
            artifact_dir=tmp_path / "ocr-json",
            models_dir=models_dir,
            static_dir=tmp_path / "public",
            max_upload_bytes=1024,
        ),
    )


@pytest.fixture
def fake_ocr() -> FakeOcrClient:
    return FakeOcrClient()


@pytest.fixture
def failing_ocr() -> FakeOcrClient:
    return FakeOcrClient(error=OcrError("OCR processing failed"))
