"""Staging of uploaded files on local disk.

Uploads are written under a fresh uuid4 name so that concurrent requests
never share a temp file. Deletion is best-effort: failures are logged and
never raised to the caller.
"""

import asyncio
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from docingest.exceptions import ValidationError
from docingest.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
_CHUNK_SIZE = 1024 * 1024


class UploadSource(Protocol):
    """Readable multipart upload, e.g. ``fastapi.UploadFile``."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class UploadedDocument:
    """An upload staged on disk for the duration of one request."""

    path: Path
    mime_type: str
    filename: str
    size: int


class UploadStore:
    """Writes, reads and removes staged uploads.

    Args:
        upload_dir: Directory for staged files. Created on demand.
        max_bytes: Largest accepted upload in bytes.
    """

    def __init__(self, upload_dir: Path, max_bytes: int) -> None:
        self.upload_dir = upload_dir
        self.max_bytes = max_bytes

    async def receive(self, source: UploadSource) -> UploadedDocument:
        """Stream an upload to disk, enforcing the size limit.

        Raises:
            ValidationError: If the upload exceeds ``max_bytes``. The partial
                file is removed before raising.
        """
        await asyncio.to_thread(self.upload_dir.mkdir, parents=True, exist_ok=True)
        path = self.upload_dir / uuid.uuid4().hex
        size = 0

        with open(path, "wb") as out:
            try:
                while chunk := await source.read(_CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise ValidationError(
                            f"File exceeds the maximum upload size of {self.max_bytes} bytes"
                        )
                    await asyncio.to_thread(out.write, chunk)
            except BaseException:
                out.close()
                await self.discard(path)
                raise

        logger.debug("Staged upload %s (%d bytes) at %s", source.filename, size, path)
        return UploadedDocument(
            path=path,
            mime_type=source.content_type or DEFAULT_MIME_TYPE,
            filename=source.filename or path.name,
            size=size,
        )

    async def read(self, document: UploadedDocument) -> bytes:
        return await asyncio.to_thread(document.path.read_bytes)

    async def discard(self, path: Path) -> bool:
        """Delete a staged file, logging instead of raising on failure.

        Returns:
            ``True`` if the file was removed.
        """
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            logger.error("Failed to delete file %s: %s", path, exc)
            return False
        logger.info("Deleted file %s", path)
        return True
