"""Raw file intake for the ``POST /generate-photos`` endpoint.

Accepts an image or PDF (a photographed or exported menu), checks its MIME
type and size, and stores it unchanged in the upload directory under a
generated name.  Nothing downstream consumes these files yet; the intake is
independent of the transform pipeline.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from menuphoto.core.config import MenuPhotoConfig
from menuphoto.core.errors import UnsupportedMediaError, UploadStorageError, UploadTooLargeError

logger = logging.getLogger(__name__)

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def is_allowed_media_type(content_type: str | None) -> bool:
    """Return ``True`` for ``image/*`` and ``application/pdf``."""
    if not content_type:
        return False
    content_type = content_type.split(";", 1)[0].strip().lower()
    return content_type.startswith("image/") or content_type == "application/pdf"


def _extension(original_name: str | None) -> str:
    suffix = Path(original_name or "").suffix.lower()
    return suffix if _SAFE_EXTENSION.match(suffix) else ""


@dataclass
class StoredUpload:
    """Metadata of an accepted upload."""

    filename: str
    size: int
    mime_type: str
    path: Path
    public_path: str


class UploadIntake:
    """Validates and stores uploaded menu files."""

    def __init__(self, config: MenuPhotoConfig) -> None:
        self._config = config

    @property
    def max_bytes(self) -> int:
        return self._config.max_upload_bytes

    def validate(self, content_type: str | None, size: int) -> None:
        """Reject disallowed MIME types and oversized payloads.

        Raises:
            UnsupportedMediaError: Neither an image nor a PDF.
            UploadTooLargeError: Larger than ``max_upload_bytes``.
        """
        if not is_allowed_media_type(content_type):
            raise UnsupportedMediaError("Only image and PDF files are allowed")
        if size > self.max_bytes:
            raise UploadTooLargeError(
                f"File too large: {size} bytes exceeds the {self.max_bytes} byte limit"
            )

    def save(self, original_name: str | None, content_type: str | None, data: bytes) -> StoredUpload:
        """Validate *data* and write it under a freshly generated name.

        Args:
            original_name: Client-supplied filename; only its extension is kept.
            content_type: Client-declared MIME type.
            data: File contents.

        Returns:
            A :class:`StoredUpload` describing the written file.

        Raises:
            UploadStorageError: The file could not be written.  No partial
                file is left behind.
        """
        self.validate(content_type, len(data))

        filename = f"upload-{int(time.time() * 1000)}-{uuid.uuid4().hex}{_extension(original_name)}"
        path = self._config.upload_dir / filename
        try:
            self._config.upload_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise UploadStorageError(f"Could not store uploaded file: {e}") from e

        logger.info(f"Stored upload {filename} ({len(data)} bytes, {content_type})")

        return StoredUpload(
            filename=filename,
            size=len(data),
            mime_type=content_type.split(";", 1)[0].strip(),
            path=path,
            public_path=self._config.public_path(filename),
        )
