"""Image transformation pipeline for the Menu Photo Studio backend.

This module provides :class:`TransformPipeline`, which turns a
:class:`~menuphoto.core.models.TransformRequest` into a stored image and a
:class:`~menuphoto.core.models.TransformResult`.

Steps
-----
1. **Decode** — strict base64 decode of the request image.  ASCII whitespace
   (MIME-style line wrapping) is removed first.
2. **Delegate** — hand bytes, prompt, quality and format to the external
   transformer (the only network-bound step).  Whatever the transformer
   raises is reported as an upstream failure.
3. **Name** — ``<prefix>-<epoch ms>-<uuid4 hex>.<format>``.  The uuid makes
   concurrent calls collision-free without any locking.
4. **Persist** — synchronous write into ``config.upload_dir``.
5. **Respond** — sizes, echoed parameters, elapsed time and public URL.

Either the full result is produced or a
:class:`~menuphoto.core.errors.TransformError` subclass is raised.  Nothing is
written to disk unless the external call succeeded, and a failed write removes
whatever partial file it left behind.

Usage
-----
::

    from menuphoto.core.config import MenuPhotoConfig
    from menuphoto.core.transform_pipeline import TransformPipeline
    from menuphoto.core.transformer_client import TransformerClient

    config = MenuPhotoConfig()
    pipeline = TransformPipeline(config, TransformerClient.from_config(config))
    result = await pipeline.transform(request)
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import time
import uuid
from pathlib import Path
from typing import Protocol

from menuphoto.core.config import MenuPhotoConfig
from menuphoto.core.errors import (
    InvalidInputError,
    StorageError,
    TransformError,
    UpstreamProtocolError,
    UpstreamUnavailableError,
)
from menuphoto.core.models import TransformMetadata, TransformRequest, TransformResult

logger = logging.getLogger(__name__)


class ImageTransformer(Protocol):
    """Anything that can transform image bytes, e.g. :class:`TransformerClient`."""

    async def transform_image(
        self,
        image_bytes: bytes,
        prompt: str,
        quality: str,
        output_format: str,
    ) -> bytes: ...


def describe_exception(exc: BaseException) -> str:
    """Return ``"<class>: <message>"``, or just the class name when the message is empty."""
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def decode_image(encoded: str) -> bytes:
    """Decode a base64 image string, tolerating a ``data:`` URL prefix.

    All ASCII whitespace is removed before the strict decode, so line-wrapped
    base64 (``base64 -w 76``, MIME bodies) is accepted.

    Args:
        encoded: Base64 text, optionally prefixed with ``data:<mime>;base64,``.

    Returns:
        The decoded bytes.

    Raises:
        InvalidInputError: If the text is empty or not valid base64.
    """
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]

    encoded = "".join(encoded.split())
    if not encoded:
        raise InvalidInputError("Image data is empty")

    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError(f"Image is not valid base64: {e}") from e


class TransformPipeline:
    """Validate, decode, transform, persist and describe one image.

    Attributes:
        _config (MenuPhotoConfig):
            Resolved application configuration (upload directory, filename
            prefix, public URL settings).
        _transformer (ImageTransformer):
            External transformer the decoded image is delegated to.
    """

    def __init__(self, config: MenuPhotoConfig, transformer: ImageTransformer) -> None:
        self._config = config
        self._transformer = transformer

    @property
    def upload_dir(self) -> Path:
        return self._config.upload_dir

    def generate_filename(self, output_format: str) -> str:
        """Return a collision-resistant filename for a transformed image."""
        timestamp = int(time.time() * 1000)
        return f"{self._config.output_filename_prefix}-{timestamp}-{uuid.uuid4().hex}.{output_format}"

    async def _delegate(self, image_bytes: bytes, request: TransformRequest) -> bytes:
        """Call the transformer, tagging anything it raises as an upstream failure.

        Raises:
            UpstreamUnavailableError: Timeout, transport or other failure in the call.
            UpstreamProtocolError: The transformer returned something other than bytes.
        """
        try:
            transformed = await self._transformer.transform_image(
                image_bytes,
                request.prompt,
                request.quality,
                request.format,
            )
        except TransformError:
            raise
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise UpstreamUnavailableError(
                f"Transformer call timed out: {describe_exception(e)}"
            ) from e
        except Exception as e:
            raise UpstreamUnavailableError(
                f"Transformer call failed: {describe_exception(e)}"
            ) from e

        if not isinstance(transformed, (bytes, bytearray)):
            raise UpstreamProtocolError(
                f"Transformer returned {type(transformed).__name__}, expected bytes"
            )
        return bytes(transformed)

    def _persist(self, filename: str, data: bytes) -> Path:
        """Write *data* to the upload directory, creating it on first use.

        Raises:
            StorageError: If the directory cannot be created or the write fails.
        """
        target = self.upload_dir / filename
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            # Drop a partially written file so no path outlives a failed call.
            target.unlink(missing_ok=True)
            raise StorageError(f"Could not write {target}: {describe_exception(e)}") from e
        return target

    async def transform(self, request: TransformRequest) -> TransformResult:
        """Run the full pipeline for one request.

        Args:
            request: Validated transform request.

        Returns:
            The transform result describing the newly written file.

        Raises:
            InvalidInputError: Malformed base64 image.
            UpstreamUnavailableError: The transformer timed out, was unreachable
                or raised.
            UpstreamProtocolError: Unexpected transformer response.
            StorageError: The output could not be written.
        """
        start = time.perf_counter()

        try:
            image_bytes = decode_image(request.image)
            original_size = len(image_bytes)
            logger.info(f"Processing image transformation. Original size: {original_size} bytes")

            transformed = await self._delegate(image_bytes, request)

            filename = self.generate_filename(request.format)
            self._persist(filename, transformed)
        except TransformError as e:
            logger.error(f"Image transformation failed: {e}", exc_info=True)
            raise

        processing_time_ms = int((time.perf_counter() - start) * 1000)
        file_path = self._config.public_path(filename)

        logger.info(f"Image transformation completed in {processing_time_ms}ms. Saved to: {file_path}")

        return TransformResult(
            success=True,
            file_path=file_path,
            url=self._config.public_url(file_path),
            metadata=TransformMetadata(
                original_size=original_size,
                transformed_size=len(transformed),
                format=request.format,
                quality=request.quality,
                prompt=request.prompt,
                processing_time_ms=processing_time_ms,
            ),
        )
