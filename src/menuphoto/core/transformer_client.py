"""HTTP client for the external image transformation API.

The external transformer is an opaque third-party service: it receives a
base64 image plus a prompt and returns a base64 image.  This module wraps the
single outbound call and turns every way it can go wrong into one of two
tagged errors:

- :class:`~menuphoto.core.errors.UpstreamUnavailableError` for transport
  failures (connection refused, timeout, non-2xx status).
- :class:`~menuphoto.core.errors.UpstreamProtocolError` when the service
  answers 2xx but the body lacks a decodable ``transformed_image`` field.

Wire format
-----------
Request (``POST <api_url>``)::

    Authorization: Bearer <api_key>
    {"image": "<b64>", "prompt": "...", "quality": "high", "output_format": "jpeg"}

Response::

    {"transformed_image": "<b64>"}

There are no retries.  One failed call is one failed pipeline call.
"""

from __future__ import annotations

import base64
import binascii
import logging

import httpx

from menuphoto.core.config import MenuPhotoConfig
from menuphoto.core.errors import UpstreamProtocolError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


def _upstream_message(response: httpx.Response) -> str:
    """Extract a human-readable error message from a failed upstream response."""
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"

    if isinstance(payload, dict):
        message = payload.get("message")
        if not message and isinstance(payload.get("error"), dict):
            message = payload["error"].get("message")
        if message:
            return str(message)
    return response.reason_phrase or f"HTTP {response.status_code}"


class TransformerClient:
    """Async client for the external image transformation API.

    Attributes:
        api_url: Endpoint receiving the POST request.
        api_key: Bearer token for the ``Authorization`` header.
        timeout: Total request timeout in seconds.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            api_url: Endpoint of the transformation API.
            api_key: Bearer token.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests to intercept
                requests without touching the network.
        """
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: MenuPhotoConfig) -> TransformerClient:
        """Build a client from the resolved application configuration."""
        return cls(
            api_url=config.transformer_api_url,
            api_key=config.transformer_api_key,
            timeout=config.transformer_timeout,
        )

    async def transform_image(
        self,
        image_bytes: bytes,
        prompt: str,
        quality: str,
        output_format: str,
    ) -> bytes:
        """Send an image to the external transformer and return the result bytes.

        Args:
            image_bytes: Decoded source image.
            prompt: Free-text transformation prompt.
            quality: Requested quality level (``low``, ``medium``, ``high``).
            output_format: Requested output container (``jpeg``, ``png``, ``webp``).

        Returns:
            Decoded bytes of the transformed image.

        Raises:
            UpstreamUnavailableError: On timeout, connection failure, non-2xx
                status, or a missing API URL.
            UpstreamProtocolError: If the response body is not JSON or lacks a
                valid base64 ``transformed_image`` field.
        """
        if not self.api_url:
            raise UpstreamUnavailableError("Transformer API URL is not configured")

        payload = {
            "image": base64.b64encode(image_bytes).decode("ascii"),
            "prompt": prompt,
            "quality": quality,
            "output_format": output_format,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        logger.info(f'Calling transformer API with prompt: "{prompt}"')

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"Transformer API request timed out after {self.timeout}s: {e}")
            raise UpstreamUnavailableError(
                f"Transformer API request timed out after {self.timeout:g}s: {e}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Transformer API request failed: {e}")
            raise UpstreamUnavailableError(f"Transformer API request failed: {e}") from e

        if response.is_error:
            message = _upstream_message(response)
            logger.error(f"Transformer API request failed ({response.status_code}): {message}")
            raise UpstreamUnavailableError(
                f"Transformer API error ({response.status_code}): {message}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamProtocolError("Invalid response from transformer API: body is not JSON") from e

        encoded = data.get("transformed_image") if isinstance(data, dict) else None
        if not encoded or not isinstance(encoded, str):
            raise UpstreamProtocolError(
                "Invalid response from transformer API: missing transformed_image"
            )

        try:
            transformed = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise UpstreamProtocolError(
                f"Invalid response from transformer API: transformed_image is not base64 ({e})"
            ) from e

        logger.info("Received transformed image from transformer API")
        return transformed
