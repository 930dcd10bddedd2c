"""Pydantic request and response models for the Menu Photo Studio API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

The transform models live in :mod:`menuphoto.core.models` because the
pipeline produces them; they are re-exported here so the API layer has one
import point.

Models
------
TransformRequest
    Payload for ``POST /api/images/transform``.
TransformResult
    Response of ``POST /api/images/transform``.
UploadResult
    Response of ``POST /generate-photos``.
"""

from __future__ import annotations

from pydantic import BaseModel

from menuphoto.core.models import (
    CamelModel,
    ImageFormat,
    ImageQuality,
    TransformMetadata,
    TransformRequest,
    TransformResult,
)

__all__ = [
    "ImageFormat",
    "ImageQuality",
    "TransformMetadata",
    "TransformRequest",
    "TransformResult",
    "UploadData",
    "UploadResult",
]


class UploadData(CamelModel):
    email: str
    uploaded_file: str
    file_size: int
    mime_type: str
    upload_path: str


class UploadResult(BaseModel):
    """Response body of ``POST /generate-photos``."""

    success: bool = True
    message: str
    data: UploadData
