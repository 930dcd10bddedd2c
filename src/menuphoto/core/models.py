"""Transform request and result models shared by the core and the API layer.

The wire format uses camelCase keys (``filePath``, ``processingTimeMs``) to
match what the studio frontend expects; Python code uses snake_case
attributes and pydantic aliases bridge the two.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ImageQuality = Literal["low", "medium", "high"]
ImageFormat = Literal["jpeg", "png", "webp"]


class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransformRequest(BaseModel):
    """Request body for the ``POST /api/images/transform`` endpoint.

    Attributes:
        image: Base64-encoded source image.  A ``data:<mime>;base64,`` prefix
            and embedded line breaks are tolerated and stripped by the pipeline.
        prompt: Free-text description of the desired transformation.
        quality: Requested output quality.
        format: Requested output container; also used as the file extension.
    """

    image: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded source image.",
    )
    prompt: str = Field(
        default="",
        description="Free-text transformation prompt.",
    )
    quality: ImageQuality = Field(
        default="high",
        description="Output quality: 'low', 'medium' or 'high'.",
    )
    format: ImageFormat = Field(
        default="jpeg",
        description="Output format: 'jpeg', 'png' or 'webp'.",
    )


class TransformMetadata(CamelModel):
    """Sizes, echoed request parameters and timing of one transform call."""

    original_size: int = Field(..., description="Decoded input size in bytes.")
    transformed_size: int = Field(..., description="Decoded output size in bytes.")
    format: str
    quality: str
    prompt: str
    processing_time_ms: int = Field(..., ge=0, description="Wall-clock pipeline duration.")


class TransformResult(CamelModel):
    """Response body of ``POST /api/images/transform``.

    Attributes:
        success: Always ``True``; failures are reported as HTTP errors.
        file_path: Server-relative path of the written file.
        url: Absolute URL of the written file.
        metadata: Sizes, echoed parameters and timing.
    """

    success: bool = True
    file_path: str
    url: str
    metadata: TransformMetadata
