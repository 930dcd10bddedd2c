"""Core components: configuration, errors, the transform pipeline, the
external transformer client and the upload intake."""

from .config import MenuPhotoConfig
from .errors import (
    InvalidInputError,
    MenuPhotoError,
    StorageError,
    TransformError,
    UploadRejectedError,
    UploadStorageError,
    UpstreamProtocolError,
    UpstreamUnavailableError,
)

__all__ = [
    "MenuPhotoConfig",
    "MenuPhotoError",
    "TransformError",
    "InvalidInputError",
    "UpstreamUnavailableError",
    "UpstreamProtocolError",
    "StorageError",
    "UploadRejectedError",
    "UploadStorageError",
]
