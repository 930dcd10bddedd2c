"""Error types raised by the Menu Photo Studio core.

Transform failures are tagged by cause so that callers (and tests) can tell a
bad client payload from an upstream outage or a full disk.  Every variant
carries a stable ``kind`` string and the HTTP status the API layer reports.
"""


class MenuPhotoError(Exception):
    """Base class for all Menu Photo Studio errors."""

    status_code: int = 500


class TransformError(MenuPhotoError):
    """A transform pipeline call failed.  No partial result exists."""

    kind: str = "transform_failure"


class InvalidInputError(TransformError):
    """The request payload could not be decoded (e.g. malformed base64)."""

    kind = "invalid_input"
    status_code = 400


class UpstreamUnavailableError(TransformError):
    """The external transformer could not be reached, timed out, or returned non-2xx."""

    kind = "upstream_unavailable"


class UpstreamProtocolError(TransformError):
    """The external transformer answered with an unexpected body."""

    kind = "upstream_protocol_violation"


class StorageError(TransformError):
    """The transformed image could not be written to disk."""

    kind = "storage_failure"


class UploadRejectedError(MenuPhotoError):
    """An upload intake request was refused.  The message is user-facing."""

    status_code = 400


class MissingFieldError(UploadRejectedError):
    pass


class UnsupportedMediaError(UploadRejectedError):
    pass


class UploadTooLargeError(UploadRejectedError):
    status_code = 413


class UploadStorageError(MenuPhotoError):
    """An accepted upload could not be written to disk."""
