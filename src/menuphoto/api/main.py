"""Menu Photo Studio — FastAPI Application.

This module builds the web application.  It defines the
:func:`create_app` factory, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Configuration** is resolved once by :func:`create_app` and passed to
  every component; request handlers never read the environment.
- **Image transformation** is performed by
  :class:`~menuphoto.core.transform_pipeline.TransformPipeline`, which
  delegates to the external transformer through
  :class:`~menuphoto.core.transformer_client.TransformerClient`.
- **Raw uploads** are handled by
  :class:`~menuphoto.core.upload_intake.UploadIntake`.
- **Stored files** are served by FastAPI's ``StaticFiles`` middleware at
  ``config.static_url_prefix``.

Endpoints
---------
========  ==========================  ====================================
Method    Path                        Purpose
========  ==========================  ====================================
GET       ``/``                       Plain text greeting
POST      ``/generate-photos``        Store an uploaded menu image or PDF
POST      ``/api/images/transform``   Transform a base64 image
GET       ``/uploads/{name}``         Serve a stored file
========  ==========================  ====================================

Usage
-----
CLI (installed entry point)::

    menuphoto

Direct invocation::

    python -m menuphoto.api.main
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from menuphoto import __version__
from menuphoto.api.models import TransformRequest, TransformResult, UploadData, UploadResult
from menuphoto.core.config import MenuPhotoConfig
from menuphoto.core.errors import MenuPhotoError, MissingFieldError, TransformError, UploadRejectedError
from menuphoto.core.transform_pipeline import ImageTransformer, TransformPipeline
from menuphoto.core.transformer_client import TransformerClient
from menuphoto.core.upload_intake import UploadIntake

logger = logging.getLogger(__name__)


def create_app(
    config: MenuPhotoConfig | None = None,
    transformer: ImageTransformer | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Resolved configuration.  Loaded from the environment when
            omitted.
        transformer: External transformer to use instead of a
            :class:`TransformerClient` built from *config*.  Tests pass a stub.

    Returns:
        The configured FastAPI application.  The pipeline, upload intake and
        configuration are available on ``app.state``.
    """
    config = config or MenuPhotoConfig()
    transformer = transformer or TransformerClient.from_config(config)

    app = FastAPI(
        title="Menu Photo Studio",
        description="Upload menu photos and transform them with an external image model.",
        version=__version__,
    )
    app.state.config = config
    app.state.pipeline = TransformPipeline(config, transformer)
    app.state.upload_intake = UploadIntake(config)

    # The studio frontend is served from a different origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount(
        config.static_url_prefix.rstrip("/"),
        StaticFiles(directory=str(config.upload_dir)),
        name="uploads",
    )

    # -----------------------------------------------------------------------
    # Error translation.
    # -----------------------------------------------------------------------

    @app.exception_handler(TransformError)
    async def transform_error_handler(request: Request, exc: TransformError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": f"Image transformation failed: {exc}", "error": exc.kind},
        )

    @app.exception_handler(UploadRejectedError)
    async def upload_error_handler(request: Request, exc: UploadRejectedError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(MenuPhotoError)
    async def server_error_handler(request: Request, exc: MenuPhotoError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        """Return a plain text greeting."""
        return "Hello World!"

    @app.post("/generate-photos", response_model=UploadResult)
    async def generate_photos(
        request: Request,
        file: UploadFile | None = File(default=None),
        email: str | None = Form(default=None),
    ) -> UploadResult:
        """Accept a menu image or PDF and store it in the upload directory.

        Args:
            file: Multipart file part (``image/*`` or ``application/pdf``).
            email: Contact address supplied with the upload.

        Returns:
            :class:`UploadResult` with the stored filename, size, MIME type
            and public path.

        Raises:
            MissingFieldError: 400 if ``file`` or ``email`` is absent.
            UnsupportedMediaError: 400 for other MIME types.
            UploadTooLargeError: 413 above ``max_upload_bytes``.
            UploadStorageError: 500 if the file could not be written.
        """
        if file is None:
            raise MissingFieldError("File is required")
        if not email or not email.strip():
            raise MissingFieldError("Email is required")

        intake: UploadIntake = request.app.state.upload_intake

        # Read at most one byte past the limit so oversized uploads are
        # detected without buffering them whole.
        data = await file.read(intake.max_bytes + 1)
        stored = intake.save(file.filename, file.content_type, data)

        logger.info(f"Received file: {stored.filename} from email: {email}")

        return UploadResult(
            success=True,
            message="AI photos generation started successfully",
            data=UploadData(
                email=email,
                uploaded_file=stored.filename,
                file_size=stored.size,
                mime_type=stored.mime_type,
                upload_path=stored.public_path,
            ),
        )

    @app.post("/api/images/transform", response_model=TransformResult)
    async def transform_image(req: TransformRequest, request: Request) -> TransformResult:
        """Transform a base64 image through the external transformer.

        Args:
            req: Validated :class:`TransformRequest` payload.

        Returns:
            :class:`TransformResult` describing the stored output.

        Raises:
            TransformError: Translated to a JSON error response whose
                ``error`` field names the failure kind.
        """
        pipeline: TransformPipeline = request.app.state.pipeline
        return await pipeline.transform(req)

    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :class:`MenuPhotoConfig` (which loads
    from ``MENUPHOTO_*`` environment variables).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``menuphoto`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    config = MenuPhotoConfig()

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Serving {config.upload_dir} at {config.static_url_prefix}")

    uvicorn.run(
        create_app(config),
        host=config.server_host,
        port=config.server_port,
    )


if __name__ == "__main__":
    main()
