"""Configuration management for the Menu Photo Studio backend.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the MENUPHOTO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (MENUPHOTO_* prefix)
2. .env file in the project root
3. Default values defined in MenuPhotoConfig

Example .env file:
    MENUPHOTO_UPLOAD_DIR=uploads
    MENUPHOTO_TRANSFORMER_API_URL=https://transformer.example.com/v1/transform
    MENUPHOTO_TRANSFORMER_API_KEY=sk-...
    MENUPHOTO_SERVER_PORT=3000

Resolution
----------
There is no global configuration instance.  The application factory
(:func:`menuphoto.api.main.create_app`) resolves a single
:class:`MenuPhotoConfig` at startup and hands it to every component that
needs it.  Request handlers never read the environment.

Usage Example
-------------
    from menuphoto.core.config import MenuPhotoConfig
    from menuphoto.core.transform_pipeline import TransformPipeline
    from menuphoto.core.transformer_client import TransformerClient

    config = MenuPhotoConfig()
    pipeline = TransformPipeline(config, TransformerClient.from_config(config))
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MenuPhotoConfig(BaseSettings):
    """Main configuration for the Menu Photo Studio backend.

    Values are loaded from environment variables with the MENUPHOTO_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Storage:
        upload_dir : Path
            Directory that receives transformed images and raw uploads.
        static_url_prefix : str
            Public path prefix under which ``upload_dir`` is served.
        output_filename_prefix : str
            Leading component of generated transform output filenames.
        max_upload_bytes : int
            Largest file accepted by the upload intake endpoint.

    External transformer:
        transformer_api_url : str
            Endpoint of the third-party image transformation API.
        transformer_api_key : str
            Bearer token sent to the transformation API.
        transformer_timeout : float
            Request timeout in seconds for the single outbound call.

    Server:
        public_base_url : str
            Scheme, host and port prepended to file paths to build URLs.
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Bind port for uvicorn (1024-65535).
        log_level : str
            Root logging level used by ``main()``.

    Notes
    -----
    - ``upload_dir`` is created automatically if it doesn't exist
    - To change values, set environment variables and restart
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MENUPHOTO_",
        case_sensitive=False,
    )

    # Storage
    upload_dir: Path = Field(
        default=Path("uploads"),
        description="Directory for transformed images and raw uploads",
    )
    static_url_prefix: str = Field(
        default="/uploads",
        description="Public path prefix for files in upload_dir",
    )
    output_filename_prefix: str = Field(
        default="menu-photo",
        description="Filename prefix for transformed images",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted upload size in bytes",
        gt=0,
    )

    # External transformer
    transformer_api_url: str = Field(
        default="",
        description="URL of the external image transformation API",
    )
    transformer_api_key: str = Field(
        default="",
        description="Bearer token for the external image transformation API",
    )
    transformer_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for the transformation API call",
        gt=0,
    )

    # Server
    public_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used to build absolute links to stored files",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the upload directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def public_path(self, filename: str) -> str:
        """Return the server-relative path at which *filename* is served."""
        return f"{self.static_url_prefix.rstrip('/')}/{filename}"

    def public_url(self, path: str) -> str:
        """Return the absolute URL for a server-relative *path*."""
        return f"{self.public_base_url.rstrip('/')}{path}"
