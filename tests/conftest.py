"""Shared pytest fixtures for Menu Photo Studio tests."""

import asyncio
import base64
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from menuphoto.api.main import create_app
from menuphoto.core.config import MenuPhotoConfig

# 1x1 pixel JPEG used as a realistic small payload.
SAMPLE_JPEG_BASE64 = (
    "/9j/4AAQSkZJRgABAQEAYABgAAD/2wBDAAgGBgcGBQgHBwcJCQgKDBQNDAsLDBkSEw8UHRofHh0a"
    "HBwgJC4nICIsIxwcKDcpLDAxNDQ0Hyc5PTgyPC4zNDL/2wBDAQkJCQwLDBgNDRgyIRwhMjIyMjIy"
    "MjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjL/wAARCAABAAEDASIA"
    "AhEBAxEB/8QAFQABAQAAAAAAAAAAAAAAAAAAAAv/xAAUEAEAAAAAAAAAAAAAAAAAAAAA/8QAFQEB"
    "AQAAAAAAAAAAAAAAAAAAAAX/xAAUEQEAAAAAAAAAAAAAAAAAAAAA/9oADAMBAAIRAxEAPwCwAA//2Q=="
)


class StubTransformer:
    """In-memory stand-in for the external transformer.

    By default it echoes the input bytes back.  ``result`` replaces the
    returned bytes, ``error`` is raised instead of returning, and ``delay``
    sleeps before answering.
    """

    def __init__(self, result: bytes | None = None, error: Exception | None = None, delay: float = 0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    async def transform_image(self, image_bytes, prompt, quality, output_format):
        self.calls.append(
            {
                "image_bytes": image_bytes,
                "prompt": prompt,
                "quality": quality,
                "output_format": output_format,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result if self.result is not None else image_bytes


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> MenuPhotoConfig:
    """Create a test configuration writing into a temporary upload directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        MenuPhotoConfig instance for testing
    """
    return MenuPhotoConfig(
        _env_file=None,
        upload_dir=str(temp_dir / "uploads"),
        transformer_api_url="https://transformer.test/v1/transform",
        transformer_api_key="test-key",
        public_base_url="http://localhost:3000",
        max_upload_bytes=1024,
    )


@pytest.fixture
def sample_image_b64() -> str:
    """Base64 text of a 1x1 JPEG."""
    return SAMPLE_JPEG_BASE64


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Decoded bytes of the 1x1 JPEG."""
    return base64.b64decode(SAMPLE_JPEG_BASE64)


@pytest.fixture
def stub_transformer() -> StubTransformer:
    """Echoing stub transformer."""
    return StubTransformer()


@pytest.fixture
def test_client(test_config: MenuPhotoConfig, stub_transformer: StubTransformer) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the stub transformer.

    Yields:
        TestClient for an app built from ``test_config``
    """
    app = create_app(test_config, transformer=stub_transformer)
    with TestClient(app) as client:
        yield client


def stored_files(config: MenuPhotoConfig) -> list[Path]:
    """List files currently in the upload directory."""
    return sorted(p for p in config.upload_dir.iterdir() if p.is_file())
