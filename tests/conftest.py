"""Shared pytest fixtures for Ideogram Relay tests."""

from __future__ import annotations

import io
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from ideogram_relay.api.main import create_app
from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.fetcher import ImageFetcher
from ideogram_relay.core.ideogram_client import IdeogramClient
from ideogram_relay.core.media_store import MediaStore, StoredMedia
from ideogram_relay.core.pipeline import RelayPipeline

GENERATED_URL = "https://ideogram.ai/api/images/ephemeral/fox.jpeg"


def _encode(image: Image.Image, fmt: str) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def relay_config() -> RelayConfig:
    """Create a configuration that ignores the environment and .env file.

    Returns:
        RelayConfig with dummy credentials
    """
    return RelayConfig(
        cloudinary_cloud_name="demo-cloud",
        cloudinary_api_key="123456",
        cloudinary_api_secret="shh",
        ideogram_api_key="ideo-key",
        _env_file=None,
    )


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small, valid JPEG image."""
    return _encode(Image.new("RGB", (32, 24), color=(200, 40, 10)), "JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    """A small, valid PNG image with an alpha channel."""
    return _encode(Image.new("RGBA", (16, 16), color=(0, 128, 255, 128)), "PNG")


@pytest.fixture
def mock_client() -> MagicMock:
    """Generation client stub answering every operation with one image."""
    client = MagicMock(spec=IdeogramClient)
    client.generate.return_value = {"images": [GENERATED_URL]}
    client.remix.return_value = {"images": [GENERATED_URL]}
    client.reframe.return_value = {"image": GENERATED_URL}
    return client


@pytest.fixture
def mock_fetcher(jpeg_bytes: bytes) -> MagicMock:
    """Fetcher stub returning a valid JPEG."""
    fetcher = MagicMock(spec=ImageFetcher)
    fetcher.fetch.return_value = jpeg_bytes
    return fetcher


@pytest.fixture
def mock_store() -> MagicMock:
    """Media store stub echoing the folder into the public id."""
    store = MagicMock(spec=MediaStore)

    def _upload(data: bytes, folder: str, fmt: str | None = None) -> StoredMedia:
        suffix = f".{fmt}" if fmt else ""
        return StoredMedia(
            secure_url=f"https://cdn/{folder}/x{suffix}",
            public_id=f"{folder}/x",
        )

    store.upload.side_effect = _upload
    return store


@pytest.fixture
def pipeline(mock_client, mock_fetcher, mock_store) -> RelayPipeline:
    """Pipeline wired to the stub clients and the real transcoder."""
    return RelayPipeline(client=mock_client, fetcher=mock_fetcher, store=mock_store)


@pytest.fixture
def test_client(pipeline: RelayPipeline) -> Iterator[TestClient]:
    """FastAPI TestClient for an app using the stubbed pipeline."""
    with TestClient(create_app(pipeline=pipeline)) as client:
        yield client
