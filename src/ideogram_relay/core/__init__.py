"""Core relay components.

This package holds everything between the HTTP layer and the outside world:

- **RelayConfig** (config.py): environment-based configuration using
  Pydantic Settings
- **IdeogramClient** (ideogram_client.py): generate, reframe and remix calls
  against the Ideogram API
- **ImageFetcher** (fetcher.py): downloads generated images
- **stateless_session** (http_session.py): cookie-free requests sessions
- **transcode_to_png** (transcoder.py): Pillow-based PNG normalisation
- **MediaStore** (media_store.py): Cloudinary uploads
- **RelayPipeline** (pipeline.py): the validate → generate → fetch →
  transcode → store orchestration shared by all three operations
- **errors** (errors.py): the RelayError taxonomy and its HTTP statuses
"""

from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.errors import (
    FetchError,
    RelayError,
    StoreError,
    TranscodeError,
    UpstreamError,
    ValidationError,
)
from ideogram_relay.core.fetcher import ImageFetcher
from ideogram_relay.core.ideogram_client import IdeogramClient
from ideogram_relay.core.media_store import MediaStore, StoredMedia
from ideogram_relay.core.pipeline import RelayPipeline
from ideogram_relay.core.transcoder import transcode_to_png

__all__ = [
    "FetchError",
    "IdeogramClient",
    "ImageFetcher",
    "MediaStore",
    "RelayConfig",
    "RelayError",
    "RelayPipeline",
    "StoreError",
    "StoredMedia",
    "TranscodeError",
    "UpstreamError",
    "ValidationError",
    "transcode_to_png",
]
