"""Ideogram Relay - image generation relay backed by Ideogram and Cloudinary."""

__version__ = "0.1.0"

from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.pipeline import RelayPipeline

__all__ = [
    "RelayConfig",
    "RelayPipeline",
]
