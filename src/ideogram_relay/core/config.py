"""Configuration management for the Ideogram Relay.

This module provides the relay's configuration using Pydantic Settings.
Values are loaded from environment variables (no prefix, so the conventional
``CLOUDINARY_*`` / ``IDEOGRAM_*`` / ``PORT`` names apply) with an optional
``.env`` file as fallback.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Keyword arguments passed to ``RelayConfig(...)``
2. Environment variables
3. ``.env`` file in the working directory
4. Default values defined in RelayConfig

Example .env file:
    CLOUDINARY_CLOUD_NAME=my-cloud
    CLOUDINARY_API_KEY=123456789012345
    CLOUDINARY_API_SECRET=abcdefghijklmnopqrstuvwxyz
    IDEOGRAM_API_KEY=ideo-xxxxxxxx
    PORT=3000

Explicit Configuration
----------------------
Unlike a module-level global, no configuration instance is created at import
time.  The application builds exactly one ``RelayConfig`` at startup and
passes it to :class:`~ideogram_relay.core.ideogram_client.IdeogramClient`,
:class:`~ideogram_relay.core.media_store.MediaStore` and
:class:`~ideogram_relay.core.fetcher.ImageFetcher`.  Tests construct their
own instances (or skip configuration entirely by injecting stub clients).

Credentials are checked for presence only; whether they are accepted is
discovered on the first upstream call.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelayConfig(BaseSettings):
    """Runtime configuration for the Ideogram Relay.

    Attributes
    ----------
    Media Store (Cloudinary):
        cloudinary_cloud_name : str
            Cloudinary cloud name (required)
        cloudinary_api_key : str
            Cloudinary API key (required)
        cloudinary_api_secret : str
            Cloudinary API secret (required)

    Generation Service (Ideogram):
        ideogram_api_key : str
            Bearer credential for the Ideogram API (required)
        ideogram_base_url : str
            Base URL the generate/reframe/remix paths are appended to

    Transport:
        request_timeout : float | None
            Timeout in seconds for outbound HTTP calls.  ``None`` keeps the
            transport default (no timeout).

    Remix:
        cleanup_temp_uploads : bool
            Destroy the temporary upload created for file-based remix
            requests once the pipeline finishes

    Server:
        host : str
            Bind address
        port : int
            Listen port (1-65535)
        log_level : Literal[...]
            Root logging level

    Examples
    --------
        >>> cfg = RelayConfig(
        ...     cloudinary_cloud_name="demo",
        ...     cloudinary_api_key="key",
        ...     cloudinary_api_secret="secret",
        ...     ideogram_api_key="ideo",
        ... )
        >>> cfg.port
        3000
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Media store credentials
    cloudinary_cloud_name: str = Field(
        ...,
        min_length=1,
        description="Cloudinary cloud name",
    )
    cloudinary_api_key: str = Field(
        ...,
        min_length=1,
        description="Cloudinary API key",
    )
    cloudinary_api_secret: str = Field(
        ...,
        min_length=1,
        description="Cloudinary API secret",
    )

    # Generation service
    ideogram_api_key: str = Field(
        ...,
        min_length=1,
        description="Bearer credential for the Ideogram API",
    )
    ideogram_base_url: str = Field(
        default="https://api.ideogram.ai",
        description="Base URL of the Ideogram API",
    )

    # Outbound HTTP
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Timeout in seconds for outbound calls (None = transport default)",
    )

    # Remix temporary uploads are kept unless this is enabled
    cleanup_temp_uploads: bool = Field(
        default=False,
        description="Destroy the temporary remix upload after the pipeline finishes",
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    port: int = Field(
        default=3000,
        description="Server port",
        ge=1,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value
