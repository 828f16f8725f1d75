"""Cloudinary media store helpers.

Handles all uploads the relay performs:

- ``ideogram-images``: transcoded results of ``/api/generate``
- ``ideogram-reframed``: transcoded results of ``/api/reframe``
- ``ideogram-remixed``: transcoded results of ``/api/remix``
- ``temp-uploads``: files posted to ``/api/remix``, stored only to obtain a
  URL the generation service can read

Credentials are passed on every call instead of through
``cloudinary.config()``, so the SDK's process-wide settings are never
touched and several stores with different accounts can coexist.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

import cloudinary.exceptions
import cloudinary.uploader

from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.errors import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredMedia:
    """Reference to an object accepted by the media store."""

    secure_url: str
    public_id: str


class MediaStore:
    """Uploads binary blobs to Cloudinary.

    Args:
        config: Relay configuration providing the Cloudinary credentials.
    """

    def __init__(self, config: RelayConfig) -> None:
        self._credentials = {
            "cloud_name": config.cloudinary_cloud_name,
            "api_key": config.cloudinary_api_key,
            "api_secret": config.cloudinary_api_secret,
        }

    def upload(self, data: bytes, folder: str, fmt: str | None = None) -> StoredMedia:
        """Upload ``data`` into ``folder``.

        Args:
            data: Raw file bytes.
            folder: Folder (namespace) tag for the stored object.
            fmt: Optional output format the store should record, e.g.
                ``"png"``.

        Returns:
            The stored object's secure URL and public id.

        Raises:
            StoreError: If the upload is rejected or the reply is missing
                ``secure_url``/``public_id``.
        """
        options = {"folder": folder, "resource_type": "image", **self._credentials}
        if fmt:
            options["format"] = fmt

        try:
            result = cloudinary.uploader.upload(io.BytesIO(data), **options)
        except cloudinary.exceptions.Error as exc:
            raise StoreError(str(exc) or "Media store rejected the upload") from exc

        secure_url = result.get("secure_url")
        public_id = result.get("public_id")
        if not secure_url or not public_id:
            raise StoreError("Media store response is missing secure_url or public_id")

        logger.info("Uploaded %d bytes to %s (%s)", len(data), folder, public_id)
        return StoredMedia(secure_url=secure_url, public_id=public_id)

    def destroy(self, public_id: str) -> None:
        """Delete a previously uploaded object.

        Raises:
            StoreError: If the store rejects the deletion.
        """
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type="image", **self._credentials)
        except cloudinary.exceptions.Error as exc:
            raise StoreError(str(exc) or f"Failed to delete {public_id}") from exc

        if result.get("result") not in ("ok", "not found"):
            raise StoreError(f"Failed to delete {public_id}: {result.get('result')}")
        logger.info("Deleted %s", public_id)
