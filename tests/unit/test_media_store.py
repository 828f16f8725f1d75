"""Tests for ideogram_relay.core.media_store: Cloudinary uploads.

``cloudinary.uploader`` is patched so no network access occurs.
"""

from __future__ import annotations

from unittest.mock import patch

import cloudinary.exceptions
import pytest

from ideogram_relay.core.errors import StoreError
from ideogram_relay.core.media_store import MediaStore, StoredMedia

CREDENTIALS = {"cloud_name": "demo-cloud", "api_key": "123456", "api_secret": "shh"}


@pytest.fixture
def store(relay_config) -> MediaStore:
    return MediaStore(relay_config)


class TestUpload:
    def test_upload_returns_stored_media(self, store):
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.upload") as upload:
            upload.return_value = {
                "secure_url": "https://res.cloudinary.com/demo/x.png",
                "public_id": "ideogram-images/x",
                "bytes": 3,
            }
            result = store.upload(b"png", folder="ideogram-images", fmt="png")

        assert result == StoredMedia(
            secure_url="https://res.cloudinary.com/demo/x.png",
            public_id="ideogram-images/x",
        )

    def test_upload_options(self, store):
        """Folder, format and per-call credentials are forwarded."""
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.upload") as upload:
            upload.return_value = {"secure_url": "u", "public_id": "p"}
            store.upload(b"png-bytes", folder="ideogram-remixed", fmt="png")

        args, kwargs = upload.call_args
        assert args[0].read() == b"png-bytes"
        assert kwargs == {
            "folder": "ideogram-remixed",
            "format": "png",
            "resource_type": "image",
            **CREDENTIALS,
        }

    def test_upload_without_format(self, store):
        """Temporary uploads keep their original format."""
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.upload") as upload:
            upload.return_value = {"secure_url": "u", "public_id": "p"}
            store.upload(b"raw", folder="temp-uploads")

        assert "format" not in upload.call_args.kwargs

    def test_store_error_message_passed_through(self, store):
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.upload") as upload:
            upload.side_effect = cloudinary.exceptions.Error("Invalid Signature")
            with pytest.raises(StoreError, match="^Invalid Signature$"):
                store.upload(b"png", folder="ideogram-images", fmt="png")

    def test_incomplete_reply_raises(self, store):
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.upload") as upload:
            upload.return_value = {"public_id": "p"}
            with pytest.raises(StoreError, match="secure_url"):
                store.upload(b"png", folder="ideogram-images", fmt="png")


class TestDestroy:
    def test_destroy_ok(self, store):
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.destroy") as destroy:
            destroy.return_value = {"result": "ok"}
            store.destroy("temp-uploads/abc")

        destroy.assert_called_once_with("temp-uploads/abc", resource_type="image", **CREDENTIALS)

    def test_destroy_missing_object_is_ok(self, store):
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.destroy") as destroy:
            destroy.return_value = {"result": "not found"}
            store.destroy("temp-uploads/abc")

    def test_destroy_failure_raises(self, store):
        with patch("ideogram_relay.core.media_store.cloudinary.uploader.destroy") as destroy:
            destroy.side_effect = cloudinary.exceptions.Error("Rate limited")
            with pytest.raises(StoreError, match="Rate limited"):
                store.destroy("temp-uploads/abc")
