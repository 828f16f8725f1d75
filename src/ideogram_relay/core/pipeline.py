"""Request orchestration for the relay.

This module provides :class:`RelayPipeline`, the single place where a
request becomes a stored image.  Every operation runs the same stages:

    validate -> generate -> extract -> fetch -> transcode -> store

What differs between ``generate``, ``reframe`` and ``remix`` is captured in
an :class:`OperationPolicy`: which field is required, which Ideogram call to
make, where the image reference lives in the reply, and which folder the
result is stored under.  ``remix`` adds one pre-step: a file posted by the
client is first uploaded to ``temp-uploads`` so the generation service can
read it by URL.

Every stage raises a :class:`~ideogram_relay.core.errors.RelayError`
subclass on failure, and the first failure ends the request.  Nothing is
retried and nothing already uploaded is rolled back, with one optional
exception: when ``cleanup_temp_uploads`` is enabled the remix temporary
upload is destroyed once the pipeline finishes.

Usage
-----
::

    from ideogram_relay.core.config import RelayConfig
    from ideogram_relay.core.pipeline import RelayPipeline

    pipeline = RelayPipeline.from_config(RelayConfig())
    result = pipeline.generate(GenerateRequest(prompt="a red fox"))
    print(result.cloudinary_url)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ideogram_relay.api.models import (
    GenerateRequest,
    OperationResult,
    ReframeRequest,
    RemixRequest,
)
from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.errors import StoreError, UpstreamError, ValidationError
from ideogram_relay.core.fetcher import ImageFetcher
from ideogram_relay.core.ideogram_client import IdeogramClient
from ideogram_relay.core.media_store import MediaStore, StoredMedia
from ideogram_relay.core.transcoder import transcode_to_png

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "png"
TEMP_FOLDER = "temp-uploads"

# ---------------------------------------------------------------------------
# Validation rules.
# ---------------------------------------------------------------------------


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def _require_prompt(req: GenerateRequest | RemixRequest) -> None:
    if _is_blank(req.prompt):
        raise ValidationError("Prompt is required")


def _require_image_url(req: ReframeRequest) -> None:
    if _is_blank(req.image_url):
        raise ValidationError("Image URL is required")


def _require_remix_inputs(req: RemixRequest, upload: bytes | None = None) -> None:
    if not upload and _is_blank(req.image_url):
        raise ValidationError("Image (file or URL) is required")
    _require_prompt(req)


# ---------------------------------------------------------------------------
# Response extraction rules.
# ---------------------------------------------------------------------------


def _first_image(response: dict[str, Any]) -> str | None:
    """Return the first entry of an ``images`` list (generate, remix)."""
    images = response.get("images")
    if not isinstance(images, list) or not images:
        return None
    first = images[0]
    return first if isinstance(first, str) and first else None


def _single_image(response: dict[str, Any]) -> str | None:
    """Return the lone ``image`` reference (reframe)."""
    image = response.get("image")
    return image if isinstance(image, str) and image else None


# ---------------------------------------------------------------------------
# Per-operation policies.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperationPolicy:
    """Everything that distinguishes one pipeline variant from another.

    Attributes:
        name: Operation name used in log messages.
        validate: Raises ``ValidationError`` when the request is incomplete.
        invoke: Performs the generation call and returns the raw reply.
        extract: Pulls the generated image URL out of the reply, or returns
            ``None`` when there is none.
        folder: Media store folder for the final image.
        failure_message: Message of the ``UpstreamError`` raised when the
            reply carries no image.
    """

    name: str
    validate: Callable[[Any], None]
    invoke: Callable[[IdeogramClient, Any], dict[str, Any]]
    extract: Callable[[dict[str, Any]], str | None]
    folder: str
    failure_message: str


GENERATE = OperationPolicy(
    name="generate",
    validate=_require_prompt,
    invoke=lambda client, req: client.generate(req.prompt, req.aspect_ratio),
    extract=_first_image,
    folder="ideogram-images",
    failure_message="Failed to generate image",
)

REFRAME = OperationPolicy(
    name="reframe",
    validate=_require_image_url,
    invoke=lambda client, req: client.reframe(req.image_url, req.aspect_ratio),
    extract=_single_image,
    folder="ideogram-reframed",
    failure_message="Failed to reframe image",
)

REMIX = OperationPolicy(
    name="remix",
    validate=_require_remix_inputs,
    invoke=lambda client, req: client.remix(req.image_url, req.prompt, req.aspect_ratio),
    extract=_first_image,
    folder="ideogram-remixed",
    failure_message="Failed to remix image",
)


class RelayPipeline:
    """Runs generate/reframe/remix requests end to end.

    The pipeline holds no per-request state, so one instance serves all
    concurrent requests.

    Args:
        client: Generation service client.
        fetcher: Downloads the generated image.
        store: Media store client.
        transcode: Converts downloaded bytes to the output format.
        cleanup_temp_uploads: Destroy the remix temporary upload once the
            pipeline finishes.
    """

    def __init__(
        self,
        client: IdeogramClient,
        fetcher: ImageFetcher,
        store: MediaStore,
        transcode: Callable[[bytes], bytes] = transcode_to_png,
        cleanup_temp_uploads: bool = False,
    ) -> None:
        self._client = client
        self._fetcher = fetcher
        self._store = store
        self._transcode = transcode
        self._cleanup_temp_uploads = cleanup_temp_uploads

    @classmethod
    def from_config(cls, config: RelayConfig) -> RelayPipeline:
        """Build a pipeline wired to the real Ideogram and Cloudinary clients."""
        return cls(
            client=IdeogramClient(config),
            fetcher=ImageFetcher(config),
            store=MediaStore(config),
            cleanup_temp_uploads=config.cleanup_temp_uploads,
        )

    # -- Operations ---------------------------------------------------------

    def generate(self, req: GenerateRequest) -> OperationResult:
        """Generate an image from ``req.prompt`` and store it."""
        return self._run(GENERATE, req)

    def reframe(self, req: ReframeRequest) -> OperationResult:
        """Reframe the image at ``req.image_url`` and store the result."""
        return self._run(REFRAME, req)

    def remix(self, req: RemixRequest, upload: bytes | None = None) -> OperationResult:
        """Remix an uploaded file or ``req.image_url`` and store the result.

        When ``upload`` is given it takes precedence over ``req.image_url``
        and is stored under ``temp-uploads`` first.  Both the image source
        and the prompt are validated before anything is uploaded.
        """
        _require_remix_inputs(req, upload)

        temp: StoredMedia | None = None
        if upload:
            logger.info("Uploading %d byte remix source to %s", len(upload), TEMP_FOLDER)
            temp = self._store.upload(upload, folder=TEMP_FOLDER)
            req = req.model_copy(update={"image_url": temp.secure_url})

        try:
            return self._run(REMIX, req)
        finally:
            if temp is not None and self._cleanup_temp_uploads:
                self._discard(temp)

    # -- Internals ----------------------------------------------------------

    def _run(self, policy: OperationPolicy, req: Any) -> OperationResult:
        policy.validate(req)

        logger.info("Running %s pipeline", policy.name)
        response = policy.invoke(self._client, req)

        original_url = policy.extract(response)
        if not original_url:
            raise UpstreamError(policy.failure_message)

        raw = self._fetcher.fetch(original_url)
        normalized = self._transcode(raw)
        stored = self._store.upload(normalized, folder=policy.folder, fmt=OUTPUT_FORMAT)

        logger.info("%s pipeline stored %s", policy.name, stored.public_id)
        return OperationResult(
            original_url=original_url,
            cloudinary_url=stored.secure_url,
            public_id=stored.public_id,
        )

    def _discard(self, temp: StoredMedia) -> None:
        try:
            self._store.destroy(temp.public_id)
        except StoreError as exc:
            logger.warning("Could not delete temporary upload %s: %s", temp.public_id, exc)
