"""Pydantic request and response models for the relay API.

Required fields are declared optional here: a missing ``prompt`` or
``image_url`` must produce a 400 with a specific message (``"Prompt is
required"``), which the pipeline raises, instead of FastAPI's generic 422
validation payload.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
ReframeRequest
    Payload for ``POST /api/reframe``.
RemixRequest
    Payload (JSON or form fields) for ``POST /api/remix``.
OperationResult
    Success body shared by all three operations.
ErrorResult
    Failure body shared by all endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_ASPECT_RATIO = "1:1"


class _AspectRatioMixin(BaseModel):
    aspect_ratio: str = Field(
        default=DEFAULT_ASPECT_RATIO,
        description="Ideogram aspect ratio, e.g. '1:1' or '16:9'.",
    )

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def default_aspect_ratio(cls, value):
        # null and "" both mean "not provided"
        if value is None or value == "":
            return DEFAULT_ASPECT_RATIO
        return value


class GenerateRequest(_AspectRatioMixin):
    """Request body for ``POST /api/generate``.

    Attributes:
        prompt: Text prompt.  Required and non-empty.
        aspect_ratio: Output aspect ratio.  Defaults to ``"1:1"``.
    """

    prompt: str | None = Field(
        default=None,
        description="Text prompt (required).",
    )


class ReframeRequest(_AspectRatioMixin):
    """Request body for ``POST /api/reframe``.

    Attributes:
        image_url: URL of the image to reframe.  Required and non-empty.
        aspect_ratio: Target aspect ratio.  Defaults to ``"1:1"``.
    """

    image_url: str | None = Field(
        default=None,
        description="URL of the image to reframe (required).",
    )


class RemixRequest(_AspectRatioMixin):
    """Request fields for ``POST /api/remix``.

    The image source is either a multipart ``image`` file (handled by the
    route, not part of this model) or ``image_url``.

    Attributes:
        image_url: URL of the source image.  Ignored when a file is posted.
        prompt: Remix prompt.  Required and non-empty.
        aspect_ratio: Output aspect ratio.  Defaults to ``"1:1"``.
    """

    image_url: str | None = Field(
        default=None,
        description="URL of the source image (when no file is uploaded).",
    )
    prompt: str | None = Field(
        default=None,
        description="Remix prompt (required).",
    )


class OperationResult(BaseModel):
    """Success body for generate, reframe and remix."""

    success: bool = True
    original_url: str = Field(..., description="Image URL returned by Ideogram.")
    cloudinary_url: str = Field(..., description="Secure URL of the stored PNG.")
    public_id: str = Field(..., description="Media store identifier of the stored PNG.")


class ErrorResult(BaseModel):
    """Failure body for every endpoint."""

    error: str
