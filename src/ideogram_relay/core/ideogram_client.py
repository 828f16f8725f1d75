"""HTTP client for the Ideogram image-generation API.

Processing flow:
    1. Build the JSON body for the requested operation.
    2. POST it to ``{ideogram_base_url}/{operation}`` with the configured
       bearer credential.
    3. Return the parsed JSON response or raise :class:`UpstreamError`.

Error handling strategy:
    - Transport failures, non-2xx statuses and non-JSON bodies all raise
      ``UpstreamError``.
    - The upstream's own message is passed through when the error body
      carries one (``error``, ``message`` or ``detail``), otherwise the raw
      response text is used.
    - No retries and no rate-limit handling: the first failure is final.

Response shapes are returned untouched; extracting the image reference is
the pipeline's job, since ``reframe`` answers with a single ``image`` while
``generate`` and ``remix`` answer with an ``images`` list.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.errors import UpstreamError
from ideogram_relay.core.http_session import stateless_session

logger = logging.getLogger(__name__)


def _error_message(response: requests.Response) -> str:
    """Pick the most useful message out of a failed upstream response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]

    text = response.text.strip()
    return text or f"Ideogram request failed with status {response.status_code}"


class IdeogramClient:
    """Thin wrapper over the three Ideogram operations.

    Args:
        config: Relay configuration providing ``ideogram_api_key``,
            ``ideogram_base_url`` and ``request_timeout``.
        session: Optional ``requests.Session`` to reuse.
    """

    def __init__(self, config: RelayConfig, session: requests.Session | None = None) -> None:
        self._base_url = config.ideogram_base_url.rstrip("/")
        self._api_key = config.ideogram_api_key
        self._timeout = config.request_timeout
        self._session = session or stateless_session()

    # -- Public interface ---------------------------------------------------

    def generate(self, prompt: str, aspect_ratio: str) -> dict[str, Any]:
        """Generate images from a text prompt."""
        return self._post("generate", {"prompt": prompt, "aspect_ratio": aspect_ratio})

    def reframe(self, image_url: str, aspect_ratio: str) -> dict[str, Any]:
        """Reframe an existing image to a new aspect ratio."""
        return self._post("reframe", {"image_url": image_url, "aspect_ratio": aspect_ratio})

    def remix(self, image_url: str, prompt: str, aspect_ratio: str) -> dict[str, Any]:
        """Remix an existing image guided by a prompt."""
        return self._post(
            "remix",
            {"image_url": image_url, "prompt": prompt, "aspect_ratio": aspect_ratio},
        )

    # -- Internals ----------------------------------------------------------

    def _post(self, operation: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}/{operation}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        logger.info("Calling Ideogram %s", operation)
        try:
            response = self._session.post(url, json=payload, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise UpstreamError(str(exc)) from exc

        if not response.ok:
            message = _error_message(response)
            logger.warning("Ideogram %s returned %d: %s", operation, response.status_code, message)
            raise UpstreamError(message)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Ideogram {operation} returned a malformed response") from exc

        if not isinstance(data, dict):
            raise UpstreamError(f"Ideogram {operation} returned a malformed response")
        return data
