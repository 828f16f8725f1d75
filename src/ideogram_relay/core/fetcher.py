"""Download of generated images from the generation service's CDN."""

from __future__ import annotations

import logging

import requests

from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.errors import FetchError
from ideogram_relay.core.http_session import stateless_session

logger = logging.getLogger(__name__)


class ImageFetcher:
    """Fetches raw image bytes over HTTP.

    Args:
        config: Relay configuration (only ``request_timeout`` is read).
        session: Optional ``requests.Session`` to reuse; a new one is
            created when omitted.  Sessions created here never keep cookies.
    """

    def __init__(self, config: RelayConfig, session: requests.Session | None = None) -> None:
        self._timeout = config.request_timeout
        self._session = session or stateless_session()

    def fetch(self, url: str) -> bytes:
        """Return the body at ``url``.

        Raises:
            FetchError: On transport failure, a non-2xx status, or an empty
                body.
        """
        logger.debug("Downloading image from %s", url)
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Failed to download image: {exc}") from exc

        if not response.content:
            raise FetchError(f"Downloaded image is empty: {url}")
        return response.content
