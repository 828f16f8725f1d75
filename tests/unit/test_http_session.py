"""Tests for ideogram_relay.core.http_session: cookie-free sessions."""

from __future__ import annotations

import urllib.request
from email.message import Message
from unittest.mock import MagicMock

from ideogram_relay.core.fetcher import ImageFetcher
from ideogram_relay.core.http_session import stateless_session
from ideogram_relay.core.ideogram_client import IdeogramClient


def _set_cookie_response(value: str) -> MagicMock:
    """Build a urllib-style response carrying a ``Set-Cookie`` header."""
    headers = Message()
    headers["Set-Cookie"] = value
    response = MagicMock()
    response.info.return_value = headers
    return response


class TestStatelessSession:
    def test_set_cookie_is_not_stored(self):
        session = stateless_session()
        first = urllib.request.Request("https://cdn.example.com/a.jpeg")

        session.cookies.extract_cookies(_set_cookie_response("tenant=alice; Path=/"), first)

        assert len(session.cookies) == 0

    def test_later_request_carries_no_cookie(self):
        session = stateless_session()
        first = urllib.request.Request("https://cdn.example.com/a.jpeg")
        second = urllib.request.Request("https://cdn.example.com/b.jpeg")

        session.cookies.extract_cookies(_set_cookie_response("tenant=alice; Path=/"), first)
        session.cookies.add_cookie_header(second)

        assert not second.has_header("Cookie")

    def test_fetcher_default_session_refuses_cookies(self, relay_config):
        fetcher = ImageFetcher(relay_config)
        assert fetcher._session.cookies.get_policy().allowed_domains() == ()

    def test_ideogram_client_default_session_refuses_cookies(self, relay_config):
        client = IdeogramClient(relay_config)
        assert client._session.cookies.get_policy().allowed_domains() == ()
