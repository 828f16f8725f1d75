"""HTTP session factory shared by the outbound clients."""

from __future__ import annotations

from http.cookiejar import DefaultCookiePolicy

import requests


def stateless_session() -> requests.Session:
    """Return a ``requests.Session`` that never stores cookies.

    The session pools connections across requests, but no ``Set-Cookie``
    from one response is ever replayed on a later, unrelated request.
    """
    session = requests.Session()
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session
