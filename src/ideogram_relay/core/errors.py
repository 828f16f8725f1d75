"""Error taxonomy for the relay pipeline.

Every failure a request can hit is one of the :class:`RelayError` subclasses
below.  Each carries the HTTP status it maps to, so the API layer can turn
any of them into an ``{"error": message}`` response with a single handler.

==================  ======  =============================================
Exception           Status  Raised when
==================  ======  =============================================
ValidationError     400     A required request field is missing
UpstreamError       500     The generation service errors or returns
                            no image
FetchError          500     The generated image cannot be downloaded
TranscodeError      500     The downloaded bytes are not a decodable image
StoreError          500     The media store rejects an upload
==================  ======  =============================================

The message is exposed to the caller verbatim.
"""


class RelayError(Exception):
    """Base class for all pipeline failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RelayError):
    """A required request field is missing or empty.

    The message is intended to be displayed directly to the user.
    """

    status_code = 400


class UpstreamError(RelayError):
    """The generation service failed or returned no usable image."""


class FetchError(RelayError):
    """The generated image could not be downloaded."""


class TranscodeError(RelayError):
    """The downloaded bytes could not be decoded as an image."""


class StoreError(RelayError):
    """The media store rejected an upload."""
