"""
Failure taxonomy for page fetches.

Every real failure raised by the fetch client is a FetchError subclass whose
``str()`` is the human-readable message surfaced to users. Cancellation is
deliberately outside that hierarchy.
"""

from pagefeed.constants import (
    ERROR_DECODING,
    ERROR_HTTP_STATUS,
    ERROR_INVALID_REQUEST,
    ERROR_TRANSPORT,
)


class FetchError(Exception):
    """Base exception for classified fetch failures."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class InvalidRequestError(FetchError):
    """Resource or query could not be turned into a valid request."""

    def __init__(self, detail: str, cause: BaseException | None = None):
        self.detail = detail
        super().__init__(ERROR_INVALID_REQUEST.format(detail=detail), cause)


class HttpStatusError(FetchError):
    """Server answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str | None = None):
        self.status_code = status_code
        self.body = body
        message = ERROR_HTTP_STATUS.format(status_code=status_code)
        if body:
            message += f" • {body}"
        super().__init__(message)


class DecodingError(FetchError):
    """Payload did not match the expected shape."""

    def __init__(self, cause: BaseException):
        super().__init__(ERROR_DECODING.format(cause=_describe(cause)), cause)


class TransportError(FetchError):
    """Connection-level failure (DNS, timeout, reset)."""

    def __init__(self, cause: BaseException):
        super().__init__(ERROR_TRANSPORT.format(cause=_describe(cause)), cause)


class FetchCancelledError(Exception):
    """The caller cancelled the fetch. Never shown to users."""

    pass


def _describe(cause: BaseException) -> str:
    # httpx timeouts are often raised with an empty message
    return str(cause) or type(cause).__name__
