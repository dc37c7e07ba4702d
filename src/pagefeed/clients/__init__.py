"""
HTTP clients for remote collections.

Provides the typed page fetcher, its failure taxonomy, and cancellation tokens.
"""

from pagefeed.clients.cancellation import CancellationToken
from pagefeed.clients.errors import (
    DecodingError,
    FetchCancelledError,
    FetchError,
    HttpStatusError,
    InvalidRequestError,
    TransportError,
)
from pagefeed.clients.fetch_client import FetchClient

__all__ = [
    "CancellationToken",
    "DecodingError",
    "FetchCancelledError",
    "FetchClient",
    "FetchError",
    "HttpStatusError",
    "InvalidRequestError",
    "TransportError",
]
