"""
Typed page fetcher for remote collection endpoints.

Issues one GET per page with httpx and returns decoded items, classifying every
failure into the FetchError taxonomy. Supports cooperative cancellation through
a CancellationToken.
"""

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from pagefeed.clients.cancellation import CancellationToken
from pagefeed.clients.errors import (
    DecodingError,
    FetchCancelledError,
    HttpStatusError,
    InvalidRequestError,
    TransportError,
)
from pagefeed.config import Settings, settings as default_settings
from pagefeed.constants import PAYLOAD_LOG_LIMIT
from pagefeed.schemas import Item, ItemList, PageRequest

logger = logging.getLogger(__name__)

_FORBIDDEN_RESOURCE_CHARS = set("?#")


class FetchClient:
    """
    HTTP client for paginated collection resources.

    Features:
    - Async HTTP client with a fixed per-request timeout
    - Page index and size sent as query parameters
    - Classified failures (invalid request, HTTP status, decoding, transport)
    - Cooperative cancellation before and after the network call
    - No retries
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_param: Optional[str] = None,
        limit_param: Optional[str] = None,
        error_body_limit: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize fetch client.

        Args:
            base_url: API base URL (default: settings.api_base_url)
            timeout: Request timeout in seconds (default: settings.request_timeout_seconds)
            page_param: Query parameter for the page index (default: settings.page_param)
            limit_param: Query parameter for the page size (default: settings.limit_param)
            error_body_limit: Max characters of an error body kept (default: settings.error_body_limit)
            client: Pre-built httpx client; not closed by close()
            settings: Settings to read defaults from (default: global settings)
        """
        cfg = settings or default_settings

        self.base_url = (base_url or cfg.api_base_url).rstrip("/")
        self.timeout = cfg.request_timeout_seconds if timeout is None else timeout
        self.page_param = page_param or cfg.page_param
        self.limit_param = limit_param or cfg.limit_param
        self.error_body_limit = (
            cfg.error_body_limit if error_body_limit is None else error_body_limit
        )
        self.headers = {
            "User-Agent": cfg.user_agent,
            "Accept": "application/json",
        }

        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.page_param == self.limit_param:
            raise ValueError("page_param and limit_param must differ")

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=self.headers,
            follow_redirects=True,
        )

    # ========================================================================
    # Request Construction
    # ========================================================================

    def build_url(self, resource: str) -> str:
        """
        Build the absolute collection URL for a resource name.

        Raises:
            InvalidRequestError: If the resource is empty or not a plain path
        """
        if not isinstance(resource, str):
            raise InvalidRequestError(f"resource must be a string, got {type(resource).__name__}")

        path = resource.strip().strip("/")
        if not path:
            raise InvalidRequestError("resource must be a non-empty path")
        if any(ch.isspace() for ch in path) or _FORBIDDEN_RESOURCE_CHARS & set(path):
            raise InvalidRequestError(f"resource is not a plain path: {resource!r}")

        return f"{self.base_url}/{path}"

    def build_params(self, request: PageRequest) -> dict[str, int]:
        """Encode a page request as query parameters."""
        if not isinstance(request, PageRequest):
            raise InvalidRequestError(
                f"expected PageRequest, got {type(request).__name__}"
            )
        return {
            self.page_param: request.page_index,
            self.limit_param: request.page_size,
        }

    # ========================================================================
    # Fetching
    # ========================================================================

    async def fetch_page(
        self,
        resource: str,
        request: PageRequest,
        token: Optional[CancellationToken] = None,
    ) -> list[Item]:
        """
        Fetch and decode one page of a collection.

        Args:
            resource: Collection name (e.g., "posts")
            request: Page index and size
            token: Cancellation handle owned by the caller

        Returns:
            Items in server order

        Raises:
            InvalidRequestError: Resource or request could not be encoded
            HttpStatusError: Non-2xx response
            DecodingError: Payload is not a list of items
            TransportError: Connection-level failure or timeout
            FetchCancelledError: Token was cancelled before or during the call
        """
        if token is not None:
            token.raise_if_cancelled()

        url = self.build_url(resource)
        params = self.build_params(request)

        logger.debug(f"➡️ GET {url} params={params}")

        response = await self._await_response(url, params, token)

        # The caller may have moved on while the response was in transit
        if token is not None:
            token.raise_if_cancelled()

        logger.debug(
            f"⬅️ Status {response.status_code} • bytes {len(response.content)}"
        )

        if not response.is_success:
            body = self._excerpt(response.text)
            logger.warning(
                f"GET {url} failed: HTTP {response.status_code} body: {body or '<no body>'}"
            )
            raise HttpStatusError(response.status_code, body)

        return self._decode(response)

    async def _await_response(
        self,
        url: str,
        params: dict[str, int],
        token: Optional[CancellationToken],
    ) -> httpx.Response:
        """Run the request, abandoning it as soon as the token is cancelled."""
        if token is None:
            return await self._send(url, params)

        request_task = asyncio.ensure_future(self._send(url, params))
        cancel_waiter = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {request_task, cancel_waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_waiter.cancel()
            if not request_task.done():
                request_task.cancel()

        if request_task in done:
            return request_task.result()

        logger.debug(f"⏹️ Abandoned GET {url} ({token})")
        raise FetchCancelledError(f"Fetch {token} was cancelled")

    async def _send(self, url: str, params: dict[str, int]) -> httpx.Response:
        try:
            return await self.client.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidRequestError(str(e), e) from e
        except httpx.RequestError as e:
            logger.warning(f"🔌 Transport error for GET {url}: {e!r}")
            raise TransportError(e) from e

    def _decode(self, response: httpx.Response) -> list[Item]:
        try:
            payload = response.json()
        except ValueError as e:
            logger.debug(f"🟠 Decoding failed: {e}. Payload: {response.text[:PAYLOAD_LOG_LIMIT]}")
            raise DecodingError(e) from e

        try:
            return ItemList.validate_python(payload)
        except ValidationError as e:
            logger.debug(f"🟠 Decoding failed: {e}. Payload: {response.text[:PAYLOAD_LOG_LIMIT]}")
            raise DecodingError(e) from e

    def _excerpt(self, text: str) -> Optional[str]:
        text = text.strip()
        if not text or self.error_body_limit == 0:
            return None
        if len(text) > self.error_body_limit:
            return text[: self.error_body_limit] + "…"
        return text

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def close(self) -> None:
        """Close HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
