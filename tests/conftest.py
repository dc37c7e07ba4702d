"""
Shared test fixtures.

Provides:
- Item factories
- A scripted fetch client whose responses are released by the test
- An in-memory collection served through httpx.MockTransport
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import httpx
import pytest

from pagefeed.clients.cancellation import CancellationToken
from pagefeed.clients.errors import FetchCancelledError
from pagefeed.schemas import Item, PageRequest


def make_items(start: int, count: int, owner_id: int = 1) -> list[Item]:
    """Build ``count`` items with consecutive ids beginning at ``start``."""
    return [
        Item(
            owner_id=owner_id,
            id=i,
            title=f"title {i}",
            body=f"body {i}",
        )
        for i in range(start, start + count)
    ]


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@dataclass
class PendingFetch:
    """One call made to ScriptedFetchClient, waiting for the test to answer."""

    resource: str
    request: PageRequest
    token: Optional[CancellationToken]
    future: asyncio.Future = field(repr=False)

    def resolve(self, items: list[Item]) -> None:
        self.future.set_result(items)

    def fail(self, error: BaseException) -> None:
        self.future.set_exception(error)


class ScriptedFetchClient:
    """
    Stand-in for FetchClient.

    Each fetch_page call parks until the test resolves it. With
    ``honor_cancellation=False`` the token is ignored, which reproduces a
    completion racing past cancellation.
    """

    def __init__(self, honor_cancellation: bool = True):
        self.honor_cancellation = honor_cancellation
        self.calls: list[PendingFetch] = []
        self.closed = False

    @property
    def pages(self) -> list[int]:
        return [call.request.page_index for call in self.calls]

    async def fetch_page(self, resource, request, token=None):
        pending = PendingFetch(
            resource=resource,
            request=request,
            token=token,
            future=asyncio.get_running_loop().create_future(),
        )
        self.calls.append(pending)

        if not self.honor_cancellation or token is None:
            return await pending.future

        waiter = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {pending.future, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            waiter.cancel()
        if pending.future in done:
            return pending.future.result()
        raise FetchCancelledError(f"{token} cancelled")

    async def close(self):
        self.closed = True


@pytest.fixture
def scripted_client():
    """Fetch client that honors cancellation tokens."""
    return ScriptedFetchClient()


@pytest.fixture
def racing_client():
    """Fetch client whose completions ignore cancellation."""
    return ScriptedFetchClient(honor_cancellation=False)


def collection_handler(total: int, page_param: str = "_page", limit_param: str = "_limit"):
    """
    Build a MockTransport handler serving ``total`` posts with 1-based paging.

    Records every request on ``handler.requests``.
    """
    posts = [
        {"userId": 1 + i // 10, "id": i + 1, "title": f"title {i + 1}", "body": f"body {i + 1}"}
        for i in range(total)
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        handler.requests.append(request)
        page = int(request.url.params.get(page_param, "1"))
        limit = int(request.url.params.get(limit_param, "10"))
        start = (page - 1) * limit
        return httpx.Response(200, json=posts[start : start + limit])

    handler.requests = []
    return handler
