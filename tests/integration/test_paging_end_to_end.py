"""
End-to-end paging against an in-memory collection.

Wires a real FetchClient (over httpx.MockTransport) into a
PaginationController and drives it the way a list screen would.

Run with: pytest tests/integration -v
"""

import httpx
import pytest

from pagefeed.clients.fetch_client import FetchClient
from pagefeed.services.pagination import PaginationController
from pagefeed.services.view_state import ViewPhase, resolve_view

from tests.conftest import collection_handler

BASE_URL = "https://api.test"


@pytest.fixture
async def build_controller():
    """Factory for controllers over a MockTransport; closes everything it built."""
    built: list[tuple[PaginationController, httpx.AsyncClient]] = []

    def factory(handler, page_size=20) -> PaginationController:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetch_client = FetchClient(base_url=BASE_URL, client=http)
        controller = PaginationController(
            fetch_client=fetch_client, resource="posts", page_size=page_size
        )
        built.append((controller, http))
        return controller

    yield factory

    for controller, http in built:
        await controller.close()
        await http.aclose()


@pytest.mark.asyncio
async def test_scroll_to_end_of_collection(build_controller):
    handler = collection_handler(total=45)
    controller = build_controller(handler)

    await controller.load()
    assert len(controller.items) == 20
    assert controller.has_more is True

    # Rows appear one by one; only the trailing row starts the next page
    for item in controller.items:
        task = controller.load_more_if_needed(item)
        if task is not None:
            await task
            break

    assert len(controller.items) == 40

    await controller.load_more_if_needed(controller.items[-1])

    assert len(controller.items) == 45
    assert controller.has_more is False
    assert [item.id for item in controller.items] == list(range(1, 46))
    assert [r.url.params["_page"] for r in handler.requests] == ["1", "2", "3"]
    assert controller.load_more_if_needed(controller.items[-1]) is None

    await controller.close()


@pytest.mark.asyncio
async def test_refresh_after_exhausting_collection(build_controller):
    handler = collection_handler(total=5)
    controller = build_controller(handler)

    await controller.load()
    assert controller.has_more is False

    await controller.refresh()

    assert len(controller.items) == 5
    assert controller.current_page == 1
    assert [r.url.params["_page"] for r in handler.requests] == ["1", "1"]


@pytest.mark.asyncio
async def test_server_error_then_retry(build_controller):
    healthy = collection_handler(total=30)
    failures = {"remaining": 1}

    def handler(request):
        if request.url.params["_page"] == "2" and failures["remaining"]:
            failures["remaining"] -= 1
            return httpx.Response(500, text="Internal Server Error")
        return healthy(request)

    controller = build_controller(handler)

    await controller.load()
    await controller.load_more()

    assert len(controller.items) == 20
    assert controller.last_error == "Server returned HTTP 500 • Internal Server Error"
    view = resolve_view(controller.state)
    assert view.phase == ViewPhase.CONTENT
    assert view.inline_error == controller.last_error

    # Full reload clears the error and starts over
    await controller.refresh()

    assert controller.last_error is None
    assert len(controller.items) == 20


@pytest.mark.asyncio
async def test_initial_failure_offers_retry(build_controller):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    controller = build_controller(handler)

    await controller.load()

    view = resolve_view(controller.state)
    assert view.phase == ViewPhase.ERROR
    assert view.show_retry is True
    assert view.error == "Network error: connection refused"
