"""
Pagination controller for incrementally loaded collections.

Owns the accumulated items plus loading, paging and error state, sequences page
fetches, and makes superseded fetches invisible through cancellation tokens.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from pagefeed.clients.cancellation import CancellationToken
from pagefeed.clients.errors import FetchCancelledError, FetchError
from pagefeed.clients.fetch_client import FetchClient
from pagefeed.config import Settings, settings as default_settings
from pagefeed.constants import ERROR_UNEXPECTED, FIRST_PAGE
from pagefeed.schemas import ControllerSnapshot, Item, PageRequest

StateListener = Callable[[ControllerSnapshot], None]


@dataclass
class ControllerState:
    """Mutable pagination state. Only the owning controller writes it."""

    items: list[Item] = field(default_factory=list)
    current_page: int = FIRST_PAGE
    has_more: bool = True
    is_loading: bool = False
    is_paging: bool = False
    last_error: Optional[str] = None
    active_token: Optional[CancellationToken] = None

    def reset(self) -> None:
        """Return to the initial page shape (errors and flags untouched)."""
        self.items = []
        self.current_page = FIRST_PAGE
        self.has_more = True

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            items=tuple(self.items),
            current_page=self.current_page,
            has_more=self.has_more,
            is_loading=self.is_loading,
            is_paging=self.is_paging,
            last_error=self.last_error,
        )


class PaginationController:
    """
    Drive page-by-page loading of one collection.

    All operations must be called from the event loop that owns the controller;
    fetches run as tasks on that loop and apply their results there. Every
    operation that starts a fetch first cancels the active one, so at most one
    fetch can change state. A completion whose token is no longer active is
    discarded.

    Presentation code either reads ``state`` or registers a listener with
    ``subscribe()`` and calls:

    - ``load()`` on mount
    - ``refresh()`` on pull-to-refresh
    - ``load_more()`` from an explicit control
    - ``load_more_if_needed(item)`` whenever a row appears
    """

    def __init__(
        self,
        fetch_client: Optional[FetchClient] = None,
        resource: Optional[str] = None,
        page_size: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize pagination controller.

        Args:
            fetch_client: Page fetcher (default: a FetchClient built from settings,
                closed together with the controller)
            resource: Collection name (default: settings.default_resource)
            page_size: Items per page (default: settings.page_size)
            logger: Logger for fetch lifecycle events (default: module logger)
            settings: Settings to read defaults from (default: global settings)
        """
        cfg = settings or default_settings

        self._owns_client = fetch_client is None
        self.fetch_client = fetch_client or FetchClient(settings=cfg)
        self.resource = resource or cfg.default_resource
        self.page_size = cfg.page_size if page_size is None else page_size
        self.logger = logger or logging.getLogger(__name__)

        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

        self._state = ControllerState()
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[StateListener] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed = False

    # ========================================================================
    # Observable State
    # ========================================================================

    @property
    def state(self) -> ControllerSnapshot:
        """Current state as an immutable snapshot."""
        return self._state.snapshot()

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._state.items)

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @property
    def has_more(self) -> bool:
        return self._state.has_more

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_paging(self) -> bool:
        return self._state.is_paging

    @property
    def last_error(self) -> Optional[str]:
        return self._state.last_error

    @property
    def is_fetching(self) -> bool:
        """Whether a fetch is logically in flight."""
        return self._state.active_token is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every state change.

        Args:
            listener: Callable receiving a ControllerSnapshot

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ========================================================================
    # Public Operations
    # ========================================================================

    def load(self) -> asyncio.Task:
        """Load the first page, discarding anything loaded before."""
        return self._load_first_page("load")

    def refresh(self) -> asyncio.Task:
        """Restart from page 1 (pull-to-refresh)."""
        return self._load_first_page("refresh")

    def load_more(self) -> Optional[asyncio.Task]:
        """
        Append the next page.

        Only starts from idle: while a page is being loaded the call is
        ignored, so pages are always appended in order without gaps.

        Returns:
            Task running the fetch, or None when no more pages exist or a
            fetch is already in flight
        """
        self._check_owner()

        if not self._state.has_more:
            self.logger.debug("load_more ignored: no more pages")
            return None
        if self._state.is_loading or self._state.is_paging:
            self.logger.debug("load_more ignored: fetch already in flight")
            return None

        self._cancel_active()
        self._state.current_page += 1
        return self._start_fetch(self._state.current_page, replace=False)

    def load_more_if_needed(self, reference_item: Optional[Item]) -> Optional[asyncio.Task]:
        """
        Append the next page when the trailing row becomes visible.

        Only the last loaded item triggers pagination, and only while idle.

        Args:
            reference_item: Item whose row just appeared

        Returns:
            Task running the fetch, or None when nothing was started
        """
        self._check_owner()
        state = self._state

        if not state.has_more or state.is_loading or state.is_paging:
            return None
        if reference_item is None or not state.items:
            return None
        if reference_item.id != state.items[-1].id:
            return None

        return self.load_more()

    # ========================================================================
    # Fetch Sequencing
    # ========================================================================

    def _load_first_page(self, reason: str) -> asyncio.Task:
        self._check_owner()
        self._cancel_active()
        self._state.reset()
        self.logger.debug(f"{reason}: restarting from page {FIRST_PAGE}")
        return self._start_fetch(FIRST_PAGE, replace=True)

    def _cancel_active(self) -> None:
        token = self._state.active_token
        if token is None:
            return

        token.cancel()
        self._state.active_token = None
        self._state.is_loading = False
        self._state.is_paging = False
        self.logger.debug(f"Superseded {token}")

    def _start_fetch(self, page: int, replace: bool) -> asyncio.Task:
        token = CancellationToken(label=f"page {page}")

        self._state.active_token = token
        self._state.is_loading = replace
        self._state.is_paging = not replace
        self._notify()

        task = self._loop.create_task(self._run_fetch(page, replace, token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_fetch(self, page: int, replace: bool, token: CancellationToken) -> None:
        request = PageRequest(page_index=page, page_size=self.page_size)
        self.logger.debug(f"📄 Fetching page {page} • replace={replace}")

        try:
            items = await self.fetch_client.fetch_page(self.resource, request, token)
        except FetchCancelledError:
            self.logger.debug(f"⏹️ Canceled page {page}")
            if self._is_active(token):
                self._finish()
            return
        except FetchError as e:
            self._fail(token, str(e))
            return
        except Exception as e:
            self.logger.exception(f"Unexpected failure fetching page {page} of '{self.resource}'")
            self._fail(token, ERROR_UNEXPECTED.format(cause=e))
            return

        self._succeed(token, items, replace)

    def _is_active(self, token: CancellationToken) -> bool:
        return token is self._state.active_token and not token.cancelled

    def _succeed(self, token: CancellationToken, items: list[Item], replace: bool) -> None:
        if not self._is_active(token):
            self.logger.debug(f"Ignoring result of superseded {token}")
            return

        state = self._state
        state.last_error = None
        if replace:
            state.items = list(items)
        else:
            state.items.extend(items)

        # A short page means the collection is exhausted
        state.has_more = len(items) == self.page_size

        self.logger.debug(
            f"✅ Loaded {len(items)} items (total {len(state.items)}) • has_more={state.has_more}"
        )
        self._finish()

    def _fail(self, token: CancellationToken, message: str) -> None:
        if not self._is_active(token):
            self.logger.debug(f"Ignoring failure of superseded {token}: {message}")
            return

        self._state.last_error = message
        self.logger.warning(f"Fetching '{self.resource}' page {self._state.current_page} failed: {message}")
        self._finish()

    def _finish(self) -> None:
        self._state.is_loading = False
        self._state.is_paging = False
        self._state.active_token = None
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return

        snapshot = self._state.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self.logger.exception(f"State listener {listener!r} failed")

    def _check_owner(self) -> None:
        if self._closed:
            raise RuntimeError("PaginationController is closed")

        loop = asyncio.get_running_loop()
        if self._loop is None:
            self._loop = loop
        elif loop is not self._loop:
            raise RuntimeError("PaginationController used from a different event loop")

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def close(self) -> None:
        """Cancel any in-flight fetch and release resources."""
        if self._closed:
            return
        self._closed = True

        was_fetching = self._state.active_token is not None
        self._cancel_active()
        if was_fetching:
            self._notify()

        # Superseded fetches may still be unwinding their requests
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._listeners.clear()

        if self._owns_client:
            await self.fetch_client.close()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
