"""Cooperative cancellation handles for in-flight fetches."""

import asyncio
import itertools

from pagefeed.clients.errors import FetchCancelledError

_token_ids = itertools.count(1)


class CancellationToken:
    """
    Opaque handle identifying one fetch.

    The owner calls ``cancel()``; the fetch checks ``cancelled`` (or awaits
    ``wait()``) and stops without touching shared state. Tokens are single
    use: once cancelled they stay cancelled.
    """

    def __init__(self, label: str = ""):
        self.id = next(_token_ids)
        self.label = label
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise FetchCancelledError(f"Fetch {self} was cancelled")

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        label = f" {self.label}" if self.label else ""
        return f"<CancellationToken #{self.id}{label} {state}>"
