"""Cooperative cancellation for view fetches.

Each fetch cycle owns one :class:`CancellationToken`.  Starting a new
cycle cancels the previous token; transports observe the token and give
up with :class:`~liveplaya.exceptions.FetchCancelledError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from liveplaya.exceptions import FetchCancelledError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation signal.

    Cancelling is idempotent and never blocks.  The token does not need
    a running event loop until :meth:`wait` or :meth:`run` is awaited.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: asyncio.Event | None = None

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self._cancelled}>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise FetchCancelledError("fetch cancelled")

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    async def run(self, aw: Awaitable[T]) -> T:
        """Await *aw* unless the token fires first.

        If the token is cancelled before *aw* completes, *aw* is cancelled
        and :class:`FetchCancelledError` is raised.  If *aw* finishes first
        its result (or exception) is returned as usual.
        """
        self.raise_if_cancelled()
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
        if task.done() and not task.cancelled():
            return task.result()
        _logger.debug("Abandoning awaitable after cancellation")
        raise FetchCancelledError("fetch cancelled")
