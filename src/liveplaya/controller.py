"""Session controller keeping a view in sync with the backend."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from liveplaya._constants import DEFAULT_REFRESH_INTERVAL
from liveplaya._transport import HttpTransport, Transport
from liveplaya.cancellation import CancellationToken
from liveplaya.config import LiveplayaConfig
from liveplaya.exceptions import FetchCancelledError, SessionClosedError
from liveplaya.models.query import Query
from liveplaya.models.session import Alert, AlertLevel, SessionState
from liveplaya.models.view import View
from liveplaya.subscribers import Listener, SubscriberRegistry
from liveplaya.timer import LoopTimer, Timer, TimerHandle

_logger = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    """User-facing text for a failed fetch."""
    return f"Failed to fetch data: {exc}"


class SessionController:
    """Keeps a :class:`SessionState` in sync with the backend.

    Construction schedules the first fetch of the view for
    *initial_query* and, when *refresh_interval* is positive, refreshes
    it every *refresh_interval* seconds.  Only the most recently started
    fetch may ever update the state: starting a fetch cancels the one
    before it, and a cancelled fetch's outcome is discarded.

    Must be constructed while an event loop is running.

    Usage::

        async with SessionController(transport, Query(zoom=12)) as ctl:
            unsubscribe = ctl.subscribe(lambda: render(ctl.state))
            ctl.set_query(Query(zoom=14))
    """

    def __init__(
        self,
        transport: Transport,
        initial_query: Query | None = None,
        refresh_interval: float | None = DEFAULT_REFRESH_INTERVAL,
        *,
        timer: Timer | None = None,
    ) -> None:
        if refresh_interval is not None and refresh_interval < 0:
            raise ValueError(f"refresh_interval must be >= 0, got {refresh_interval}")
        self._loop = asyncio.get_running_loop()
        self._transport = transport
        self._state = SessionState(is_loading=True, query=initial_query if initial_query is not None else Query())
        self._subscribers = SubscriberRegistry()
        self._token: CancellationToken | None = None
        self._task: asyncio.Task[None] | None = None
        self._timer_handle: TimerHandle | None = None
        self._pending_start: asyncio.Handle | None = None
        self._closed = False

        _logger.debug("Creating session for %r", self._state.query)

        # Started on the next loop iteration so that listeners subscribed
        # right after construction see the first loading transition.
        self._pending_start = self._loop.call_soon(self._fetch_and_notify)
        if refresh_interval:
            self._timer_handle = (timer or LoopTimer(self._loop)).call_every(
                refresh_interval,
                self._on_timer,
            )

    @classmethod
    def from_config(
        cls,
        config: LiveplayaConfig,
        http_session: aiohttp.ClientSession,
        initial_query: Query | None = None,
        *,
        timer: Timer | None = None,
    ) -> SessionController:
        """Build a controller fetching from the HTTP backend in *config*."""
        return cls(
            HttpTransport(config, http_session),
            initial_query,
            config.refresh_interval,
            timer=timer,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SessionController:
        self._require_open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        task = self._task
        self.close()
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Current snapshot; replaced, never mutated."""
        return self._state

    def get_state(self) -> SessionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def set_query(self, query: Query) -> None:
        """Switch to *query* and fetch its view right away."""
        self._require_open()
        self._state = self._state.model_copy(update={"query": query})
        self._fetch_and_notify()

    def refresh(self) -> None:
        """Fetch the view for the current query again."""
        self._require_open()
        self._fetch_and_notify()

    def dismiss_alert(self) -> None:
        self._require_open()
        self._replace_state(alert=None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every state change.

        Returns a function removing exactly this registration.
        """
        self._require_open()
        return self._subscribers.add(listener)

    async def wait_idle(self) -> None:
        """Wait until no fetch is pending or outstanding.

        Fetches started while waiting (by listeners or the timer) are
        waited for as well.
        """
        while True:
            if self._pending_start is not None:
                await asyncio.sleep(0)
                continue
            task = self._task
            if task is None or task.done():
                return
            await asyncio.wait({task})

    def close(self) -> None:
        """Stop the refresh timer and abandon any outstanding fetch.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        if self._timer_handle is not None:
            self._timer_handle.cancel()
            self._timer_handle = None
        self._cancel_outstanding()
        self._subscribers.clear()
        _logger.debug("Session closed")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session controller is closed")

    def _replace_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        self._subscribers.notify()

    def _cancel_outstanding(self) -> None:
        if self._pending_start is not None:
            self._pending_start.cancel()
            self._pending_start = None
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None

    def _on_timer(self) -> None:
        if self._closed:
            return
        self._fetch_and_notify()

    def _fetch_and_notify(self) -> None:
        self._cancel_outstanding()
        token = CancellationToken()
        self._token = token
        self._replace_state(is_loading=True)
        # A listener may have started another fetch or closed the session.
        if self._token is not token:
            return
        self._task = self._loop.create_task(self._fetch(self._state.query, token))

    async def _fetch(self, query: Query, token: CancellationToken) -> None:
        try:
            view = await self._transport.fetch_view(query, token)
        except FetchCancelledError:
            _logger.debug("Fetch for %r superseded", query)
            return
        except asyncio.CancelledError:
            # Only a cancellation issued through our own token is a supersession.
            if not token.cancelled:
                self._finish(token)
                raise
            _logger.debug("Fetch for %r superseded", query)
            return
        except Exception as exc:
            if token.cancelled:
                return
            self._finish(token)
            msg = describe_error(exc)
            _logger.error(msg)
            self._replace_state(
                is_loading=False,
                alert=Alert(text=msg, level=AlertLevel.ERROR),
            )
            return

        if token.cancelled:
            return
        self._finish(token)
        self._apply_view(view)

    def _finish(self, token: CancellationToken) -> None:
        if self._token is token:
            self._token = None
            self._task = None

    def _apply_view(self, view: View) -> None:
        self._replace_state(is_loading=False, view=view, alert=None)
