"""Registry of state-change listeners."""

from __future__ import annotations

import logging
from collections.abc import Callable

_logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class SubscriberRegistry:
    """Ordered collection of listener callbacks.

    The same callable may be registered more than once; each registration
    is notified and removed independently.  :meth:`notify` iterates over
    a snapshot, so listeners may add or remove registrations (including
    their own) while a notification pass is running without affecting
    that pass.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a function that removes it."""
        self._listeners.append(listener)
        removed = False

        def _remove() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            self.remove(listener)

        return _remove

    def remove(self, listener: Listener) -> None:
        """Remove the first registration of *listener*, if any."""
        for idx, registered in enumerate(self._listeners):
            if registered is listener or registered == listener:
                del self._listeners[idx]
                return

    def clear(self) -> None:
        self._listeners.clear()

    def notify(self) -> None:
        """Call every listener registered at the start of this pass."""
        for listener in tuple(self._listeners):
            try:
                listener()
            except Exception:
                _logger.warning("Session listener %r failed", listener, exc_info=True)
