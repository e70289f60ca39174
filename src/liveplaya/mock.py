"""Offline transport that synthesizes views locally.

Useful for UI development without a running backend: every fetch
resolves after a fixed delay with an empty map centred on the query.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from liveplaya.cancellation import CancellationToken
from liveplaya.models.query import Query
from liveplaya.models.view import View

DEFAULT_MOCK_ZOOM = 5.0
DEFAULT_MOCK_BEARING_DEG = 45.0


class MockTransport:
    """Transport double returning synthetic views.

    Parameters
    ----------
    delay : float
        Seconds each fetch takes.  The token is observed while waiting.
    """

    def __init__(self, delay: float = 1.0) -> None:
        self._delay = delay
        self.calls: list[Query] = []

    async def fetch_view(self, query: Query, token: CancellationToken) -> View:
        self.calls.append(query)
        await token.run(asyncio.sleep(self._delay))
        return self.build_view(query)

    @staticmethod
    def build_view(query: Query) -> View:
        when = query.at_time or datetime.now(UTC)
        return View(
            name="Mock view",
            description="Synthesized locally; no backend involved.",
            time=when,
            bearing_deg=DEFAULT_MOCK_BEARING_DEG,
            center=query.center or (0.0, 0.0),
            zoom=query.zoom if query.zoom is not None else DEFAULT_MOCK_ZOOM,
        )
