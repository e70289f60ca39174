"""Custom exception hierarchy for liveplaya."""

from __future__ import annotations


class LiveplayaError(Exception):
    """Base exception for all liveplaya errors."""


class LiveplayaConfigError(LiveplayaError):
    """Invalid or missing configuration."""


class LiveplayaTransportError(LiveplayaError):
    """Failure fetching a view (network, non-200, invalid JSON, bad payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body
        super().__init__(message)


class FetchCancelledError(LiveplayaError):
    """A fetch was abandoned because its cancellation token fired.

    This is the expected outcome of supersession: a newer fetch cycle
    cancelled the one that raised it.  The session controller never
    reports it to the user.
    """


class SessionClosedError(LiveplayaError):
    """Operation attempted on a session controller that was already closed."""
