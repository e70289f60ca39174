"""Session state snapshots exposed to subscribers."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from liveplaya.models.query import Query
from liveplaya.models.view import View


class AlertLevel(StrEnum):
    ERROR = "error"
    INFO = "info"
    SUCCESS = "success"


class Alert(BaseModel):
    """Transient, user-dismissible notification."""

    model_config = ConfigDict(frozen=True)

    text: str
    level: AlertLevel = AlertLevel.INFO


class SessionState(BaseModel):
    """Immutable snapshot of a session.

    A session controller replaces its state wholesale on every
    transition, so consumers can compare the previous and current
    snapshot by identity or by value.

    Parameters
    ----------
    is_loading : bool
        ``True`` while an unsuperseded fetch is outstanding.
    query : Query
        Query the current or most recent fetch was issued for.
    view : View or None
        Last successfully fetched view.  Kept when a later fetch fails.
    alert : Alert or None
        At most one pending alert.
    """

    model_config = ConfigDict(frozen=True)

    is_loading: bool
    query: Query
    view: View | None = None
    alert: Alert | None = None
