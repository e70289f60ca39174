"""Map/log snapshot returned by the backend.

The server serializes its view with camelCase keys; :class:`View` maps
them onto snake_case fields via ``alias_generator=to_camel`` and stashes
the original payload in ``raw``.  GeoJSON features are passed through
untouched.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from liveplaya.models.query import LngLat


class LogLevel(StrEnum):
    ERROR = "error"
    INFO = "info"
    DEBUG = "debug"


class _ViewModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class LogMessage(_ViewModel):
    """One entry of the server's recent packet log."""

    id: int
    level: LogLevel = LogLevel.INFO
    text: str = ""
    time: datetime | None = None


class FeatureRef(_ViewModel):
    """Reference to a tracked feature, e.g. an APRS beacon."""

    type: Literal["beacon"] = "beacon"
    name: str
    slug: str
    location: str = ""
    lastseen: datetime | None = None


class View(_ViewModel):
    """Snapshot of the map and log for one query.

    Parameters
    ----------
    name : str
        Human readable name of the mapped area.
    description : str or None
        Free-form description (e.g. how many stations are watched).
    time : datetime or None
        Server time the snapshot was taken.
    bearing_deg : float
        Map rotation in degrees.
    center : LngLat or None
        Suggested map centre.
    zoom : float or None
        Suggested zoom level.
    features : list of dict
        GeoJSON features, passed through as received.
    refs : list of FeatureRef
        Tracked features, sorted by the server.
    log : list of LogMessage
        Recent log entries.
    raw : dict
        Original payload.
    """

    name: str = ""
    description: str | None = None
    time: datetime | None = None
    bearing_deg: float = 0.0
    center: LngLat | None = None
    zoom: float | None = None
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[dict[str, Any]] = Field(default_factory=list)
    refs: list[FeatureRef] = Field(default_factory=list)
    log: list[LogMessage] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "raw" in values:
            return values
        return {**values, "raw": dict(values)}

    @property
    def errors(self) -> list[LogMessage]:
        """Log entries the server flagged as errors."""
        return [msg for msg in self.log if msg.level == LogLevel.ERROR]
