"""View query model."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LngLat = tuple[float, float]
"""``(longitude, latitude)`` in degrees."""

BBox = tuple[float, float, float, float]
"""``(west, south, east, north)`` in degrees."""


class Query(BaseModel):
    """Describes which view the client wants.

    Queries are immutable and compared by value: two queries with the
    same fields are equal regardless of identity.

    Parameters
    ----------
    bounds : BBox or None
        Visible region as ``(west, south, east, north)``.
    zoom : float or None
        Map zoom level.
    at_time : datetime or None
        Point in time to view; ``None`` means "now".  Naive values are
        interpreted as UTC.
    feature : str or None
        Slug of a feature to focus on (e.g. ``"aprs/k6abc"``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bounds: BBox | None = None
    zoom: float | None = Field(default=None, ge=0)
    at_time: datetime | None = None
    feature: str | None = None

    @field_validator("at_time")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("feature")
    @classmethod
    def _strip_feature(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _check_bounds(self) -> Query:
        if self.bounds is not None:
            west, south, east, north = self.bounds
            if west > east or south > north:
                raise ValueError(f"bounds must be (west, south, east, north), got {self.bounds}")
        return self

    @classmethod
    def around(cls, center: LngLat, *, zoom: float | None = None, at_time: datetime | None = None) -> Query:
        """Build a query for a single point.

        The map size is not known before the first render, so the bounds
        collapse onto *center* until a real viewport is available.
        """
        lng, lat = center
        return cls(bounds=(lng, lat, lng, lat), zoom=zoom, at_time=at_time)

    @property
    def center(self) -> LngLat | None:
        """Centre of ``bounds``, or ``None`` when no bounds are set."""
        if self.bounds is None:
            return None
        west, south, east, north = self.bounds
        return ((west + east) / 2, (south + north) / 2)
