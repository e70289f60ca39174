"""Data models for queries, views, and session state."""

from liveplaya.models.query import BBox, LngLat, Query
from liveplaya.models.session import Alert, AlertLevel, SessionState
from liveplaya.models.view import FeatureRef, LogLevel, LogMessage, View

__all__ = [
    "Alert",
    "AlertLevel",
    "BBox",
    "FeatureRef",
    "LngLat",
    "LogLevel",
    "LogMessage",
    "Query",
    "SessionState",
    "View",
]
