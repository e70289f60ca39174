"""liveplaya - Async session client for the liveplaya map/log backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("liveplaya")
except PackageNotFoundError:
    __version__ = "0+local"
from liveplaya._transport import HttpTransport, Transport
from liveplaya.cancellation import CancellationToken
from liveplaya.config import LiveplayaConfig
from liveplaya.controller import SessionController, describe_error
from liveplaya.exceptions import (
    FetchCancelledError,
    LiveplayaConfigError,
    LiveplayaError,
    LiveplayaTransportError,
    SessionClosedError,
)
from liveplaya.mock import MockTransport
from liveplaya.models import (
    Alert,
    AlertLevel,
    BBox,
    FeatureRef,
    LngLat,
    LogLevel,
    LogMessage,
    Query,
    SessionState,
    View,
)
from liveplaya.timer import LoopTimer, Timer

__all__ = [
    "__version__",
    "Alert",
    "AlertLevel",
    "BBox",
    "CancellationToken",
    "FeatureRef",
    "FetchCancelledError",
    "HttpTransport",
    "LiveplayaConfig",
    "LiveplayaConfigError",
    "LiveplayaError",
    "LiveplayaTransportError",
    "LngLat",
    "LogLevel",
    "LogMessage",
    "LoopTimer",
    "MockTransport",
    "Query",
    "SessionClosedError",
    "SessionController",
    "SessionState",
    "Timer",
    "Transport",
    "View",
    "describe_error",
]
