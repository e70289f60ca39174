"""Client configuration for liveplaya."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from liveplaya._constants import (
    BASE_URL,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    USER_AGENT,
    VIEW_PATH,
)
from liveplaya.exceptions import LiveplayaConfigError


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value.strip())
    except ValueError as exc:
        raise LiveplayaConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LiveplayaConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base URL, without a trailing slash.
    view_path : str
        Path of the view endpoint, appended to ``base_url``.
    refresh_interval : float
        Seconds between periodic refreshes.  ``0`` disables the timer;
        the view is then only fetched on start and on query changes.
    request_timeout : float
        Total timeout in seconds for a single view request.
    user_agent : str
        ``User-Agent`` header sent with every request.
    """

    base_url: str = BASE_URL
    view_path: str = VIEW_PATH
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise LiveplayaConfigError("base_url must be non-empty")
        if self.refresh_interval < 0:
            raise LiveplayaConfigError(f"refresh_interval must be >= 0, got {self.refresh_interval}")
        if self.request_timeout <= 0:
            raise LiveplayaConfigError(f"request_timeout must be > 0, got {self.request_timeout}")
        # Normalise so that f"{base_url}{view_path}" is always well formed.
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        if not self.view_path.startswith("/"):
            object.__setattr__(self, "view_path", f"/{self.view_path}")

    @property
    def view_url(self) -> str:
        """Absolute URL of the view endpoint."""
        return f"{self.base_url}{self.view_path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> LiveplayaConfig:
        """Create configuration from environment variables.

        Reads optional ``LIVEPLAYA_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LiveplayaConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "LIVEPLAYA_BASE_URL": "base_url",
            "LIVEPLAYA_VIEW_PATH": "view_path",
            "LIVEPLAYA_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric fields, handled separately
        _ENV_FLOAT_MAP = {
            "LIVEPLAYA_REFRESH_INTERVAL": "refresh_interval",
            "LIVEPLAYA_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
