"""HTTP transport for the view endpoint."""

from __future__ import annotations

import json
import logging
from datetime import UTC
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from liveplaya._constants import BOUNDS_PRECISION, ENVELOPE_STATUS_OK
from liveplaya.cancellation import CancellationToken
from liveplaya.config import LiveplayaConfig
from liveplaya.exceptions import LiveplayaTransportError
from liveplaya.models.query import Query
from liveplaya.models.view import View

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the session controller.

    Implementations must observe *token* and raise
    :class:`~liveplaya.exceptions.FetchCancelledError` once it fires, and
    raise :class:`~liveplaya.exceptions.LiveplayaTransportError` for every
    other failure.
    """

    async def fetch_view(self, query: Query, token: CancellationToken) -> View:
        ...


def query_params(query: Query) -> dict[str, str]:
    """Serialize *query* into URL parameters.

    Fields that are not set are omitted rather than sent empty.
    """
    params: dict[str, str] = {}
    if query.zoom is not None:
        params["zoom"] = _format_number(query.zoom)
    if query.bounds is not None:
        params["bounds"] = ",".join(f"{v:.{BOUNDS_PRECISION}f}" for v in query.bounds)
    if query.at_time is not None:
        params["time"] = query.at_time.astimezone(UTC).isoformat().replace("+00:00", "Z")
    if query.feature is not None:
        params["feature"] = query.feature
    return params


def _format_number(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def parse_view_body(text: str, *, endpoint: str = "") -> View:
    """Decode a view response body.

    The server wraps the view as ``{"status": "ok", "view": {...}}``;
    a bare view object is accepted too.
    """
    try:
        body_json = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LiveplayaTransportError(
            f"Invalid JSON from {endpoint}: {text[:200]}",
            endpoint=endpoint,
            body=text,
        ) from exc

    if not isinstance(body_json, dict):
        raise LiveplayaTransportError(
            f"Expected a JSON object from {endpoint}, got {type(body_json).__name__}",
            endpoint=endpoint,
            body=text,
        )

    payload: Any = body_json
    if "status" in body_json:
        status = body_json.get("status")
        if status != ENVELOPE_STATUS_OK:
            message = body_json.get("message") or "no message"
            raise LiveplayaTransportError(
                f"Server reported status {status!r} from {endpoint}: {message}",
                endpoint=endpoint,
                body=text,
            )
        payload = body_json.get("view")
        if not isinstance(payload, dict):
            raise LiveplayaTransportError(
                f"Missing 'view' field from {endpoint}",
                endpoint=endpoint,
                body=text,
            )

    try:
        return View.model_validate(payload)
    except ValidationError as exc:
        raise LiveplayaTransportError(
            f"Malformed view from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
            body=text,
        ) from exc


class HttpTransport:
    """Fetches views from the backend with aiohttp."""

    def __init__(self, config: LiveplayaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def fetch_view(self, query: Query, token: CancellationToken) -> View:
        return await token.run(self._get_view(query))

    async def _get_view(self, query: Query) -> View:
        endpoint = self._config.view_path
        url = self._config.view_url
        params = query_params(query)
        headers = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s params=%s", url, params)

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise LiveplayaTransportError(
                        f"Undecodable response body from {endpoint}: {exc.reason}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    ) from exc
                if resp.status != 200:
                    raise LiveplayaTransportError(
                        f"HTTP {resp.status}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                        body=text,
                    )
        except LiveplayaTransportError:
            raise
        except TimeoutError as exc:
            raise LiveplayaTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout:g}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise LiveplayaTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        return parse_view_body(text, endpoint=endpoint)
