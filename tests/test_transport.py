from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

import aiohttp
import pytest

from liveplaya._transport import HttpTransport, parse_view_body, query_params
from liveplaya.cancellation import CancellationToken
from liveplaya.config import LiveplayaConfig
from liveplaya.controller import SessionController
from liveplaya.exceptions import FetchCancelledError, LiveplayaTransportError
from liveplaya.mock import MockTransport
from liveplaya.models.query import Query
from liveplaya.models.session import AlertLevel

_VIEW_PAYLOAD: dict[str, Any] = {
    "name": "Black Rock City 2024",
    "description": "Watching 2 APRS stations.",
    "time": "2024-08-28T18:00:00Z",
    "bearingDeg": 45.0,
    "center": [-119.2066, 40.7864],
    "zoom": 12.8,
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [-119.2, 40.78]},
            "properties": {"liveplaya": "poi", "poi": "beacon", "name": "K6ABC"},
        }
    ],
    "refs": [
        {
            "type": "beacon",
            "name": "K6ABC",
            "slug": "aprs/k6abc",
            "location": "6:00 & Esplanade",
            "lastseen": "2024-08-28T17:59:00Z",
        }
    ],
    "log": [
        {"level": "info", "id": 1, "time": "2024-08-28T17:59:00Z", "text": "K6ABC>APRS:!4047.18N/11912.39W-"},
        {"level": "error", "id": 2, "time": "2024-08-28T17:59:30Z", "text": "garbage: unsupported packet"},
    ],
}


class _FakeResponse:
    def __init__(self, status: int, text: str, delay: float = 0.0) -> None:
        self.status = status
        self._text = text
        self._delay = delay

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeHttpSession:
    def __init__(
        self,
        status: int = 200,
        text: str = "",
        *,
        exc: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self._status = status
        self._text = text
        self._exc = exc
        self._delay = delay
        self.requests: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"url": url, **kwargs})
        if self._exc is not None:
            raise self._exc
        return _FakeResponse(self._status, self._text, self._delay)


class _UndecodableResponse(_FakeResponse):
    async def text(self) -> str:
        raise UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")


class _UndecodableHttpSession(_FakeHttpSession):
    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"url": url, **kwargs})
        return _UndecodableResponse(200, "")


def _envelope(view: dict[str, Any]) -> str:
    return json.dumps({"status": "ok", "view": view})


def _transport(session: _FakeHttpSession, **config: Any) -> HttpTransport:
    return HttpTransport(LiveplayaConfig(base_url="http://playa.test", **config), session)  # type: ignore[arg-type]


def test_query_params_omits_absent_fields() -> None:
    assert query_params(Query()) == {}
    assert query_params(Query(zoom=5)) == {"zoom": "5"}
    assert query_params(Query(zoom=12.8)) == {"zoom": "12.8"}


def test_query_params_keeps_full_zoom_precision() -> None:
    assert query_params(Query(zoom=12.3456789)) == {"zoom": "12.3456789"}
    assert query_params(Query(zoom=0)) == {"zoom": "0"}


def test_query_params_serializes_every_field() -> None:
    query = Query(
        bounds=(-119.25, 40.75, -119.15, 40.8),
        zoom=14,
        at_time=datetime(2024, 8, 28, 11, 0, tzinfo=timezone(timedelta(hours=-7))),
        feature="aprs/k6abc",
    )

    assert query_params(query) == {
        "zoom": "14",
        "bounds": "-119.25000,40.75000,-119.15000,40.80000",
        "time": "2024-08-28T18:00:00Z",
        "feature": "aprs/k6abc",
    }


def test_parse_view_body_unwraps_envelope() -> None:
    view = parse_view_body(_envelope(_VIEW_PAYLOAD))

    assert view.name == "Black Rock City 2024"
    assert view.bearing_deg == 45.0
    assert view.center == (-119.2066, 40.7864)
    assert view.time == datetime(2024, 8, 28, 18, 0, tzinfo=UTC)
    assert view.features[0]["properties"]["name"] == "K6ABC"
    assert view.refs[0].slug == "aprs/k6abc"
    assert [msg.id for msg in view.errors] == [2]
    assert view.raw == _VIEW_PAYLOAD


def test_parse_view_body_accepts_bare_view() -> None:
    view = parse_view_body(json.dumps(_VIEW_PAYLOAD))
    assert view.zoom == 12.8


@pytest.mark.parametrize(
    ("body", "fragment"),
    [
        ("not json", "Invalid JSON"),
        ("[1, 2]", "Expected a JSON object"),
        (json.dumps({"status": "internal server error", "message": "try later"}), "try later"),
        (json.dumps({"status": "ok"}), "Missing 'view'"),
        (json.dumps({"status": "ok", "view": {"log": [{"level": "info"}]}}), "Malformed view"),
    ],
)
def test_parse_view_body_rejects_bad_payloads(body: str, fragment: str) -> None:
    with pytest.raises(LiveplayaTransportError, match=fragment) as exc_info:
        parse_view_body(body, endpoint="/api/v0/")
    assert exc_info.value.body == body
    assert exc_info.value.endpoint == "/api/v0/"


@pytest.mark.asyncio
async def test_http_transport_requests_view_endpoint() -> None:
    session = _FakeHttpSession(text=_envelope(_VIEW_PAYLOAD))
    transport = _transport(session, user_agent="tests/1.0")

    view = await transport.fetch_view(Query(zoom=5), CancellationToken())

    assert view.name == "Black Rock City 2024"
    request = session.requests[0]
    assert request["url"] == "http://playa.test/api/v0/"
    assert request["params"] == {"zoom": "5"}
    assert request["headers"]["user-agent"] == "tests/1.0"
    assert isinstance(request["timeout"], aiohttp.ClientTimeout)


@pytest.mark.asyncio
async def test_http_transport_maps_non_200_status() -> None:
    session = _FakeHttpSession(status=500, text="something went wrong")
    transport = _transport(session)

    with pytest.raises(LiveplayaTransportError) as exc_info:
        await transport.fetch_view(Query(), CancellationToken())

    exc = exc_info.value
    assert exc.status_code == 500
    assert exc.body == "something went wrong"
    assert str(exc) == "HTTP 500: something went wrong"


@pytest.mark.asyncio
async def test_http_transport_maps_client_errors() -> None:
    session = _FakeHttpSession(exc=aiohttp.ClientConnectionError("connection refused"))
    transport = _transport(session)

    with pytest.raises(LiveplayaTransportError, match="connection refused") as exc_info:
        await transport.fetch_view(Query(), CancellationToken())
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_http_transport_maps_timeouts() -> None:
    session = _FakeHttpSession(exc=TimeoutError())
    transport = _transport(session, request_timeout=2.5)

    with pytest.raises(LiveplayaTransportError, match="timed out after 2.5s"):
        await transport.fetch_view(Query(), CancellationToken())


@pytest.mark.asyncio
async def test_http_transport_maps_undecodable_body() -> None:
    transport = _transport(_UndecodableHttpSession())

    with pytest.raises(LiveplayaTransportError, match="Undecodable response body") as exc_info:
        await transport.fetch_view(Query(), CancellationToken())
    assert exc_info.value.status_code == 200
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_http_transport_observes_cancellation() -> None:
    session = _FakeHttpSession(text=_envelope(_VIEW_PAYLOAD), delay=10.0)
    transport = _transport(session)
    token = CancellationToken()

    fetch = asyncio.create_task(transport.fetch_view(Query(), token))
    await asyncio.sleep(0.01)
    token.cancel()

    with pytest.raises(FetchCancelledError):
        await asyncio.wait_for(fetch, timeout=1.0)


@pytest.mark.asyncio
async def test_controller_reports_http_500_from_backend() -> None:
    session = _FakeHttpSession(status=500, text="internal server error")
    config = LiveplayaConfig(base_url="http://playa.test", refresh_interval=0)
    controller = SessionController.from_config(config, session, Query(zoom=5))  # type: ignore[arg-type]

    await controller.wait_idle()

    state = controller.state
    assert state.is_loading is False
    assert state.view is None
    assert state.alert is not None
    assert state.alert.level == AlertLevel.ERROR
    assert "500" in state.alert.text
    controller.close()


@pytest.mark.asyncio
async def test_mock_transport_centres_view_on_query() -> None:
    transport = MockTransport(delay=0)
    query = Query(bounds=(-119.3, 40.7, -119.1, 40.9), zoom=13)

    view = await transport.fetch_view(query, CancellationToken())

    assert view.center == pytest.approx((-119.2, 40.8))
    assert view.zoom == 13
    assert view.bearing_deg == 45.0
    assert transport.calls == [query]


@pytest.mark.asyncio
async def test_mock_transport_defaults_zoom_and_time() -> None:
    at = datetime(2024, 8, 30, 12, 0, tzinfo=UTC)
    view = await MockTransport(delay=0).fetch_view(Query(at_time=at), CancellationToken())

    assert view.zoom == 5.0
    assert view.time == at
    assert view.center == (0.0, 0.0)
