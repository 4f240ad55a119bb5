"""Shared fixtures. All upstream HTTP calls go through httpx.MockTransport."""

import os

os.environ["RATE_LIMIT_ENABLED"] = "false"

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from agriqual.weather.client import HttpClient
from agriqual.weather.models import HttpConfig

FORECAST_HOST = "api.open-meteo.com"
PRIMARY_GEOCODER_HOST = "geocoding-api.open-meteo.com"
FALLBACK_GEOCODER_HOST = "api.bigdatacloud.net"

FORECAST_PAYLOAD = {
    "latitude": 31.5,
    "longitude": 74.375,
    "timezone": "Asia/Karachi",
    "current_weather": {"temperature": 33.1, "windspeed": 9.4, "winddirection": 250, "weathercode": 0},
    "daily": {
        "time": ["2026-10-19"],
        "precipitation_sum": [0.0],
        "temperature_2m_max": [38.2],
        "temperature_2m_min": [26.0],
        "uv_index_max": [9.1],
        "wind_gusts_10m_max": [22.3],
    },
}


class FakeUpstreams:
    """Routes outbound requests by host to canned responses and records them."""

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def json(self, host: str, payload: Any, status: int = 200) -> None:
        self.routes[host] = lambda request: httpx.Response(status, json=payload)

    def text(self, host: str, body: str, status: int = 200) -> None:
        self.routes[host] = lambda request: httpx.Response(status, text=body)

    def fail(self, host: str, error: type = httpx.ConnectError) -> None:
        def raise_error(request):
            raise error("upstream unreachable", request=request)
        self.routes[host] = raise_error

    @property
    def hosts(self) -> List[str]:
        return [request.url.host for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.host)
        if route is None:
            return httpx.Response(404, json={"error": True, "reason": "not routed"})
        return route(request)

    def client(self, config: Optional[HttpConfig] = None) -> HttpClient:
        return HttpClient(config=config, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def client(upstreams):
    """Test client whose advisory service talks to the fake upstreams."""
    from agriqual.api.endpoints import get_advisory_service
    from agriqual.main import app
    from agriqual.weather.service import WeatherAdvisoryService

    async def override_service():
        async with WeatherAdvisoryService(http_client=upstreams.client()) as service:
            yield service

    app.dependency_overrides[get_advisory_service] = override_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
