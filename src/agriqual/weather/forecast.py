"""Forecast provider wrapper."""

import logging
from typing import Any, Dict, Optional

from agriqual.config import FORECAST_API_URL
from agriqual.weather.client import HttpClient
from agriqual.weather.models import (
    Coordinate, CurrentConditions, ForecastSnapshot, TodayForecast
)

logger = logging.getLogger(__name__)

DAILY_FIELDS = (
    "precipitation_sum",
    "temperature_2m_max",
    "temperature_2m_min",
    "uv_index_max",
    "wind_gusts_10m_max",
)


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def _first(daily: Dict[str, Any], field: str) -> Optional[float]:
    values = daily.get(field)
    if isinstance(values, list) and values:
        return _as_number(values[0])
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class ForecastFetcher:
    """Fetches current conditions and today's aggregate for a coordinate."""

    def __init__(self, http_client: HttpClient, base_url: str = FORECAST_API_URL):
        self.http_client = http_client
        self.base_url = base_url

    def build_params(self, coordinate: Coordinate) -> Dict[str, Any]:
        return {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "current_weather": "true",
            "daily": ",".join(DAILY_FIELDS),
            "forecast_days": 1,
            "timezone": "auto",
        }

    async def fetch(self, coordinate: Coordinate) -> ForecastSnapshot:
        """Fetch the forecast snapshot for a coordinate.

        Args:
            coordinate: Validated coordinate

        Returns:
            ForecastSnapshot with missing fields set to None

        Raises:
            UpstreamError: If the forecast request fails
        """
        logger.info(f"Fetching forecast for lat={coordinate.latitude}, lon={coordinate.longitude}")
        data = await self.http_client.get_json(self.base_url, params=self.build_params(coordinate))
        snapshot = self.parse(data)
        logger.info(f"Forecast snapshot: {snapshot.model_dump()}")
        return snapshot

    @staticmethod
    def parse(data: Any) -> ForecastSnapshot:
        """Build a snapshot from a raw forecast payload without raising on missing data."""
        payload = _as_dict(data)
        current = _as_dict(payload.get("current_weather"))
        daily = _as_dict(payload.get("daily"))

        return ForecastSnapshot(
            current=CurrentConditions(
                temperature_c=_as_number(current.get("temperature")),
                wind_speed_kmh=_as_number(current.get("windspeed"))
            ),
            today=TodayForecast(
                precipitation_mm=_first(daily, "precipitation_sum"),
                tmax_c=_first(daily, "temperature_2m_max"),
                tmin_c=_first(daily, "temperature_2m_min"),
                uv_index_max=_first(daily, "uv_index_max"),
                wind_gust_max_kmh=_first(daily, "wind_gusts_10m_max")
            )
        )
