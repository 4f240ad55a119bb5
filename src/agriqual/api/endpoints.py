"""API endpoints for the weather advisory service."""

import logging
import math
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, Query

from agriqual.config import (
    FALLBACK_GEOCODING_API_URL, FORECAST_API_URL, GEOCODING_API_URL,
    HTTP_TIMEOUT_SECONDS
)
from agriqual.weather.errors import InvalidInput
from agriqual.weather.models import AdvisoryResponse, Coordinate, ErrorResponse
from agriqual.weather.service import WeatherAdvisoryService

logger = logging.getLogger(__name__)

SERVICE_NAME = "AgriQual Weather Advisory Service"
SERVICE_VERSION = "1.0.0"

router = APIRouter(prefix="/api/weather", tags=["weather"])


async def get_advisory_service() -> AsyncGenerator[WeatherAdvisoryService, None]:
    """Dependency yielding a per-request advisory service."""
    async with WeatherAdvisoryService() as service:
        yield service


def parse_coordinates(lat: Optional[str], lon: Optional[str]) -> Coordinate:
    """
    Validate raw query parameters and build a coordinate.

    Args:
        lat: Raw latitude query value
        lon: Raw longitude query value

    Returns:
        Coordinate built from the parsed values

    Raises:
        InvalidInput: If a value is missing, empty or not a finite number
    """
    if not lat or not lon:
        raise InvalidInput("lat and lon are required")

    # float() accepts digit separators such as "3_0"
    if "_" in lat or "_" in lon:
        raise InvalidInput("lat and lon must be numbers")

    try:
        latitude = float(lat)
        longitude = float(lon)
    except ValueError:
        raise InvalidInput("lat and lon must be numbers")

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidInput("lat and lon must be numbers")

    return Coordinate(latitude=latitude, longitude=longitude)


@router.get(
    "",
    response_model=AdvisoryResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
@router.get("/", response_model=AdvisoryResponse, include_in_schema=False)
async def get_weather_advisory(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    service: WeatherAdvisoryService = Depends(get_advisory_service)
) -> AdvisoryResponse:
    """Get current weather, today's forecast and farming advice for a coordinate.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        service: Advisory service dependency

    Returns:
        AdvisoryResponse with place label, weather and advice

    Raises:
        InvalidInput: If parameters are missing or malformed
        UpstreamError: If the forecast provider fails
    """
    coordinate = parse_coordinates(lat, lon)
    advisory = await service.get_advisory(coordinate)
    logger.info(f"Returning advisory for '{advisory.city}'")
    return advisory


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "agriqual-weather"}


@router.get("/info")
async def get_service_info() -> dict:
    """Get service information.

    Returns:
        Service name, version and upstream providers
    """
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "providers": {
            "forecast": FORECAST_API_URL,
            "geocoding": GEOCODING_API_URL,
            "geocoding_fallback": FALLBACK_GEOCODING_API_URL
        },
        "timeout_seconds": HTTP_TIMEOUT_SECONDS,
        "features": [
            "Current conditions and today's forecast aggregate",
            "Reverse geocoded place label with provider fallback",
            "Rule-based farming advice"
        ]
    }
