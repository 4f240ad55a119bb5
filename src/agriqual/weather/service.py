"""Weather advisory service composing forecast, geocoding and advice."""

import logging
from typing import Optional

from agriqual.weather.advice import AdviceEngine
from agriqual.weather.client import HttpClient
from agriqual.weather.errors import UpstreamError
from agriqual.weather.forecast import ForecastFetcher
from agriqual.weather.geocoding import GeocodeResolver
from agriqual.weather.models import AdvisoryResponse, Coordinate

logger = logging.getLogger(__name__)


class WeatherAdvisoryService:
    """Builds an advisory for one coordinate per call. Holds no per-request state."""

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        forecast_fetcher: Optional[ForecastFetcher] = None,
        geocode_resolver: Optional[GeocodeResolver] = None,
        advice_engine: Optional[AdviceEngine] = None
    ):
        """Initialize the advisory service.

        Args:
            http_client: Outbound HTTP client (creates default if None)
            forecast_fetcher: Forecast provider wrapper (built on http_client if None)
            geocode_resolver: Reverse geocoder (built on http_client if None)
            advice_engine: Advice rule engine (default rule table if None)
        """
        self.http_client = http_client or HttpClient()
        self.forecast_fetcher = forecast_fetcher or ForecastFetcher(self.http_client)
        self.geocode_resolver = geocode_resolver or GeocodeResolver(self.http_client)
        self.advice_engine = advice_engine or AdviceEngine()

    async def get_advisory(self, coordinate: Coordinate) -> AdvisoryResponse:
        """Fetch forecast, resolve place label and derive advice, in that order.

        Args:
            coordinate: Validated coordinate

        Returns:
            AdvisoryResponse for the coordinate

        Raises:
            UpstreamError: If the forecast request fails
        """
        if not coordinate.in_range:
            logger.warning(
                f"Coordinates out of range, forwarding as-is: "
                f"lat={coordinate.latitude}, lon={coordinate.longitude}"
            )

        try:
            snapshot = await self.forecast_fetcher.fetch(coordinate)
        except UpstreamError as e:
            logger.error(f"Forecast fetch failed: status={e.status}, message={e}, body={e.body}")
            raise

        city = await self.geocode_resolver.resolve(coordinate)
        advice = self.advice_engine.derive(snapshot.current, snapshot.today)
        logger.info(f"Built advisory for '{city}' with {len(advice)} advice items")

        return AdvisoryResponse(
            city=city,
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            current=snapshot.current,
            today=snapshot.today,
            advice=advice
        )

    async def aclose(self):
        """Close the HTTP client."""
        if self.http_client:
            try:
                await self.http_client.aclose()
            except Exception as e:
                logger.error(f"Error closing HTTP client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
