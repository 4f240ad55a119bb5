"""Reverse geocoding with a primary and fallback provider."""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from agriqual.config import (
    DEFAULT_PLACE_LABEL, FALLBACK_GEOCODING_API_URL, GEOCODING_API_URL
)
from agriqual.weather.client import HttpClient
from agriqual.weather.errors import SoftResolutionFailure, UpstreamError
from agriqual.weather.models import Coordinate

logger = logging.getLogger(__name__)

GeocodeAttempt = Tuple[str, Callable[[Coordinate], Awaitable[Optional[str]]]]


def _text(record: dict, key: str) -> str:
    """Return a string field from a provider record, or an empty string."""
    value = record.get(key)
    return value if isinstance(value, str) else ""


def label_from_primary(result: dict) -> Optional[str]:
    """Build a label from a primary provider result.

    Settlement name and first-level region are preferred. The second-level
    region is used only without a settlement name, and the country only when
    nothing else was found.

    Args:
        result: First entry of the provider's ``results`` list

    Returns:
        Comma-joined label, or None if the result holds no usable token
    """
    name = _text(result, "name")
    admin1 = _text(result, "admin1")
    admin2 = _text(result, "admin2")
    country = _text(result, "country")

    parts = []
    if name:
        parts.append(name)
    if admin1:
        parts.append(admin1)
    if not name and admin2:
        parts.append(admin2)
    if not parts and country:
        parts.append(country)

    return ", ".join(parts) or None


def label_from_fallback(data: dict) -> Optional[str]:
    """Build a label from a fallback provider payload.

    Args:
        data: Provider payload with city/locality, principalSubdivision, countryName

    Returns:
        Comma-joined label, or None if the payload holds no usable token
    """
    parts = []
    locality = _text(data, "city") or _text(data, "locality")
    if locality:
        parts.append(locality)
    subdivision = _text(data, "principalSubdivision")
    if subdivision:
        parts.append(subdivision)
    country = _text(data, "countryName")
    if not parts and country:
        parts.append(country)

    return ", ".join(parts) or None


class GeocodeResolver:
    """Resolves a display label for a coordinate. Never raises."""

    def __init__(
        self,
        http_client: HttpClient,
        primary_url: str = GEOCODING_API_URL,
        fallback_url: str = FALLBACK_GEOCODING_API_URL,
        default_label: str = DEFAULT_PLACE_LABEL
    ):
        """Initialize the resolver.

        Args:
            http_client: Shared outbound HTTP client
            primary_url: Primary reverse geocoding endpoint
            fallback_url: Fallback reverse geocoding endpoint
            default_label: Label used when no provider yields a place name
        """
        self.http_client = http_client
        self.primary_url = primary_url
        self.fallback_url = fallback_url
        self.default_label = default_label

    @property
    def attempts(self) -> Sequence[GeocodeAttempt]:
        """Resolution attempts in evaluation order."""
        return (
            ("primary", self.reverse_primary),
            ("fallback", self.reverse_fallback),
        )

    async def reverse_primary(self, coordinate: Coordinate) -> Optional[str]:
        """Reverse geocode through the primary provider.

        Args:
            coordinate: Validated coordinate

        Returns:
            Label built from the first result, or None if it holds no usable token

        Raises:
            UpstreamError: If the request fails
            SoftResolutionFailure: If the provider returned no results
        """
        data = await self.http_client.get_json(
            self.primary_url,
            params={
                "latitude": coordinate.latitude,
                "longitude": coordinate.longitude,
                "language": "en",
                "format": "json",
                "count": 1,
            }
        )

        # Zero results hands over to the fallback provider
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list) or not results:
            raise SoftResolutionFailure("primary geocoder returned no results")

        top: Any = results[0]
        return label_from_primary(top if isinstance(top, dict) else {})

    async def reverse_fallback(self, coordinate: Coordinate) -> Optional[str]:
        """Reverse geocode through the fallback provider.

        Args:
            coordinate: Validated coordinate

        Returns:
            Label built from the payload, or None if it holds no usable token

        Raises:
            UpstreamError: If the request fails
            SoftResolutionFailure: If the payload is not a JSON object
        """
        data = await self.http_client.get_json(
            self.fallback_url,
            params={
                "latitude": coordinate.latitude,
                "longitude": coordinate.longitude,
                "localityLanguage": "en",
            }
        )
        if not isinstance(data, dict):
            raise SoftResolutionFailure("fallback geocoder returned a non-object payload")
        return label_from_fallback(data)

    async def resolve(self, coordinate: Coordinate) -> str:
        """Resolve a place label, trying each provider in order.

        A failed attempt hands over to the next one. An attempt that answers
        ends the chain, with the default label if its answer held no place name.

        Args:
            coordinate: Validated coordinate

        Returns:
            Resolved label, or the default label
        """
        failures: List[str] = []
        for name, attempt in self.attempts:
            try:
                label = await attempt(coordinate)
            except (UpstreamError, SoftResolutionFailure) as e:
                # Soft failure, move on to the next provider
                logger.warning(f"Reverse geocoding via {name} failed: {e}")
                failures.append(name)
                continue

            if label:
                logger.info(f"Resolved ({coordinate.latitude}, {coordinate.longitude}) to '{label}' via {name}")
                return label

            logger.warning(f"Reverse geocoding via {name} yielded no place name, using '{self.default_label}'")
            return self.default_label

        logger.info(f"No place name for ({coordinate.latitude}, {coordinate.longitude}), "
                    f"using '{self.default_label}' after {', '.join(failures)}")
        return self.default_label
