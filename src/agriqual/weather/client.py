"""Outbound HTTP client shared by the forecast and geocoding providers."""

import logging
from typing import Any, Dict, Optional

import httpx

from agriqual.weather.errors import UpstreamError
from agriqual.weather.models import HttpConfig

logger = logging.getLogger(__name__)


class HttpClient:
    """Async GET client with a fixed timeout and identifying header."""

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the HTTP client.

        Args:
            config: Timeout and User-Agent settings (defaults from environment)
            transport: Optional httpx transport, used to substitute upstreams
        """
        self.config = config or HttpConfig()
        self.client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout,
            follow_redirects=True,
            transport=transport
        )

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request and decode the JSON body.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            Decoded JSON body, or None if the body is not JSON

        Raises:
            UpstreamError: On non-2xx status, timeout or transport failure
        """
        try:
            response = await self.client.get(url, params=params, timeout=self.config.timeout)
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.debug(f"HTTP error from {url}: {status} - {e.response.text}")
            raise UpstreamError(
                f"Upstream returned HTTP {status}",
                status=status,
                body=e.response.text
            ) from e
        except httpx.TimeoutException as e:
            logger.debug(f"Timeout after {self.config.timeout}s requesting {url}: {e!r}")
            raise UpstreamError(f"Timed out after {self.config.timeout}s") from e
        except httpx.RequestError as e:
            logger.debug(f"Request error to {url}: {e!r}")
            raise UpstreamError(str(e) or type(e).__name__) from e

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Non-JSON response from {url}: {e}")
            return None

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
