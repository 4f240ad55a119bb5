"""Error taxonomy for the weather advisory service."""

from typing import Optional


class AdvisoryError(Exception):
    """Base error carrying the HTTP status and client-facing message."""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidInput(AdvisoryError):
    """Raised when client-supplied coordinates are missing or malformed."""

    status_code = 400


class UpstreamError(AdvisoryError):
    """Raised when an upstream HTTP call fails.

    Attributes:
        status: Upstream HTTP status code, None for timeouts and transport failures
        body: Raw upstream response body, for server-side logging only
    """

    status_code = 500
    client_message = "Failed to fetch weather"

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body
        self.detail = self.safe_message

    @property
    def safe_message(self) -> str:
        """User-safe description of the failure, categorized by upstream status."""
        if self.status == 429:
            return "Upstream weather service rate-limited. Please try again shortly."
        if self.status:
            return f"Upstream weather service error ({self.status})."
        return "Network error contacting weather service."


class SoftResolutionFailure(Exception):
    """Raised inside a geocoding attempt that produced no usable label."""
    pass
