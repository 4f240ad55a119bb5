"""Configuration settings for the weather advisory service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# Upstream providers
FORECAST_API_URL: str = os.getenv("FORECAST_API_URL", "https://api.open-meteo.com/v1/forecast")
GEOCODING_API_URL: str = os.getenv("GEOCODING_API_URL", "https://geocoding-api.open-meteo.com/v1/reverse")
FALLBACK_GEOCODING_API_URL: str = os.getenv(
    "FALLBACK_GEOCODING_API_URL",
    "https://api.bigdatacloud.net/data/reverse-geocode-client"
)

# Outbound HTTP
USER_AGENT: str = os.getenv("USER_AGENT", "AgriQual-Server/1.0")
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

DEFAULT_PLACE_LABEL: Final[str] = "Current location"

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "5000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Redis (rate limiting only, responses are never cached)
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")

# Rate limiting configuration
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_REQUESTS_PER_WINDOW: int = int(os.getenv("RATE_LIMIT_REQUESTS_PER_WINDOW", "60"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "agriqual:rate_limit")
