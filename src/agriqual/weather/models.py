"""Data models for the weather advisory service."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from agriqual.config import HTTP_TIMEOUT_SECONDS, USER_AGENT


class HttpConfig(BaseModel):
    """Immutable settings applied to every outbound request."""
    model_config = ConfigDict(frozen=True)

    timeout: float = Field(HTTP_TIMEOUT_SECONDS, gt=0, description="Per-request timeout in seconds")
    user_agent: str = Field(USER_AGENT, description="User-Agent header sent upstream")


class Coordinate(BaseModel):
    """Geographic coordinate. Range is not validated."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")

    @property
    def in_range(self) -> bool:
        return -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180


class CurrentConditions(BaseModel):
    """Current weather conditions."""
    temperature_c: Optional[float] = Field(None, description="Air temperature in Celsius")
    wind_speed_kmh: Optional[float] = Field(None, description="Wind speed in km/h")


class TodayForecast(BaseModel):
    """Aggregated forecast for the current local day."""
    precipitation_mm: Optional[float] = Field(None, description="Precipitation sum in mm")
    tmax_c: Optional[float] = Field(None, description="Maximum temperature in Celsius")
    tmin_c: Optional[float] = Field(None, description="Minimum temperature in Celsius")
    uv_index_max: Optional[float] = Field(None, description="Maximum UV index")
    wind_gust_max_kmh: Optional[float] = Field(None, description="Maximum wind gust in km/h")


class ForecastSnapshot(BaseModel):
    """Subset of upstream forecast data used for advice."""
    current: CurrentConditions = Field(default_factory=CurrentConditions)
    today: TodayForecast = Field(default_factory=TodayForecast)


class AdvisoryResponse(BaseModel):
    """Weather advisory response model."""
    city: str = Field(..., description="Resolved place label")
    latitude: float = Field(..., description="Requested latitude")
    longitude: float = Field(..., description="Requested longitude")
    current: CurrentConditions = Field(..., description="Current conditions")
    today: TodayForecast = Field(..., description="Today's forecast aggregate")
    advice: List[str] = Field(..., description="Ordered farming advice")


class ErrorResponse(BaseModel):
    """Error response model."""
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
