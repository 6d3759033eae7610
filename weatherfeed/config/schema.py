"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field, SecretStr

from weatherfeed.config.defaults import (
    DEFAULT_HOST,
    DEFAULT_LANG,
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    DEFAULT_PORT,
    DEFAULT_UNIT,
)


class ServiceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    api_key: SecretStr = SecretStr("")
    lang: str = DEFAULT_LANG
    unit: str = Field(default=DEFAULT_UNIT, pattern="^[mi]$")  # metric / imperial
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    ca_cert: str | None = None  # PEM root certificate; system store when unset


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    longitude: float = Field(default=DEFAULT_LONGITUDE, ge=-180.0, le=180.0)
    latitude: float = Field(default=DEFAULT_LATITUDE, ge=-90.0, le=90.0)


class PollConfig(BaseModel):
    model_config = {"extra": "forbid"}

    interval_minutes: int = Field(default=60, ge=1)
    max_backoff_minutes: int = Field(default=240, ge=1)
    buffer_size: int = Field(default=8192, ge=64)


class WeatherConfig(BaseModel):
    model_config = {"extra": "forbid"}

    service: ServiceConfig = ServiceConfig()
    location: LocationConfig = LocationConfig()
    poll: PollConfig = PollConfig()
