"""Default QWeather service settings and endpoint paths."""

from weatherfeed.models.request import Endpoint

DEFAULT_HOST = "devapi.qweather.com"
DEFAULT_PORT = 443
DEFAULT_LANG = "cn"
DEFAULT_UNIT = "m"  # metric
API_KEY_ENV = "QWEATHER_API_KEY"

# Beijing
DEFAULT_LONGITUDE = 116.40528
DEFAULT_LATITUDE = 39.90498

ENDPOINT_PATHS: dict[Endpoint, str] = {
    Endpoint.NOW: "/v7/weather/now",
    Endpoint.HOURLY: "/v7/weather/24h",
    Endpoint.DAILY: "/v7/weather/7d",
    Endpoint.MOON: "/v7/astronomy/moon",
}
