"""Request descriptors for the four QWeather endpoints."""

from dataclasses import dataclass, field
from enum import StrEnum
from urllib.parse import urlencode


class Endpoint(StrEnum):
    NOW = "now"
    HOURLY = "hourly"
    DAILY = "daily"
    MOON = "moon"


@dataclass(frozen=True)
class RequestDescriptor:
    path: str
    longitude: float
    latitude: float
    unit: str
    lang: str
    api_key: str = field(repr=False)
    date: str | None = None  # YYYYMMDD, astronomy endpoint only

    @property
    def location(self) -> str:
        return f"{self.longitude:.5f},{self.latitude:.5f}"

    def query_params(self) -> list[tuple[str, str]]:
        params = [
            ("location", self.location),
            ("unit", self.unit),
            ("lang", self.lang),
            ("key", self.api_key),
        ]
        if self.date is not None:
            params.append(("date", self.date))
        return params

    def uri(self) -> str:
        """Path plus query string, with the location comma left unescaped."""
        return f"{self.path}?{urlencode(self.query_params(), safe=',')}"
