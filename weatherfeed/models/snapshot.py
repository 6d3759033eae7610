"""Weather snapshot models: current conditions, hourly and daily series."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from weatherfeed.models.common import Timestamp

MAX_HOURLY = 24
MAX_FORECAST = 8
FORECAST_DAYS_SHOWN = 6  # one column per day-of-week legend slot

T = TypeVar("T")


class BoundedSeries(Generic[T]):
    """Fixed-capacity ordered sequence that only exposes populated slots."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items: list[T] = []

    @property
    def populated(self) -> int:
        return len(self._items)

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def append(self, item: T) -> None:
        if self.is_full:
            raise OverflowError(f"series is full ({self.capacity} entries)")
        self._items.append(item)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedSeries):
            return NotImplemented
        return self.capacity == other.capacity and self._items == other._items

    def __repr__(self) -> str:
        return f"BoundedSeries(capacity={self.capacity}, populated={self.populated})"


@dataclass(frozen=True)
class HourlyEntry:
    time: Timestamp
    temp: float
    text: str
    icon: str
    category: str  # coarse condition family derived from the icon code


@dataclass(frozen=True)
class DailyEntry:
    temp_max: float
    temp_min: float
    rain: float  # mm
    humidity: float
    pressure: float  # hPa
    date_label: str  # day of month, e.g. "21"
    text: str


def _hourly_series() -> BoundedSeries[HourlyEntry]:
    return BoundedSeries(MAX_HOURLY)


def _daily_series() -> BoundedSeries[DailyEntry]:
    return BoundedSeries(MAX_FORECAST)


@dataclass
class WeatherSnapshot:
    current_time: Timestamp | None = None
    current_text: str = ""
    current_icon: str = ""
    current_temp: int = 0
    current_feels_like: float = 0.0
    current_precip: float = 0.0
    current_humidity: int = 0

    wind_dir: int = 0  # degrees
    wind_dir_label: str = ""
    wind_speed: int = 0  # km/h
    wind_scale: int = 0  # Beaufort

    sunrise: Timestamp | None = None
    sunset: Timestamp | None = None
    moonrise: Timestamp | None = None
    moonset: Timestamp | None = None
    moon_phase: float = 0.0  # [0, 1)
    moon_phase_label: str = ""

    hourly: BoundedSeries[HourlyEntry] = field(default_factory=_hourly_series)
    daily: BoundedSeries[DailyEntry] = field(default_factory=_daily_series)

    max_rain: float = 0.0
    max_temp: float = 0.0
    min_temp: float = 0.0
    max_pressure: float = 0.0
    min_pressure: float = 0.0

    @property
    def is_empty(self) -> bool:
        """True until a poll has committed data into this snapshot."""
        return self.current_time is None

    def visible_daily(self) -> list[DailyEntry]:
        return list(self.daily)[:FORECAST_DAYS_SHOWN]
