"""Field extractors: map each endpoint's document onto a WeatherSnapshot."""

import logging

from weatherfeed.ingest.document import Document
from weatherfeed.ingest.errors import MalformedTimestamp, MissingField, TypeMismatch
from weatherfeed.ingest.timestamp import (
    DATE_LENGTH,
    parse_combined_timestamp,
    parse_timestamp,
)
from weatherfeed.models.common import Timestamp
from weatherfeed.models.snapshot import DailyEntry, HourlyEntry, WeatherSnapshot

logger = logging.getLogger(__name__)

# QWeather icon code ranges, most specific first
_ICON_CATEGORIES: list[tuple[range, str]] = [
    (range(100, 101), "clear"),
    (range(150, 151), "clear"),
    (range(101, 105), "clouds"),
    (range(151, 154), "clouds"),
    (range(302, 305), "thunderstorm"),
    (range(300, 400), "rain"),
    (range(400, 500), "snow"),
    (range(500, 516), "fog"),
    (range(900, 902), "extreme"),
]


def icon_category(icon: str) -> str:
    """Coarse condition family for a QWeather icon code."""
    try:
        code = int(icon)
    except ValueError:
        return "unknown"
    for codes, category in _ICON_CATEGORIES:
        if code in codes:
            return category
    return "unknown"


def extract_now(doc: Document, snapshot: WeatherSnapshot) -> None:
    now = doc.child("now")
    snapshot.wind_dir = now.get_int("wind360")
    snapshot.wind_dir_label = now.get_str("windDir")
    snapshot.wind_speed = now.get_int("windSpeed")
    snapshot.wind_scale = now.get_int("windScale")
    snapshot.current_time = parse_combined_timestamp(doc.get_str("updateTime"))
    snapshot.current_text = now.get_str("text")
    snapshot.current_temp = int(now.get_float("temp"))  # whole degrees, truncated
    snapshot.current_precip = now.get_float("precip")
    snapshot.current_feels_like = now.get_float("feelsLike")
    snapshot.current_humidity = now.get_int("humidity")
    snapshot.current_icon = now.get_str("icon")
    logger.debug(
        "currentTime:%s, windDir:%d, windSpeed:%d, windScale:%d",
        snapshot.current_time.format("YYYY-MM-DD hh:mm:ss"),
        snapshot.wind_dir, snapshot.wind_speed, snapshot.wind_scale,
    )


def extract_hourly(doc: Document, snapshot: WeatherSnapshot) -> None:
    """Fill the hourly series up to what the service returned, capped at capacity."""
    items = doc.children("hourly")
    series = snapshot.hourly
    series.clear()
    for item in items[: series.capacity]:
        icon = item.get_str("icon")
        series.append(
            HourlyEntry(
                time=parse_combined_timestamp(item.get_str("fxTime")),
                temp=item.get_float("temp"),
                text=item.get_str("text"),
                icon=icon,
                category=icon_category(icon),
            )
        )
    if len(items) > series.capacity:
        logger.info(
            "Service returned %d hourly entries, keeping %d",
            len(items), series.capacity,
        )
    logger.debug("Hourly entries populated: %d", series.populated)


def _date_label(fx_date: str) -> str:
    day = fx_date[8:DATE_LENGTH]
    if len(fx_date) < DATE_LENGTH or not (day.isascii() and day.isdigit()):
        raise MalformedTimestamp(fx_date, "expected YYYY-MM-DD")
    return day


def _event_time(day: Document, fx_date: str, key: str) -> Timestamp | None:
    """Combine a day's date with one of its hh:mm event fields.

    The service sends an empty string when the event does not happen that
    day (common for moonrise/moonset); that maps to None.
    """
    value = day.get_str(key)
    if not value:
        logger.info("No %s on %s", key, fx_date)
        return None
    return parse_timestamp(fx_date, value)


def extract_daily(doc: Document, snapshot: WeatherSnapshot) -> None:
    """Fill the daily series and fold the forecast extremes.

    Extremes fold over the populated days only and are seeded from day 0.
    """
    items = doc.children("daily")
    if not items:
        raise MissingField("daily.0")

    series = snapshot.daily
    series.clear()
    for i, item in enumerate(items[: series.capacity]):
        entry = DailyEntry(
            temp_max=item.get_float("tempMax"),
            temp_min=item.get_float("tempMin"),
            rain=item.get_float("precip"),
            humidity=item.get_float("humidity"),
            pressure=item.get_float("pressure"),
            date_label=_date_label(item.get_str("fxDate")),
            text=item.get_str("textDay"),
        )
        series.append(entry)

        if i == 0:
            snapshot.max_rain = entry.rain
            snapshot.max_temp = entry.temp_max
            snapshot.min_temp = entry.temp_min
            snapshot.max_pressure = entry.pressure
            snapshot.min_pressure = entry.pressure
        else:
            snapshot.max_rain = max(snapshot.max_rain, entry.rain)
            snapshot.max_temp = max(snapshot.max_temp, entry.temp_max)
            snapshot.min_temp = min(snapshot.min_temp, entry.temp_min)
            snapshot.max_pressure = max(snapshot.max_pressure, entry.pressure)
            snapshot.min_pressure = min(snapshot.min_pressure, entry.pressure)

        logger.debug(
            "daily[%d]: tempMax:%.2f, tempMin:%.2f, precip:%.2f, humidity:%.2f, pressure:%.2f",
            i, entry.temp_max, entry.temp_min, entry.rain,
            entry.humidity, entry.pressure,
        )

    logger.info(
        "maxTemp:%.2f, minTemp:%.2f, maxRain:%.2f, maxPressure:%.2f, minPressure:%.2f",
        snapshot.max_temp, snapshot.min_temp, snapshot.max_rain,
        snapshot.max_pressure, snapshot.min_pressure,
    )

    day0 = items[0]
    fx_date = day0.get_str("fxDate")
    snapshot.sunrise = parse_timestamp(fx_date, day0.get_str("sunrise"))
    snapshot.sunset = parse_timestamp(fx_date, day0.get_str("sunset"))
    snapshot.moonrise = _event_time(day0, fx_date, "moonrise")
    snapshot.moonset = _event_time(day0, fx_date, "moonset")


def extract_moon(doc: Document, snapshot: WeatherSnapshot) -> None:
    phases = doc.children("moonPhase")
    if not phases:
        raise MissingField("moonPhase.0")
    first = phases[0]
    value = first.get_float("value")
    if not 0.0 <= value < 1.0:
        raise TypeMismatch("moonPhase.0.value", "phase in [0, 1)", repr(value))
    snapshot.moon_phase = value
    snapshot.moon_phase_label = first.get_str("name")
