"""Output formatters for poll summaries and weather snapshots."""

import json
from typing import Any

from weatherfeed.models.common import Timestamp
from weatherfeed.models.reporting import PollSummary
from weatherfeed.models.snapshot import WeatherSnapshot

DATETIME_FORMAT = "DD.MM.YYYY hh:mm:ss"


def _ts(value: Timestamp | None, pattern: str = DATETIME_FORMAT) -> str:
    return value.format(pattern) if value is not None else "-"


def _ts_iso(value: Timestamp | None) -> str | None:
    return value.format("YYYY-MM-DDThh:mm:ss") if value is not None else None


def format_summary_text(s: PollSummary) -> str:
    """Plain text summary for logging."""
    status = "OK" if s.ok else f"FAILED at {s.failed_stage}"
    lines = [
        f"=== Poll {s.poll_id[:8]} {status} ===",
        f"Hourly entries: {s.hourly_count} | Daily entries: {s.daily_count}",
    ]
    if not s.ok:
        lines.append(f"Error: {s.error_code}: {s.error_message}")
    lines.append(f"Duration: {s.duration_seconds:.1f}s")
    return "\n".join(lines)


def summary_to_dict(s: PollSummary) -> dict[str, Any]:
    return {
        "poll_id": s.poll_id,
        "started_at": s.started_at,
        "ok": s.ok,
        "stage": s.stage.value,
        "failed_stage": s.failed_stage.value if s.failed_stage else None,
        "error_code": s.error_code,
        "error_message": s.error_message,
        "hourly_count": s.hourly_count,
        "daily_count": s.daily_count,
        "duration_seconds": s.duration_seconds,
    }


def format_poll_json(s: PollSummary, snap: WeatherSnapshot) -> str:
    """Poll outcome plus the committed snapshot, for programmatic consumption."""
    data = {"summary": summary_to_dict(s), "snapshot": snapshot_to_dict(snap)}
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_snapshot_text(snap: WeatherSnapshot) -> str:
    """Human-readable dump of every snapshot field."""
    if snap.is_empty:
        return "No weather data yet"

    lines = [
        f"DateTime: {_ts(snap.current_time)}",
        f"Now: {snap.current_text} ({snap.current_icon}) {snap.current_temp}°C, "
        f"feels like {snap.current_feels_like:.0f}°C, "
        f"humidity {snap.current_humidity}%, precip {snap.current_precip:.1f}mm",
        f"Wind: {snap.wind_dir_label} {snap.wind_dir}° "
        f"{snap.wind_speed}km/h scale {snap.wind_scale}",
        f"Sunrise: {_ts(snap.sunrise)}",
        f"Sunset: {_ts(snap.sunset)}",
        f"MoonRise: {_ts(snap.moonrise)}",
        f"MoonSet: {_ts(snap.moonset)}",
        f"Moon: {snap.moon_phase_label} ({snap.moon_phase:.2f})",
        f"Range: {snap.min_temp:.0f}..{snap.max_temp:.0f}°C, "
        f"{snap.min_pressure:.0f}..{snap.max_pressure:.0f}hPa, "
        f"max rain {snap.max_rain:.1f}mm",
        f"Hourly ({snap.hourly.populated}):",
    ]
    for h in snap.hourly:
        lines.append(f"  {h.time.format('hh:mm')} {h.temp:5.1f}°C {h.text} [{h.category}]")
    lines.append(f"Daily ({snap.daily.populated}):")
    for d in snap.daily:
        lines.append(
            f"  {d.date_label} {d.temp_min:.0f}..{d.temp_max:.0f}°C "
            f"rain {d.rain:.1f}mm {d.pressure:.0f}hPa {d.text}"
        )
    return "\n".join(lines)


def snapshot_to_dict(snap: WeatherSnapshot) -> dict[str, Any]:
    return {
        "current": {
            "time": _ts_iso(snap.current_time),
            "text": snap.current_text,
            "icon": snap.current_icon,
            "temp": snap.current_temp,
            "feels_like": snap.current_feels_like,
            "precip": snap.current_precip,
            "humidity": snap.current_humidity,
            "wind_dir": snap.wind_dir,
            "wind_dir_label": snap.wind_dir_label,
            "wind_speed": snap.wind_speed,
            "wind_scale": snap.wind_scale,
        },
        "astronomy": {
            "sunrise": _ts_iso(snap.sunrise),
            "sunset": _ts_iso(snap.sunset),
            "moonrise": _ts_iso(snap.moonrise),
            "moonset": _ts_iso(snap.moonset),
            "moon_phase": snap.moon_phase,
            "moon_phase_label": snap.moon_phase_label,
        },
        "hourly": [
            {
                "time": _ts_iso(h.time),
                "temp": h.temp,
                "text": h.text,
                "icon": h.icon,
                "category": h.category,
            }
            for h in snap.hourly
        ],
        "daily": [
            {
                "date_label": d.date_label,
                "temp_max": d.temp_max,
                "temp_min": d.temp_min,
                "rain": d.rain,
                "humidity": d.humidity,
                "pressure": d.pressure,
                "text": d.text,
            }
            for d in snap.daily
        ],
        "extremes": {
            "max_rain": snap.max_rain,
            "max_temp": snap.max_temp,
            "min_temp": snap.min_temp,
            "max_pressure": snap.max_pressure,
            "min_pressure": snap.min_pressure,
        },
    }
