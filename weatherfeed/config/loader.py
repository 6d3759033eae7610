"""YAML config loader with environment fallback and runtime get/set."""

import os
from pathlib import Path
from typing import Any

import yaml

from weatherfeed.config.defaults import API_KEY_ENV
from weatherfeed.config.schema import WeatherConfig


def load_config(path: str | Path) -> WeatherConfig:
    """Load and validate config from a YAML file.

    If ``service.api_key`` is empty, the QWEATHER_API_KEY environment
    variable is used instead.
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    service = raw.get("service") or {}
    if not service.get("api_key"):
        env_key = os.environ.get(API_KEY_ENV, "")
        if env_key:
            service["api_key"] = env_key
    raw["service"] = service

    return WeatherConfig(**raw)


def get_config_value(config: WeatherConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'location.longitude'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: WeatherConfig, dotted_key: str, value: Any) -> WeatherConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new WeatherConfig instance.
    """
    # python-mode dump keeps SecretStr values intact
    data = config.model_dump()
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    old_value = target[parts[-1]]
    if isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return WeatherConfig(**data)
