"""Tests for config loading, environment fallback, and get/set."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from weatherfeed.config.defaults import API_KEY_ENV, DEFAULT_HOST
from weatherfeed.config.loader import get_config_value, load_config, set_config_value
from weatherfeed.config.schema import WeatherConfig


class TestLoadConfig:
    def test_load_from_yaml(self, config_yaml_path: Path):
        config = load_config(config_yaml_path)
        assert config.service.host == "test-qweather.example.com"
        assert config.location.longitude == 121.47
        assert config.poll.interval_minutes == 30
        assert config.service.api_key.get_secret_value() == "yaml-key"

    def test_empty_yaml_uses_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.service.host == DEFAULT_HOST
        assert config.service.api_key.get_secret_value() == ""

    def test_api_key_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        path = tmp_path / "nokey.yaml"
        path.write_text("location:\n  longitude: 10.0\n  latitude: 50.0\n")
        config = load_config(path)
        assert config.service.api_key.get_secret_value() == "env-key"

    def test_yaml_key_wins_over_env(self, config_yaml_path: Path, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        config = load_config(config_yaml_path)
        assert config.service.api_key.get_secret_value() == "yaml-key"

    def test_invalid_values_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        with open(path, "w") as f:
            yaml.dump({"location": {"longitude": 500.0}}, f)
        with pytest.raises(ValidationError):
            load_config(path)

    def test_shipped_default_config(self):
        path = Path(__file__).parents[3] / "ops" / "configs" / "default.yaml"
        config = load_config(path)
        assert config.service.host == DEFAULT_HOST
        assert config.poll.buffer_size == 8192

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestGetSetConfig:
    def test_get_value(self, default_config: WeatherConfig):
        assert get_config_value(default_config, "location.latitude") == 39.90498
        assert get_config_value(default_config, "poll.buffer_size") == 8192

    def test_get_unknown_key(self, default_config: WeatherConfig):
        with pytest.raises(KeyError):
            get_config_value(default_config, "location.altitude")

    def test_set_value_coerces_and_revalidates(self, default_config: WeatherConfig):
        new = set_config_value(default_config, "poll.interval_minutes", "15")
        assert new.poll.interval_minutes == 15
        assert default_config.poll.interval_minutes == 60

    def test_set_float(self, default_config: WeatherConfig):
        new = set_config_value(default_config, "location.longitude", "13.4")
        assert new.location.longitude == 13.4

    def test_set_preserves_api_key(self, default_config: WeatherConfig):
        new = set_config_value(default_config, "service.lang", "en")
        assert new.service.lang == "en"
        assert new.service.api_key.get_secret_value() == "test-key"

    def test_set_invalid_value(self, default_config: WeatherConfig):
        with pytest.raises(ValidationError):
            set_config_value(default_config, "location.latitude", "95")

    def test_set_unknown_key(self, default_config: WeatherConfig):
        with pytest.raises(KeyError):
            set_config_value(default_config, "poll.jitter", "5")
