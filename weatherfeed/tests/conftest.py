"""Shared test fixtures."""

import gzip
import json
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest
import respx
import yaml

from weatherfeed.config.schema import LocationConfig, ServiceConfig, WeatherConfig
from weatherfeed.ingest.document import Document

FIXTURE_DIR = Path(__file__).parent / "fixtures"
QWEATHER_BASE = "https://test-qweather.example.com"

ENDPOINT_FIXTURES = {
    "/v7/weather/now": "qweather_now.json",
    "/v7/weather/24h": "qweather_24h.json",
    "/v7/weather/7d": "qweather_7d.json",
    "/v7/astronomy/moon": "qweather_moon.json",
}


def load_fixture(name: str) -> dict:
    with open(FIXTURE_DIR / name) as f:
        return json.load(f)


def gzip_payload(data: dict | bytes) -> bytes:
    """Compress a document the way the service frames it (10-byte header)."""
    if isinstance(data, dict):
        data = json.dumps(data).encode("utf-8")
    return gzip.compress(data, mtime=0)


def gzip_response(data: dict | bytes) -> httpx.Response:
    payload = gzip_payload(data)
    return httpx.Response(
        200,
        headers={"Content-Encoding": "gzip", "Content-Length": str(len(payload))},
        stream=httpx.ByteStream(payload),
    )


@pytest.fixture
def default_config() -> WeatherConfig:
    """Return a WeatherConfig pointed at the mocked test host."""
    return WeatherConfig(
        service=ServiceConfig(host="test-qweather.example.com", api_key="test-key"),
        location=LocationConfig(longitude=116.40528, latitude=39.90498),
    )


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "service": {"host": "test-qweather.example.com", "api_key": "yaml-key"},
        "location": {"longitude": 121.47, "latitude": 31.23},
        "poll": {"interval_minutes": 30},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def now_doc() -> Document:
    return Document(load_fixture("qweather_now.json"))


@pytest.fixture
def hourly_doc() -> Document:
    return Document(load_fixture("qweather_24h.json"))


@pytest.fixture
def daily_doc() -> Document:
    return Document(load_fixture("qweather_7d.json"))


@pytest.fixture
def moon_doc() -> Document:
    return Document(load_fixture("qweather_moon.json"))


@pytest.fixture
def make_payload() -> Callable[[dict | bytes], bytes]:
    return gzip_payload


@pytest.fixture
def qweather_routes() -> Iterator[dict[str, respx.Route]]:
    """Mock all four endpoints with the JSON fixtures, keyed by path.

    Each call gets a fresh gzip response, so routes can be hit by
    several polls in one test.
    """
    with respx.mock(assert_all_called=False) as router:
        routes = {}
        for path, name in ENDPOINT_FIXTURES.items():
            body = load_fixture(name)
            routes[path] = router.get(f"{QWEATHER_BASE}{path}").mock(
                side_effect=lambda request, body=body: gzip_response(body)
            )
        yield routes
