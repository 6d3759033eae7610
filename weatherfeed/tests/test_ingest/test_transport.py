"""Tests for the QWeather transport with mocked httpx."""

from unittest.mock import patch

import httpx
import pytest
import respx

from weatherfeed.ingest.errors import (
    ConnectError,
    ErrorCode,
    HttpStatusError,
    IncompleteBodyError,
)
from weatherfeed.ingest.transport import QWeatherTransport

BASE = "https://test-qweather.example.com"
URI = "/v7/weather/now?location=116.40528,39.90498&unit=m&lang=cn&key=secret"


class _BrokenStream(httpx.SyncByteStream):
    """Yields one chunk and then drops the connection."""

    def __iter__(self):
        yield b"\x1f\x8b\x08"
        raise httpx.ReadTimeout("connection dropped mid-body")


@pytest.fixture
def transport() -> QWeatherTransport:
    return QWeatherTransport(host="test-qweather.example.com", timeout=1.0)


def _gzip_response(payload: bytes, **headers: str) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"Content-Encoding": "gzip", **headers},
        stream=httpx.ByteStream(payload),
    )


class TestFetch:
    @respx.mock
    def test_body_returned_undecoded(self, transport: QWeatherTransport, make_payload):
        payload = make_payload({"code": "200"})
        respx.get(f"{BASE}/v7/weather/now").mock(return_value=_gzip_response(payload))

        raw = transport.fetch(URI)
        assert raw.body == payload
        assert raw.body[:2] == b"\x1f\x8b"
        assert raw.declared_length == len(payload)

    @respx.mock
    def test_declared_length_from_header(self, transport: QWeatherTransport, make_payload):
        payload = make_payload({"code": "200"})
        respx.get(f"{BASE}/v7/weather/now").mock(
            return_value=_gzip_response(payload, **{"Content-Length": str(len(payload))})
        )
        raw = transport.fetch(URI)
        assert raw.declared_length == len(payload)

    @respx.mock
    def test_invalid_content_length_falls_back(self, transport: QWeatherTransport, make_payload):
        payload = make_payload({"code": "200"})
        respx.get(f"{BASE}/v7/weather/now").mock(
            return_value=_gzip_response(payload, **{"Content-Length": "lots"})
        )
        raw = transport.fetch(URI)
        assert raw.declared_length == len(payload)

    @respx.mock
    def test_request_shape(self, transport: QWeatherTransport, make_payload):
        route = respx.get(f"{BASE}/v7/weather/now").mock(
            return_value=_gzip_response(make_payload({"code": "200"}))
        )
        transport.fetch(URI)

        assert route.called
        request = route.calls[0].request
        assert "weatherfeed" in request.headers["user-agent"]
        assert request.headers["accept-encoding"] == "gzip"
        assert request.url.params["location"] == "116.40528,39.90498"
        assert request.url.params["key"] == "secret"

    def test_base_url_port(self):
        assert QWeatherTransport("h.example.com").base_url == "https://h.example.com"
        assert QWeatherTransport("h.example.com", port=8443).base_url == "https://h.example.com:8443"


class TestFetchErrors:
    @respx.mock
    @pytest.mark.parametrize("status", [401, 403, 404, 500, 503])
    def test_http_status(self, transport: QWeatherTransport, status: int):
        respx.get(f"{BASE}/v7/weather/now").mock(return_value=httpx.Response(status))
        with pytest.raises(HttpStatusError) as exc_info:
            transport.fetch(URI)
        assert exc_info.value.status_code == status
        assert exc_info.value.code == ErrorCode.HTTP_STATUS_ERROR
        assert "secret" not in str(exc_info.value)

    @respx.mock
    def test_connect_failure(self, transport: QWeatherTransport):
        respx.get(f"{BASE}/v7/weather/now").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        with pytest.raises(ConnectError) as exc_info:
            transport.fetch(URI)
        assert exc_info.value.code == ErrorCode.CONNECT_ERROR
        assert exc_info.value.path == "/v7/weather/now"

    @respx.mock
    def test_body_read_failure(self, transport: QWeatherTransport):
        respx.get(f"{BASE}/v7/weather/now").mock(
            return_value=httpx.Response(200, stream=_BrokenStream())
        )
        with pytest.raises(IncompleteBodyError) as exc_info:
            transport.fetch(URI)
        assert exc_info.value.code == ErrorCode.INCOMPLETE_BODY

    def test_missing_ca_certificate(self, tmp_path):
        transport = QWeatherTransport(
            host="test-qweather.example.com",
            ca_cert=str(tmp_path / "missing.pem"),
        )
        with pytest.raises(ConnectError, match="CA certificate"):
            transport.fetch(URI)


class TestClientLifecycle:
    @pytest.fixture
    def exits(self):
        """Record every httpx.Client that leaves its ``with`` block."""
        closed = []
        original_exit = httpx.Client.__exit__

        def spy(client, *exc_info):
            closed.append(client)
            return original_exit(client, *exc_info)

        with patch.object(httpx.Client, "__exit__", spy):
            yield closed

    @respx.mock
    def test_closed_after_success(self, transport: QWeatherTransport, make_payload, exits):
        respx.get(f"{BASE}/v7/weather/now").mock(
            return_value=_gzip_response(make_payload({"code": "200"}))
        )
        transport.fetch(URI)
        assert len(exits) == 1
        assert exits[0].is_closed

    @respx.mock
    @pytest.mark.parametrize("mock_kwargs,error", [
        ({"return_value": httpx.Response(500)}, HttpStatusError),
        ({"side_effect": httpx.ConnectError("connection refused")}, ConnectError),
        ({"return_value": httpx.Response(200, stream=_BrokenStream())}, IncompleteBodyError),
    ])
    def test_closed_on_failure(self, transport: QWeatherTransport, exits, mock_kwargs, error):
        respx.get(f"{BASE}/v7/weather/now").mock(**mock_kwargs)
        with pytest.raises(error):
            transport.fetch(URI)
        assert len(exits) == 1
        assert exits[0].is_closed

    @respx.mock
    def test_new_client_per_fetch(self, transport: QWeatherTransport, make_payload, exits):
        respx.get(f"{BASE}/v7/weather/now").mock(
            side_effect=lambda request: _gzip_response(make_payload({"code": "200"}))
        )
        transport.fetch(URI)
        transport.fetch(URI)
        assert len(exits) == 2
        assert exits[0] is not exits[1]


class TestTimeouts:
    @respx.mock
    def test_configured_timeout_applied(self, make_payload):
        transport = QWeatherTransport(host="test-qweather.example.com", timeout=2.5)
        route = respx.get(f"{BASE}/v7/weather/now").mock(
            return_value=_gzip_response(make_payload({"code": "200"}))
        )
        transport.fetch(URI)

        timeout = route.calls[0].request.extensions["timeout"]
        assert timeout["connect"] == 2.5
        assert timeout["read"] == 2.5

    @respx.mock
    def test_connect_timeout(self, transport: QWeatherTransport):
        respx.get(f"{BASE}/v7/weather/now").mock(
            side_effect=httpx.ConnectTimeout("timed out")
        )
        with pytest.raises(ConnectError) as exc_info:
            transport.fetch(URI)
        assert exc_info.value.code == ErrorCode.CONNECT_ERROR
        assert "timed out" in str(exc_info.value)
