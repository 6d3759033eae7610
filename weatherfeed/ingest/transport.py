"""QWeather HTTPS transport: one GET per call, raw body, connection always closed."""

import logging
import ssl
from dataclasses import dataclass

import httpx

from weatherfeed.ingest.errors import ConnectError, HttpStatusError, IncompleteBodyError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "weatherfeed/0.1.0"


@dataclass(frozen=True)
class RawResponse:
    body: bytes
    declared_length: int


def _declared_length(resp: httpx.Response, received: int) -> int:
    header = resp.headers.get("Content-Length")
    if header is None:
        return received
    try:
        return int(header)
    except ValueError:
        logger.warning("Ignoring invalid Content-Length %r", header)
        return received


class QWeatherTransport:
    def __init__(
        self,
        host: str,
        port: int = 443,
        timeout: float = 10.0,
        ca_cert: str | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.ca_cert = ca_cert
        self.user_agent = user_agent

    @property
    def base_url(self) -> str:
        if self.port == 443:
            return f"https://{self.host}"
        return f"https://{self.host}:{self.port}"

    def _verify(self) -> ssl.SSLContext | bool:
        if self.ca_cert is None:
            return True
        return ssl.create_default_context(cafile=self.ca_cert)

    def fetch(self, uri: str) -> RawResponse:
        """GET ``uri`` and return the body exactly as sent.

        The body is read with ``iter_raw`` so a gzip Content-Encoding is not
        undone here; framing and inflation belong to the payload decoder.
        """
        path = uri.split("?", 1)[0]  # query carries the API key, keep it out of logs
        url = f"{self.base_url}{uri}"
        headers = {"User-Agent": self.user_agent, "Accept-Encoding": "gzip"}

        try:
            verify = self._verify()
        except OSError as e:
            raise ConnectError(path, f"cannot load CA certificate {self.ca_cert}: {e}") from e

        logger.debug("GET %s%s", self.base_url, path)
        with httpx.Client(verify=verify, timeout=self.timeout, headers=headers) as client:
            try:
                with client.stream("GET", url) as resp:
                    if not resp.is_success:
                        logger.error("QWeather %s returned %d", path, resp.status_code)
                        raise HttpStatusError(resp.status_code, path)
                    try:
                        body = b"".join(resp.iter_raw())
                    except httpx.TransportError as e:
                        logger.error("QWeather %s body read failed: %s", path, e)
                        raise IncompleteBodyError(path, str(e)) from e
                    declared = _declared_length(resp, len(body))
            except httpx.TransportError as e:
                logger.error("QWeather %s request failed: %s", path, e)
                raise ConnectError(path, str(e)) from e

        logger.debug("QWeather %s: %d bytes (declared %d)", path, len(body), declared)
        return RawResponse(body=body, declared_length=declared)
