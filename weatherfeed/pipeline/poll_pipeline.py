"""Poll pipeline: fetch, decode, parse and extract the four QWeather endpoints."""

import logging
import time
import uuid
from collections.abc import Callable

from weatherfeed.config.defaults import ENDPOINT_PATHS
from weatherfeed.config.schema import WeatherConfig
from weatherfeed.ingest.decoder import PayloadDecoder
from weatherfeed.ingest.document import Document, materialize
from weatherfeed.ingest.errors import MissingField, WeatherFeedError
from weatherfeed.ingest.extractors import (
    extract_daily,
    extract_hourly,
    extract_moon,
    extract_now,
)
from weatherfeed.ingest.transport import QWeatherTransport
from weatherfeed.models.common import utc_now_iso
from weatherfeed.models.reporting import PollStage, PollSummary
from weatherfeed.models.request import Endpoint, RequestDescriptor
from weatherfeed.models.snapshot import WeatherSnapshot
from weatherfeed.reporting.formatters import format_summary_text
from weatherfeed.reporting.poll_summarizer import PollSummarizer

logger = logging.getLogger(__name__)

Extractor = Callable[[Document, WeatherSnapshot], None]

# Fixed order; the moon request needs the date resolved by the NOW stage.
STAGES: list[tuple[PollStage, Endpoint, Extractor]] = [
    (PollStage.NOW, Endpoint.NOW, extract_now),
    (PollStage.HOURLY, Endpoint.HOURLY, extract_hourly),
    (PollStage.DAILY, Endpoint.DAILY, extract_daily),
    (PollStage.MOON, Endpoint.MOON, extract_moon),
]


class PollPipeline:
    """Owns the committed snapshot and refreshes it one poll at a time.

    Each poll fills a fresh working snapshot. It replaces ``self.snapshot``
    only when all four stages succeed; on failure the previous snapshot
    stays in place and the partial draft is handed back in the summary.
    """

    def __init__(
        self,
        config: WeatherConfig,
        transport: QWeatherTransport | None = None,
        decoder: PayloadDecoder | None = None,
    ):
        self.config = config
        self.transport = transport or QWeatherTransport(
            host=config.service.host,
            port=config.service.port,
            timeout=config.service.timeout_seconds,
            ca_cert=config.service.ca_cert,
        )
        self.decoder = decoder or PayloadDecoder(config.poll.buffer_size)
        self.snapshot = WeatherSnapshot()
        self.last_summary: PollSummary | None = None

    def build_request(self, endpoint: Endpoint, draft: WeatherSnapshot) -> RequestDescriptor:
        date = None
        if endpoint == Endpoint.MOON:
            if draft.current_time is None:
                raise MissingField("updateTime")
            date = draft.current_time.compact_date()

        service = self.config.service
        location = self.config.location
        return RequestDescriptor(
            path=ENDPOINT_PATHS[endpoint],
            longitude=location.longitude,
            latitude=location.latitude,
            unit=service.unit,
            lang=service.lang,
            api_key=service.api_key.get_secret_value(),
            date=date,
        )

    def fetch_document(self, request: RequestDescriptor) -> Document:
        raw = self.transport.fetch(request.uri())
        payload = self.decoder.decode(raw.body, raw.declared_length)
        return materialize(payload)

    def run(self) -> PollSummary:
        """Execute one poll cycle. Stops at the first failing stage."""
        start_time = time.monotonic()
        summarizer = PollSummarizer(str(uuid.uuid4()), utc_now_iso())
        draft = WeatherSnapshot()

        for stage, endpoint, extract in STAGES:
            summarizer.record_stage(stage)
            try:
                request = self.build_request(endpoint, draft)
                document = self.fetch_document(request)
                extract(document, draft)
            except WeatherFeedError as e:
                logger.error(
                    "Poll failed at stage %s: %s: %s",
                    stage.value, e.code.value, e,
                )
                summarizer.record_failure(stage, e)
                break
            logger.info("Stage %s OK", stage.value)
        else:
            summarizer.record_stage(PollStage.DONE)
            self.snapshot = draft

        summarizer.record_duration(time.monotonic() - start_time)
        summary = summarizer.finalize(draft)
        self.last_summary = summary
        logger.info("\n%s", format_summary_text(summary))
        return summary
