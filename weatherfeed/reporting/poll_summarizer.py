"""Poll summarizer: tracks stage progress and failures into a PollSummary."""

from weatherfeed.ingest.errors import WeatherFeedError
from weatherfeed.models.reporting import PollStage, PollSummary
from weatherfeed.models.snapshot import WeatherSnapshot


class PollSummarizer:
    def __init__(self, poll_id: str, started_at: str):
        self.summary = PollSummary(poll_id=poll_id, started_at=started_at)

    def record_stage(self, stage: PollStage) -> None:
        self.summary.stage = stage

    def record_failure(self, stage: PollStage, error: WeatherFeedError) -> None:
        self.summary.stage = PollStage.FAILED
        self.summary.failed_stage = stage
        self.summary.error_code = error.code.value
        self.summary.error_message = str(error)

    def record_duration(self, seconds: float) -> None:
        self.summary.duration_seconds = seconds

    def finalize(self, draft: WeatherSnapshot) -> PollSummary:
        self.summary.draft = draft
        self.summary.hourly_count = draft.hourly.populated
        self.summary.daily_count = draft.daily.populated
        return self.summary
