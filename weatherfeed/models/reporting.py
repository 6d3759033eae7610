"""Poll stage and summary models."""

from dataclasses import dataclass
from enum import StrEnum

from weatherfeed.models.snapshot import WeatherSnapshot


class PollStage(StrEnum):
    NOW = "now"
    HOURLY = "hourly"
    DAILY = "daily"
    MOON = "moon"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PollSummary:
    poll_id: str
    started_at: str
    stage: PollStage = PollStage.NOW
    failed_stage: PollStage | None = None
    error_code: str = ""
    error_message: str = ""
    hourly_count: int = 0
    daily_count: int = 0
    duration_seconds: float = 0.0
    # working snapshot of this poll; only committed when stage is DONE
    draft: WeatherSnapshot | None = None

    @property
    def ok(self) -> bool:
        return self.stage == PollStage.DONE
