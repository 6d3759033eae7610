"""Common types and helpers shared across models."""

from dataclasses import dataclass
from datetime import UTC, datetime

YEAR_BASE = 2000


@dataclass(frozen=True)
class Timestamp:
    """Service-local date and time. The source's UTC offset is not applied."""

    year_offset: int  # years since 2000
    month: int
    day: int
    hour: int
    minute: int
    second: int = 0

    @property
    def year(self) -> int:
        return YEAR_BASE + self.year_offset

    def compact_date(self) -> str:
        """Render as YYYYMMDD, the form the astronomy endpoint expects."""
        return f"{self.year:04d}{self.month:02d}{self.day:02d}"

    def format(self, pattern: str) -> str:
        """Render a pattern made of YYYY, MM, DD, hh, mm and ss tokens."""
        out = pattern
        for token, value in (
            ("YYYY", f"{self.year:04d}"),
            ("MM", f"{self.month:02d}"),
            ("DD", f"{self.day:02d}"),
            ("hh", f"{self.hour:02d}"),
            ("mm", f"{self.minute:02d}"),
            ("ss", f"{self.second:02d}"),
        ):
            out = out.replace(token, value)
        return out


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()
