"""Parse the service's fixed-format date and time tokens.

Two grammars are accepted:

* a date token ``YYYY-MM-DD`` (longer tokens are fine, only the first ten
  characters are read) paired with a time token ``hh:mm``;
* a combined token ``YYYY-MM-DDThh:mm+hh:mm`` whose time starts at
  position 11.

Only the fixed digit positions are consumed. The UTC offset suffix is
ignored, so the result is in the service's local time.
"""

from calendar import monthrange

from weatherfeed.ingest.errors import MalformedTimestamp
from weatherfeed.models.common import YEAR_BASE, Timestamp

DATE_LENGTH = 10  # YYYY-MM-DD
TIME_LENGTH = 5  # hh:mm
COMBINED_TIME_START = 11

_YEAR_OFFSET_POS = 2
_MONTH_POS = 5
_DAY_POS = 8
_HOUR_POS = 0
_MINUTE_POS = 3


def _two_digits(token: str, pos: int) -> int:
    pair = token[pos:pos + 2]
    if len(pair) != 2 or not (pair.isascii() and pair.isdigit()):
        raise MalformedTimestamp(token, f"expected two digits at position {pos}")
    return int(pair)


def _check_range(token: str, name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise MalformedTimestamp(token, f"{name} {value} outside {low}..{high}")


def parse_timestamp(date_token: str, time_token: str) -> Timestamp:
    if len(date_token) < DATE_LENGTH:
        raise MalformedTimestamp(date_token, "date token shorter than YYYY-MM-DD")
    if len(time_token) < TIME_LENGTH:
        raise MalformedTimestamp(time_token, "time token shorter than hh:mm")

    year_offset = _two_digits(date_token, _YEAR_OFFSET_POS)
    month = _two_digits(date_token, _MONTH_POS)
    day = _two_digits(date_token, _DAY_POS)
    hour = _two_digits(time_token, _HOUR_POS)
    minute = _two_digits(time_token, _MINUTE_POS)

    _check_range(date_token, "month", month, 1, 12)
    _check_range(date_token, "day", day, 1, monthrange(YEAR_BASE + year_offset, month)[1])
    _check_range(time_token, "hour", hour, 0, 23)
    _check_range(time_token, "minute", minute, 0, 59)

    return Timestamp(
        year_offset=year_offset,
        month=month,
        day=day,
        hour=hour,
        minute=minute,
        second=0,
    )


def parse_combined_timestamp(token: str) -> Timestamp:
    """Parse ``2021-09-19T10:52+08:00`` style tokens."""
    return parse_timestamp(token, token[COMBINED_TIME_START:])
