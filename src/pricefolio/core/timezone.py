"""Time utilities: epoch-millisecond clock and UTC conversions."""

import time
from datetime import datetime
from typing import Callable, Union

import pytz
from dateutil import parser as date_parser

UTC = pytz.utc

MS_PER_DAY = 24 * 60 * 60 * 1000

# Callable returning "now" as epoch milliseconds; injected into services
Clock = Callable[[], int]


def now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return int(time.time() * 1000)


def now_utc() -> datetime:
    """Return current time in UTC."""
    return datetime.now(UTC)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive datetimes are assumed UTC)."""
    if dt.tzinfo is None:
        dt = UTC.localize(dt)
    return int(dt.timestamp() * 1000)


def parse_timestamp(value: Union[str, int, float, datetime]) -> int:
    """
    Parse a timestamp into epoch milliseconds.

    Accepts epoch milliseconds, datetimes and date/datetime strings.
    Strings without a timezone are assumed to be UTC.
    """
    if isinstance(value, datetime):
        return to_epoch_ms(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return to_epoch_ms(date_parser.parse(text))
