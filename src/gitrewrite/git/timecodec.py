"""Conversion between aware datetimes and git's native timestamps.

git stores a timestamp as whole epoch seconds plus the author's UTC offset.
The offset is kept verbatim in both directions so two authors committing at
the same instant from different timezones stay distinguishable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from ..errors import InvalidTimestamp

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)


@dataclass(frozen=True, slots=True)
class EngineTime:
    """A git timestamp: epoch seconds and minutes east of UTC."""

    seconds: int
    offset_minutes: int

    @classmethod
    def from_altz(cls, seconds: int, altz: int) -> "EngineTime":
        """Build from GitPython's pair, whose offset is in seconds *west* of UTC."""
        return cls(seconds=int(seconds), offset_minutes=-int(altz) // 60)

    def to_git_date(self) -> str:
        """Render git's internal date format, e.g. ``1700000000 +0530``."""
        return f"{self.seconds} {format_offset(self.offset_minutes)}"


def format_offset(offset_minutes: int) -> str:
    """Return ``offset_minutes`` as ``+HHMM`` or ``-HHMM``."""
    sign = "-" if offset_minutes < 0 else "+"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def to_engine_time(date: datetime) -> EngineTime:
    """Convert an aware datetime to git's (seconds, offset) representation.

    Sub-second precision is dropped since git records whole seconds.
    """
    offset = date.utcoffset()
    if offset is None:
        raise InvalidTimestamp(f"Timestamp has no UTC offset: {date.isoformat()}")
    seconds = (date - _EPOCH) // _ONE_SECOND
    return EngineTime(seconds=seconds, offset_minutes=offset // timedelta(minutes=1))


def from_engine_time(time: EngineTime) -> datetime:
    """Convert git's (seconds, offset) pair back to an aware datetime.

    Raises
    ------
    InvalidTimestamp
        If the offset is not a valid fixed offset or the seconds fall outside
        the range of representable dates.
    """
    try:
        tz = timezone(timedelta(minutes=time.offset_minutes))
    except (ValueError, OverflowError) as e:
        raise InvalidTimestamp(
            f"Invalid timezone offset: {time.offset_minutes} minutes",
            offset_minutes=time.offset_minutes,
        ) from e

    try:
        return (_EPOCH + timedelta(seconds=time.seconds)).astimezone(tz)
    except (ValueError, OverflowError) as e:
        raise InvalidTimestamp(
            f"Invalid commit timestamp: {time.seconds}",
            seconds=time.seconds,
        ) from e
