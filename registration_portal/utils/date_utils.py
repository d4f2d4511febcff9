"""Date and time formatting helpers for registration records."""
import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso_timestamp(moment: datetime) -> str:
    """
    Render an instant as ISO 8601 UTC with millisecond precision.

    Args:
        moment: Aware or naive datetime (naive is assumed UTC)

    Returns:
        str: e.g. "2026-10-19T15:04:05.123Z"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def format_registration_date(moment: datetime) -> str:
    """
    Long en-US date, e.g. "October 19, 2026".

    Month names are fixed rather than taken from the process locale.
    """
    return f"{MONTH_NAMES[moment.month - 1]} {moment.day}, {moment.year}"


def format_registration_time(moment: datetime) -> str:
    """en-US 12-hour clock time, e.g. "3:04:05 PM"."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def export_date_stamp(moment: Optional[datetime] = None) -> str:
    """YYYY-MM-DD stamp used in export file names."""
    return (moment or utc_now()).strftime("%Y-%m-%d")


def resolve_timezone(name: str) -> Optional[tzinfo]:
    """
    Look up an IANA zone such as "Asia/Karachi".

    Returns:
        The zone, or None for a blank or unknown name (system local time)
    """
    name = (name or "").strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using system local time")
        return None


def to_local(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Convert an instant to wall-clock time for display.

    Args:
        moment: Aware or naive datetime (naive is assumed UTC)
        tz: Target zone; None means the system local zone
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)
