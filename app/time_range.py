from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from app.schemas import TimeRange

DEFAULT_WINDOW = timedelta(hours=24)


def current_time(tz_name: str) -> datetime:
    return datetime.now(ZoneInfo(tz_name))


def format_instant(moment: datetime, tz_name: str = 'UTC') -> str:
    """Render an aware or naive datetime as a UTC ISO-8601 instant."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=ZoneInfo(tz_name))
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def resolve_time_range(
    start: str | None,
    end: str | None,
    now: datetime,
    tz_name: str = 'UTC',
) -> TimeRange:
    if not start or not start.strip():
        # no time given at all: last 24 hours, a lone end is dropped
        return TimeRange(
            start=format_instant(now - DEFAULT_WINDOW, tz_name),
            end=format_instant(now, tz_name),
        )
    if not end or not end.strip():
        return TimeRange(start=start, end=format_instant(now, tz_name))
    return TimeRange(start=start, end=end)
