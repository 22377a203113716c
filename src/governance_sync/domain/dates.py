from __future__ import annotations

from datetime import UTC, date, datetime

DAY_FORMAT = "%b %d, %Y"
TIME_FORMAT = "%I:%M:%S %p"
EVENT_TIME_FORMAT = "%I:%M %p"
ZONE_SUFFIX = " UTC"


def _to_utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(int(timestamp), tz=UTC)


def _day(moment: datetime) -> str:
    # en-US style: the day of month is never zero-padded ("May 5, 2024").
    return f"{moment:%b} {moment.day}, {moment:%Y}"


def format_day(timestamp: int) -> str:
    return _day(_to_utc(timestamp)) + ZONE_SUFFIX


def format_day_with_time(timestamp: int) -> str:
    moment = _to_utc(timestamp)
    return f"{_day(moment)}, {moment.strftime(TIME_FORMAT)}{ZONE_SUFFIX}"


def format_event_date(timestamp: int) -> str:
    moment = _to_utc(timestamp)
    return f"{_day(moment)}, {moment.strftime(EVENT_TIME_FORMAT)}{ZONE_SUFFIX}"


def parse_day(formatted: str) -> date:
    """Inverse of ``format_day``; raises ValueError on anything else."""
    return datetime.strptime(formatted.removesuffix(ZONE_SUFFIX).strip(), DAY_FORMAT).date()


def parse_filter_date(raw: str) -> date:
    """Parse an ISO-8601 date or datetime supplied as a listing filter bound."""
    return datetime.fromisoformat(raw.strip()).date()
