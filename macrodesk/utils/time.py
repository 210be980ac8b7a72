"""Time utilities (UTC)."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def to_utc_iso(dt: datetime) -> str:
    """ISO string with offset; naive values are assumed UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def iso_day(value: str) -> str:
    """Calendar-day part of an ISO-8601 timestamp ("2024-03-01T10:00:00Z" -> "2024-03-01")."""
    return (value or "").split("T")[0]


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 date or timestamp for sorting.

    Accepts trailing "Z" and bare dates; unparseable values sort first.
    """
    raw = (value or "").strip()
    if not raw:
        return datetime.min.replace(tzinfo=timezone.utc)
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(raw[:10]), datetime.min.time())
        except ValueError:
            return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
