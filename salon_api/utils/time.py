from datetime import datetime, timezone

def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)

def parse_iso(s: str) -> datetime:
    """Parses an ISO 8601 string, handling 'Z' for UTC."""
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)

def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def epoch_ms(dt: datetime) -> int:
    """Milliseconds since the epoch; naive values are read as UTC."""
    return int(to_utc(dt).timestamp() * 1000)

def db_utc_naive(dt: datetime) -> datetime:
    """Converts a timezone-aware datetime to a naive UTC datetime for DB storage."""
    return to_utc(dt).astimezone(timezone.utc).replace(tzinfo=None)

def api_iso_z(dt: datetime | None) -> str | None:
    """Formats a datetime into an ISO 8601 string ending in 'Z' for API responses."""
    if dt is None:
        return None
    return to_utc(dt).astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

def api_iso_ms(dt: datetime | None) -> str | None:
    """Like api_iso_z but keeps milliseconds, for values compared against the clock."""
    if dt is None:
        return None
    return to_utc(dt).astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def truncate_ms(dt: datetime) -> datetime:
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)
