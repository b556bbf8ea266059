"""UTC helpers shared by models and the attention rules."""

from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | date | str | None) -> datetime | None:
    """Coerce a stored or client-supplied timestamp to an aware UTC datetime.

    Naive datetimes (SQLite hands these back) are taken to be UTC; a bare date
    means midnight UTC. Anything unparseable yields None instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return None


def whole_days(delta_seconds: float) -> int:
    """Floor a duration in seconds to whole days (negative durations round down)."""
    return int(delta_seconds // 86400)
