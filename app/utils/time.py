from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the ``DateTime`` columns we store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
