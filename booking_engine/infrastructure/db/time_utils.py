from __future__ import annotations

from datetime import datetime, timezone


def to_utc_naive(value: datetime) -> datetime:
    """Instants are stored as naive UTC so SQLite and Postgres compare them the same way."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)
