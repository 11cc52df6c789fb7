# src/postline/db/time.py
"""Timestamp helpers shared by the ORM models and response schemas."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to timestamps read back without zone information.

    SQLite drops the offset of ``DateTime(timezone=True)`` columns; every
    stored value is written in UTC, so a naive value is UTC by construction.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
