"""Timestamp columns are stored as UTC ISO-8601 text."""
from __future__ import annotations

from datetime import datetime, timezone


def _as_utc(moment: datetime) -> datetime:
    # Naive values come from callers that already work in UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def dt_to_iso(moment: datetime | None) -> str | None:
    return None if moment is None else _as_utc(moment).isoformat()


def iso_to_dt(text: str | None) -> datetime | None:
    if not text:
        return None
    return _as_utc(datetime.fromisoformat(text))
