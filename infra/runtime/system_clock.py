from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    """Wall clock in UTC; every persisted timestamp is taken from here."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
