from __future__ import annotations

import uuid

from domain.ports import ClockPort

from .system_clock import SystemClock


class UuidIdGenerator:
    """
    Issues run ids such as ``run-20250601T120000-3f9a1c2b``: the UTC start
    time followed by a random suffix.
    """

    def __init__(self, clock: ClockPort | None = None) -> None:
        self._clock = clock or SystemClock()

    def new_run_id(self) -> str:
        stamp = self._clock.now().strftime("%Y%m%dT%H%M%S")
        return f"run-{stamp}-{uuid.uuid4().hex[:8]}"
