from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

Sleeper = Callable[[float], Awaitable[None]]


class PacingPolicy:
    """
    Single source of truth for "wait N ms between actions".

    Navigations and clicks wait the full delay, text input waits half of
    it, and the orchestrator waits ``item_delay_ms`` between postings.
    """

    def __init__(
        self,
        delay_ms: int = 2000,
        *,
        item_delay_ms: int = 2000,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if delay_ms < 0 or item_delay_ms < 0:
            raise ValueError("pacing delays cannot be negative")
        self._delay_ms = delay_ms
        self._item_delay_ms = item_delay_ms
        self._sleep = sleep

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    async def after_action(self) -> None:
        await self.settle(self._delay_ms)

    async def after_input(self) -> None:
        await self.settle(self._delay_ms // 2)

    async def between_items(self) -> None:
        await self.settle(self._item_delay_ms)

    async def settle(self, ms: int) -> None:
        if ms > 0:
            await self._sleep(ms / 1000)
