from __future__ import annotations

from typing import Sequence

from domain.models import FormField
from domain.ports import PageAutomationPort
from domain.services.challenge import ChallengeGate
from domain.services.pacing import PacingPolicy


class PageActions:
    """
    Simulated user actions over the page port.

    Every action is followed by the pacing delay, and every navigation or
    click is followed by a challenge check so that callers never have to
    think about verification screens.
    """

    def __init__(
        self,
        page: PageAutomationPort,
        pacing: PacingPolicy,
        challenge_gate: ChallengeGate | None = None,
    ) -> None:
        self._page = page
        self._pacing = pacing
        self._gate = challenge_gate

    @property
    def pacing(self) -> PacingPolicy:
        return self._pacing

    # -- transitions --------------------------------------------------------

    async def navigate(self, url: str, *, timeout_ms: int = 30_000) -> None:
        await self._page.goto(url, timeout_ms=timeout_ms)
        await self._pacing.after_action()
        await self._check_challenge()

    async def click(self, selector: str) -> None:
        await self._page.click(selector)
        await self._pacing.after_action()
        await self._check_challenge()

    # -- input --------------------------------------------------------------

    async def type_text(self, selector: str, text: str) -> None:
        await self._page.type_text(selector, text)
        await self._pacing.after_input()

    async def clear(self, selector: str) -> None:
        await self._page.clear(selector)
        await self._pacing.after_input()

    async def replace_text(self, selector: str, text: str) -> None:
        await self.clear(selector)
        await self.type_text(selector, text)

    async def select_option(self, selector: str, value: str) -> None:
        await self._page.select_option(selector, value)
        await self._pacing.after_input()

    async def upload_file(self, selector: str, path: str) -> None:
        await self._page.upload_file(selector, path)
        await self._pacing.after_action()

    # -- reads and presence checks -----------------------------------------

    async def is_visible(self, selector: str, *, timeout_ms: int = 5_000) -> bool:
        return await self._page.is_visible(selector, timeout_ms=timeout_ms)

    async def first_visible(
        self,
        selectors: Sequence[str],
        *,
        timeout_ms: int = 2_000,
    ) -> str | None:
        """Probe ``selectors`` in priority order and return the first visible one."""
        for selector in selectors:
            if await self._page.is_visible(selector, timeout_ms=timeout_ms):
                return selector
        return None

    async def read_text(self, selector: str) -> str:
        return await self._page.get_text(selector)

    async def is_checked(self, selector: str) -> bool:
        return await self._page.is_checked(selector)

    async def attribute_values(self, selector: str, attribute: str) -> list[str]:
        return await self._page.get_attribute_values(selector, attribute)

    async def scroll_list_after(self, header_selector: str, item_selector: str) -> None:
        await self._page.scroll_list_after(header_selector, item_selector)
        await self._pacing.settle(1000)

    async def current_url(self) -> str:
        return await self._page.current_url()

    async def form_fields(self, group_selector: str) -> list[FormField]:
        return await self._page.list_form_fields(group_selector)

    async def settle(self, ms: int) -> None:
        await self._pacing.settle(ms)

    async def _check_challenge(self) -> None:
        if self._gate is not None:
            await self._gate.check_and_wait()
