from __future__ import annotations

from enum import Enum
from typing import Sequence

from domain.ports import LoggerPort, PageAutomationPort, UserInteractionPort

CHALLENGE_SIGNATURES: tuple[str, ...] = (
    "iframe[src*='recaptcha']",
    ".g-recaptcha",
    "#captcha",
    "[data-testid*='captcha']",
    ".captcha",
    "iframe[title*='reCAPTCHA']",
    ".challenge-form",
)


class ChallengeState(str, Enum):
    CLEAR = "clear"
    SUSPENDED = "suspended"


class ChallengeGate:
    """
    Suspends automated progress while a human-verification screen is up.

    Once a signature is seen the gate enters ``SUSPENDED`` and stays there,
    prompting the user and re-probing after every acknowledgement, until no
    signature is visible. There is no timeout.
    """

    def __init__(
        self,
        page: PageAutomationPort,
        ui: UserInteractionPort,
        logger: LoggerPort,
        *,
        signatures: Sequence[str] = CHALLENGE_SIGNATURES,
        check_timeout_ms: int = 1000,
    ) -> None:
        self._page = page
        self._ui = ui
        self._logger = logger
        self._signatures = tuple(signatures)
        self._check_timeout_ms = check_timeout_ms
        self._state = ChallengeState.CLEAR

    @property
    def state(self) -> ChallengeState:
        return self._state

    async def detect(self) -> str | None:
        """Return the first visible challenge signature, if any."""
        for selector in self._signatures:
            if await self._page.is_visible(selector, timeout_ms=self._check_timeout_ms):
                return selector
        return None

    async def check_and_wait(self) -> bool:
        signature = await self.detect()
        if signature is None:
            self._state = ChallengeState.CLEAR
            return False

        self._state = ChallengeState.SUSPENDED
        self._logger.warning("challenge_detected", signature=signature)
        await self._ui.send_info(
            "CAPTCHA detected! Please solve it manually in the browser window.",
        )

        prompts = 0
        while self._state is ChallengeState.SUSPENDED:
            try:
                await self._ui.ask_free_text(
                    "challenge_ack",
                    "Press ENTER when you've solved the CAPTCHA...",
                )
            except Exception as exc:
                self._logger.error(
                    "challenge_wait_aborted",
                    signature=signature,
                    prompts=prompts,
                    error=str(exc) or type(exc).__name__,
                )
                raise
            prompts += 1
            if await self.detect() is None:
                self._state = ChallengeState.CLEAR
            else:
                await self._ui.send_info("CAPTCHA still present. Please try again.")

        self._logger.info("challenge_resolved", signature=signature, prompts=prompts)
        await self._ui.send_info("CAPTCHA solved! Continuing...")
        return True
