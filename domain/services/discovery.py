from __future__ import annotations

from domain.models import DiscoverySession
from domain.ports import LoggerPort
from domain.services.actions import PageActions
from domain.services.platforms import LoadMoreStrategy, PlatformProfile

DEFAULT_STAGNATION_CEILING = 5


class DiscoveryEngine:
    """
    Collects listing identifiers from a progressively rendered results feed.

    Each round unions what is currently rendered into the session. A round
    that adds nothing bumps the stagnation counter; progress resets it. The
    loop stops at ``target`` identifiers or after ``stagnation_ceiling``
    unproductive rounds in a row, whichever comes first.
    """

    def __init__(
        self,
        actions: PageActions,
        logger: LoggerPort,
        *,
        stagnation_ceiling: int = DEFAULT_STAGNATION_CEILING,
        load_settle_ms: int = 2000,
    ) -> None:
        if stagnation_ceiling < 1:
            raise ValueError("stagnation_ceiling must be at least 1")
        self._actions = actions
        self._logger = logger
        self._stagnation_ceiling = stagnation_ceiling
        self._load_settle_ms = load_settle_ms

    async def discover(
        self,
        profile: PlatformProfile,
        title: str,
        target: int,
    ) -> list[str]:
        session = await self.run_session(profile, title, target)
        return session.identifiers

    async def run_session(
        self,
        profile: PlatformProfile,
        title: str,
        target: int,
    ) -> DiscoverySession:
        session = DiscoverySession(target=max(0, min(target, profile.page_size_cap)))

        while (
            len(session.seen) < session.target
            and session.stagnant_rounds < self._stagnation_ceiling
        ):
            session.rounds += 1
            rendered = await self.collect_identifiers(profile)
            if session.absorb(rendered):
                session.stagnant_rounds = 0
            else:
                session.stagnant_rounds += 1

            self._logger.info(
                "discovery_round",
                platform=profile.platform.value,
                title=title,
                round=session.rounds,
                collected=len(session.seen),
                stagnant_rounds=session.stagnant_rounds,
            )

            if len(session.seen) < session.target:
                await self._load_more(profile)

        if len(session.seen) < session.target:
            self._logger.info(
                "discovery_stagnated",
                platform=profile.platform.value,
                title=title,
                collected=len(session.seen),
                target=session.target,
            )
        return session

    async def collect_identifiers(self, profile: PlatformProfile) -> list[str]:
        """
        Read identifiers currently rendered on the results page.

        Tries the per-item attribute first and falls back to parsing item
        hyperlinks. Never raises; total failure yields an empty list.
        """
        identifiers: dict[str, None] = {}
        try:
            if profile.id_attribute_selector and profile.id_attribute:
                for value in await self._actions.attribute_values(
                    profile.id_attribute_selector,
                    profile.id_attribute,
                ):
                    value = value.strip()
                    if value:
                        identifiers[value] = None

            if not identifiers:
                for href in await self._actions.attribute_values(profile.link_selector, "href"):
                    match = profile.link_id_pattern.search(href)
                    if match:
                        identifiers[match.group(1)] = None
        except Exception as exc:
            self._logger.error(
                "identifier_extraction_failed",
                platform=profile.platform.value,
                error=str(exc),
            )
        return list(identifiers)

    async def _load_more(self, profile: PlatformProfile) -> None:
        try:
            if profile.load_more is LoadMoreStrategy.SCROLL and profile.list_header_selector:
                if await self._actions.is_visible(profile.list_header_selector, timeout_ms=1_000):
                    await self._actions.scroll_list_after(
                        profile.list_header_selector,
                        profile.item_selector,
                    )
            elif profile.load_more is LoadMoreStrategy.PAGINATE and profile.next_page_selector:
                if await self._actions.is_visible(profile.next_page_selector, timeout_ms=2_000):
                    await self._actions.click(profile.next_page_selector)
        except Exception as exc:
            self._logger.warning(
                "load_more_failed",
                platform=profile.platform.value,
                error=str(exc),
            )
        await self._actions.settle(self._load_settle_ms)
