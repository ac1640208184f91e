from __future__ import annotations

from domain.models import AppConfig, Platform, Posting, UserConfiguration
from domain.ports import LoggerPort, UserInteractionPort
from domain.services.actions import PageActions
from domain.services.discovery import DiscoveryEngine
from domain.services.extraction import PostingExtractor
from domain.services.platforms import PlatformProfile, resolve_platform


class JobSearchService:
    """Runs discovery and detail extraction for every platform/title pair."""

    def __init__(
        self,
        *,
        actions: PageActions,
        discovery: DiscoveryEngine,
        extractor: PostingExtractor,
        ui: UserInteractionPort,
        logger: LoggerPort,
        app_config: AppConfig,
    ) -> None:
        self._actions = actions
        self._discovery = discovery
        self._extractor = extractor
        self._ui = ui
        self._logger = logger
        self._config = app_config

    async def search(self, configuration: UserConfiguration) -> list[Posting]:
        postings: list[Posting] = []
        for name in configuration.platforms:
            profile = resolve_platform(name)
            if profile is None:
                self._logger.warning("unknown_platform", platform=name)
                continue
            try:
                found = await self.search_platform(profile, configuration.job_titles)
            except Exception as exc:
                self._logger.error(
                    "platform_search_failed",
                    platform=profile.platform.value,
                    error=str(exc),
                )
                await self._ui.send_info(f"Error searching {profile.platform.value}: {exc}")
                continue
            postings.extend(found)
            await self._ui.send_info(f"Found {len(found)} jobs on {profile.platform.value}")
        return postings

    async def search_platform(
        self,
        profile: PlatformProfile,
        job_titles: list[str] | tuple[str, ...],
    ) -> list[Posting]:
        if profile.login is not None:
            await self.ensure_logged_in(profile)

        postings: list[Posting] = []
        for title in job_titles:
            postings.extend(await self.search_title(profile, title))
            await self._actions.pacing.after_action()
        return postings

    async def search_title(self, profile: PlatformProfile, title: str) -> list[Posting]:
        location = self._config.search_location
        await self._actions.navigate(profile.build_search_url(title, location))
        await self._actions.settle(3000)

        target = min(self._config.max_jobs_per_session, profile.page_size_cap)
        identifiers = await self._discovery.discover(profile, title, target)

        postings: list[Posting] = []
        for listing_id in identifiers:
            try:
                posting = await self._extractor.extract_detail(
                    profile,
                    listing_id,
                    query=title,
                    location=location,
                )
            except Exception as exc:
                self._logger.warning(
                    "posting_extraction_failed",
                    platform=profile.platform.value,
                    listing_id=listing_id,
                    error=str(exc),
                )
                continue
            if posting is not None:
                postings.append(posting)
        return postings

    async def ensure_logged_in(self, profile: PlatformProfile) -> None:
        login = profile.login
        if login is None:
            return
        await self._actions.navigate(login.login_url)
        if await self._actions.is_visible(login.logged_in_marker, timeout_ms=3_000):
            self._logger.info("already_logged_in", platform=profile.platform.value)
            return

        username, password = self._credentials_for(profile.platform)
        await self._actions.type_text(login.username_selector, username)
        await self._actions.type_text(login.password_selector, password)
        await self._actions.click(login.submit_selector)
        await self._actions.settle(3000)

        if await self._actions.is_visible(login.verification_selector, timeout_ms=5_000):
            await self._ui.ask_free_text(
                f"{profile.platform.value.lower()}_verification",
                f"{profile.platform.value} security check detected. "
                "Please complete verification manually, then press ENTER...",
            )
        self._logger.info("login_completed", platform=profile.platform.value)

    def _credentials_for(self, platform: Platform) -> tuple[str, str]:
        if platform is Platform.LINKEDIN:
            return self._config.linkedin_email, self._config.linkedin_password
        return self._config.kariyer_email, self._config.kariyer_password
