from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from domain.models import Posting
from domain.ports import ClockPort, LoggerPort
from domain.services.actions import PageActions
from domain.services.platforms import PlatformProfile

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def extract_contact_email(text: str | None) -> str:
    """Return the first email-looking token in ``text``, or ``""``."""
    if not text:
        return ""
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else ""


_AGE_PATTERN = re.compile(
    r"(\d+)\s*(minute|min|hour|day|week|month|dakika|saat|gün|hafta|ay)s?\b",
    re.IGNORECASE,
)
_AGE_UNITS: dict[str, timedelta] = {
    "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1),
    "dakika": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "saat": timedelta(hours=1),
    "day": timedelta(days=1),
    "gün": timedelta(days=1),
    "week": timedelta(weeks=1),
    "hafta": timedelta(weeks=1),
    "month": timedelta(days=30),
    "ay": timedelta(days=30),
}


def parse_posted_age(text: str | None, now: datetime) -> datetime | None:
    """
    Turn a relative age such as ``"2 weeks ago"`` or ``"3 gün önce"`` into
    the moment it refers to. Unrecognised text yields ``None``.
    """
    if not text:
        return None
    lowered = text.lower()
    if "just now" in lowered or "today" in lowered or "bugün" in lowered:
        return now
    if "yesterday" in lowered or "dün" in lowered:
        return now - timedelta(days=1)
    match = _AGE_PATTERN.search(lowered)
    if match is None:
        return None
    return now - int(match.group(1)) * _AGE_UNITS[match.group(2)]


def _squash(text: str) -> str:
    return " ".join(text.split())


class PostingExtractor:
    """Turns a rendered listing view into a ``Posting``."""

    def __init__(
        self,
        actions: PageActions,
        clock: ClockPort,
        logger: LoggerPort,
    ) -> None:
        self._actions = actions
        self._clock = clock
        self._logger = logger

    async def extract_detail(
        self,
        profile: PlatformProfile,
        listing_id: str,
        *,
        query: str = "",
        location: str = "",
    ) -> Posting | None:
        """
        Navigate to the listing and read its fields.

        Optional fields that cannot be read are left empty. A listing without
        a usable title and company yields ``None``. Profiles that take their
        identity from the landing page get ``url`` and ``platform_id`` from
        the URL the browser ends up on.
        """
        await self._actions.navigate(profile.build_detail_url(listing_id, query, location))
        platform_id, url = listing_id, profile.build_posting_url(listing_id)
        if profile.identity_from_landing_url:
            platform_id, url = await self._landing_identity(profile, listing_id, url)

        title = _squash(await self._read(profile.title_selector, listing_id))
        company = _squash(await self._read(profile.company_selector, listing_id))
        if not title or not company:
            self._logger.warning(
                "posting_missing_essential_fields",
                platform=profile.platform.value,
                listing_id=listing_id,
                has_title=bool(title),
                has_company=bool(company),
            )
            return None

        location_text = _squash(await self._read(profile.location_selector, listing_id))
        description = (await self._read(profile.description_selector, listing_id)).strip()

        now = self._clock.now().astimezone(timezone.utc)
        posted_at = None
        if profile.posted_selector:
            posted_at = parse_posted_age(await self._read(profile.posted_selector, listing_id), now)

        has_inline_apply = False
        if profile.inline_apply_selector:
            has_inline_apply = await self._actions.is_visible(
                profile.inline_apply_selector,
                timeout_ms=2_000,
            )

        return Posting(
            platform=profile.platform,
            platform_id=platform_id,
            title=title,
            company=company,
            location=location_text,
            description=description,
            url=url,
            contact_email=extract_contact_email(description),
            has_inline_apply=has_inline_apply,
            posted_at=posted_at,
            scraped_at=now,
        )

    async def _landing_identity(
        self,
        profile: PlatformProfile,
        listing_id: str,
        fallback_url: str,
    ) -> tuple[str, str]:
        landed = (await self._actions.current_url()).strip()
        match = profile.link_id_pattern.search(landed)
        if match is None:
            self._logger.debug(
                "landing_url_without_id",
                platform=profile.platform.value,
                listing_id=listing_id,
                url=landed,
            )
            return listing_id, landed or fallback_url
        return match.group(1), landed

    async def _read(self, selector: str, listing_id: str) -> str:
        try:
            return await self._actions.read_text(selector) or ""
        except Exception as exc:
            self._logger.debug(
                "posting_field_unreadable",
                listing_id=listing_id,
                selector=selector,
                error=str(exc),
            )
            return ""
