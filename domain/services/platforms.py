"""
Per-platform knowledge: URLs, selectors and paging behaviour.

Platform names typed by the user are resolved by walking
``PLATFORM_PROFILES`` in order; the first profile whose aliases contain the
normalized name wins.
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from enum import Enum
from typing import Pattern, Sequence

from domain.models import Platform


class LoadMoreStrategy(str, Enum):
    SCROLL = "scroll"
    PAGINATE = "paginate"


@dataclass(frozen=True)
class LoginFlow:
    login_url: str
    logged_in_marker: str
    username_selector: str
    password_selector: str
    submit_selector: str
    verification_selector: str


@dataclass(frozen=True)
class ApplyFlowSelectors:
    """Selectors driving the inline multi-step apply wizard, in priority order."""

    entry: Sequence[str]
    success_heading: str
    success_phrases: Sequence[str]
    advance: Sequence[str]
    generic_submit: str = "button[type='submit']"
    file_input: str = "input[type='file']"
    question_groups: Sequence[str] = field(default_factory=tuple)
    agreement_checkboxes: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class PlatformProfile:
    platform: Platform
    aliases: Sequence[str]
    search_url: str
    detail_url: str
    posting_url: str
    id_attribute_selector: str | None
    id_attribute: str | None
    link_selector: str
    link_id_pattern: Pattern[str]
    item_selector: str
    load_more: LoadMoreStrategy
    title_selector: str
    company_selector: str
    location_selector: str
    description_selector: str
    page_size_cap: int
    list_header_selector: str | None = None
    next_page_selector: str | None = None
    inline_apply_selector: str | None = None
    posted_selector: str | None = None
    identity_from_landing_url: bool = False
    login: LoginFlow | None = None
    apply_flow: ApplyFlowSelectors | None = None

    def build_search_url(self, title: str, location: str) -> str:
        return self.search_url.format(
            query=urllib.parse.quote_plus(title),
            location=urllib.parse.quote_plus(location),
        )

    def build_detail_url(self, listing_id: str, title: str = "", location: str = "") -> str:
        return self.detail_url.format(
            listing_id=listing_id,
            query=urllib.parse.quote_plus(title),
            location=urllib.parse.quote_plus(location),
        )

    def build_posting_url(self, listing_id: str) -> str:
        return self.posting_url.format(listing_id=listing_id)


LINKEDIN_APPLY_FLOW = ApplyFlowSelectors(
    entry=(
        ".jobs-apply-button--top-card",
        ".jobs-apply-button",
        "[data-control-name='jobdetails_topcard_inapply']",
    ),
    success_heading=".artdeco-modal__header h2",
    success_phrases=("Application sent", "Your application was sent"),
    advance=(
        "button[aria-label='Continue to next step']",
        "button[aria-label='Review your application']",
        "button[aria-label='Submit application']",
        ".jobs-easy-apply-modal footer button[data-control-name='continue_unify']",
    ),
    question_groups=(
        ".jobs-easy-apply-form-section__grouping",
        ".fb-single-line-text",
        ".fb-dropdown",
        ".application-question",
    ),
    agreement_checkboxes=(
        "input[type='checkbox'][required]",
        "input[type='checkbox'][name*='agree']",
        "input[type='checkbox'][name*='terms']",
        "input[type='checkbox'][name*='privacy']",
    ),
)

LINKEDIN = PlatformProfile(
    platform=Platform.LINKEDIN,
    aliases=("linkedin", "linked in", "linkedin.com"),
    # f_TPR=r604800 limits results to the last week.
    search_url=(
        "https://www.linkedin.com/jobs/search/"
        "?keywords={query}&location={location}&f_TPR=r604800"
    ),
    detail_url=(
        "https://www.linkedin.com/jobs/search/"
        "?currentJobId={listing_id}&keywords={query}&location={location}&f_TPR=r604800"
    ),
    posting_url="https://www.linkedin.com/jobs/view/{listing_id}",
    id_attribute_selector="[data-job-id]",
    id_attribute="data-job-id",
    link_selector="a[href*='/jobs/view/']",
    link_id_pattern=re.compile(r"jobs/view/(\d+)"),
    item_selector="[data-job-id]",
    load_more=LoadMoreStrategy.SCROLL,
    list_header_selector=".scaffold-layout__list-header.jobs-search-results-list__header--blue",
    title_selector=(
        ".job-details-jobs-unified-top-card__job-title h1, "
        ".jobs-unified-top-card__job-title a"
    ),
    company_selector=(
        ".job-details-jobs-unified-top-card__company-name a, "
        ".jobs-unified-top-card__company-name a"
    ),
    location_selector=(
        ".job-details-jobs-unified-top-card__tertiary-description-container "
        ".tvm__text--low-emphasis:first-child"
    ),
    description_selector=(
        ".job-details-jobs-unified-top-card__job-description, "
        ".jobs-description__content .jobs-box__html-content"
    ),
    inline_apply_selector=(
        ".jobs-apply-button--top-card, .jobs-apply-button[data-control-name*='apply']"
    ),
    posted_selector=".job-details-jobs-unified-top-card__tertiary-description-container",
    page_size_cap=25,
    login=LoginFlow(
        login_url="https://www.linkedin.com/login",
        logged_in_marker="[data-test-id='nav-top-logo']",
        username_selector="#username",
        password_selector="#password",
        submit_selector="button[type='submit']",
        verification_selector="input[name='pin']",
    ),
    apply_flow=LINKEDIN_APPLY_FLOW,
)

KARIYER = PlatformProfile(
    platform=Platform.KARIYER,
    aliases=("kariyer.net", "kariyer", "kariyernet"),
    search_url="https://www.kariyer.net/is-ilanlari?q={query}",
    # Cards carry no id attribute; ids come from the card links and the
    # canonical url and id from the page reached after navigating.
    detail_url="https://www.kariyer.net/is-ilani/ilan/{listing_id}",
    posting_url="https://www.kariyer.net/is-ilani/ilan/{listing_id}",
    id_attribute_selector=None,
    id_attribute=None,
    link_selector=".list-items .list-item a, .job-list-item a",
    identity_from_landing_url=True,
    link_id_pattern=re.compile(r"ilan/(\d+)"),
    item_selector=".list-items .list-item, .job-list-item",
    load_more=LoadMoreStrategy.PAGINATE,
    next_page_selector=".pagination .next, .load-more",
    title_selector="h1.job-title, .job-detail-title",
    company_selector=".company-name, .job-company-name",
    location_selector=".job-location, .location",
    description_selector=".job-description, .job-detail-content",
    page_size_cap=20,
)

PLATFORM_PROFILES: tuple[PlatformProfile, ...] = (LINKEDIN, KARIYER)


def resolve_platform(name: str) -> PlatformProfile | None:
    normalized = name.strip().lower()
    for profile in PLATFORM_PROFILES:
        if normalized in profile.aliases or normalized == profile.platform.value.lower():
            return profile
    return None


def profile_for(platform: Platform) -> PlatformProfile:
    for profile in PLATFORM_PROFILES:
        if profile.platform is platform:
            return profile
    raise KeyError(f"No platform profile registered for {platform.value}")
