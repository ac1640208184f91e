from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from domain.models import Platform
from domain.services import (
    KARIYER,
    LINKEDIN,
    PacingPolicy,
    PageActions,
    PostingExtractor,
    extract_contact_email,
    profile_for,
    resolve_platform,
)
from domain.services.extraction import parse_posted_age
from test.mocks import FakePage, FixedClock, InMemoryLogger, RecordingSleeper

NOW = datetime(2025, 6, 1, 9, 30, tzinfo=timezone.utc)


def _extractor(page: FakePage, logger: InMemoryLogger | None = None) -> PostingExtractor:
    actions = PageActions(page, PacingPolicy(0, sleep=RecordingSleeper()))
    return PostingExtractor(actions, FixedClock(NOW), logger or InMemoryLogger())


# -- contact email --------------------------------------------------------------


def test_extract_contact_email_returns_first_match() -> None:
    text = "Send CV to careers@acme.io or backup@acme.io before Friday."
    assert extract_contact_email(text) == "careers@acme.io"


@pytest.mark.parametrize("text", ["", None, "No address here", "reach us @ acme"])
def test_extract_contact_email_without_match(text: str | None) -> None:
    assert extract_contact_email(text) == ""


# -- detail extraction ----------------------------------------------------------


def test_extract_detail_builds_posting() -> None:
    page = FakePage(
        visible={LINKEDIN.inline_apply_selector},
        texts={
            LINKEDIN.title_selector: "  Senior   Python Developer \n",
            LINKEDIN.company_selector: "Acme",
            LINKEDIN.location_selector: "Istanbul, Turkey",
            LINKEDIN.description_selector: "  Apply at jobs@acme.com  ",
        },
    )

    posting = asyncio.run(
        _extractor(page).extract_detail(LINKEDIN, "4001", query="Python Developer", location="Turkey"),
    )

    assert posting is not None
    assert posting.platform is Platform.LINKEDIN
    assert posting.platform_id == "4001"
    assert posting.title == "Senior Python Developer"
    assert posting.company == "Acme"
    assert posting.description == "Apply at jobs@acme.com"
    assert posting.contact_email == "jobs@acme.com"
    assert posting.has_inline_apply is True
    assert posting.url == "https://www.linkedin.com/jobs/view/4001"
    assert posting.scraped_at == NOW
    assert posting.applied is False
    assert page.visited[0].startswith("https://www.linkedin.com/jobs/search/?currentJobId=4001")


def test_extract_detail_without_company_is_skipped() -> None:
    page = FakePage(texts={KARIYER.title_selector: "Backend Developer"})
    logger = InMemoryLogger()

    posting = asyncio.run(_extractor(page, logger).extract_detail(KARIYER, "77"))

    assert posting is None
    assert logger.messages("warning") == ["posting_missing_essential_fields"]


def test_extract_detail_leaves_unreadable_optional_fields_empty() -> None:
    page = FakePage(texts={KARIYER.title_selector: "QA Engineer", KARIYER.company_selector: "Beta"})

    posting = asyncio.run(_extractor(page).extract_detail(KARIYER, "78"))

    assert posting is not None
    assert posting.location == ""
    assert posting.description == ""
    assert posting.contact_email == ""
    assert posting.has_inline_apply is False
    assert posting.url == "https://www.kariyer.net/is-ilani/ilan/78"


def test_kariyer_identity_comes_from_landing_url() -> None:
    page = FakePage(texts={KARIYER.title_selector: "Backend Developer", KARIYER.company_selector: "Acme"})
    landed = "https://www.kariyer.net/is-ilani/acme-backend-developer/ilan/4120555"
    page.redirects[KARIYER.build_detail_url("4120555")] = landed

    posting = asyncio.run(_extractor(page).extract_detail(KARIYER, "4120555"))

    assert posting is not None
    assert posting.url == landed
    assert posting.platform_id == "4120555"


def test_kariyer_landing_url_without_id_keeps_listing_id() -> None:
    page = FakePage(texts={KARIYER.title_selector: "QA Engineer", KARIYER.company_selector: "Beta"})
    page.redirects[KARIYER.build_detail_url("88")] = "https://www.kariyer.net/is-ilanlari"
    logger = InMemoryLogger()

    posting = asyncio.run(_extractor(page, logger).extract_detail(KARIYER, "88"))

    assert posting is not None
    assert posting.platform_id == "88"
    assert posting.url == "https://www.kariyer.net/is-ilanlari"
    assert "landing_url_without_id" in logger.messages("debug")


def test_linkedin_posting_age_sets_posted_at() -> None:
    page = FakePage(
        texts={
            LINKEDIN.title_selector: "Data Engineer",
            LINKEDIN.company_selector: "Acme",
            LINKEDIN.posted_selector: "Istanbul, Turkey \u00b7 2 weeks ago \u00b7 40 applicants",
        },
    )

    posting = asyncio.run(_extractor(page).extract_detail(LINKEDIN, "4002"))

    assert posting is not None
    assert posting.posted_at == NOW - timedelta(weeks=2)
    assert posting.url == "https://www.linkedin.com/jobs/view/4002"


@pytest.mark.parametrize(
    "text, age",
    [
        ("5 hours ago", timedelta(hours=5)),
        ("Reposted 1 month ago", timedelta(days=30)),
        ("3 g\u00fcn \u00f6nce", timedelta(days=3)),
        ("2 hafta \u00f6nce", timedelta(weeks=2)),
        ("Yesterday", timedelta(days=1)),
        ("Bug\u00fcn", timedelta(0)),
    ],
)
def test_parse_posted_age(text: str, age: timedelta) -> None:
    assert parse_posted_age(text, NOW) == NOW - age


@pytest.mark.parametrize("text", [None, "", "Over 100 applicants"])
def test_parse_posted_age_unrecognised(text: str | None) -> None:
    assert parse_posted_age(text, NOW) is None


# -- platform catalogue --------------------------------------------------------


@pytest.mark.parametrize(
    "name, expected",
    [
        ("LinkedIn", Platform.LINKEDIN),
        ("linked in", Platform.LINKEDIN),
        ("  Kariyer.net ", Platform.KARIYER),
        ("kariyer", Platform.KARIYER),
    ],
)
def test_resolve_platform_aliases(name: str, expected: Platform) -> None:
    profile = resolve_platform(name)
    assert profile is not None
    assert profile.platform is expected


def test_resolve_unknown_platform() -> None:
    assert resolve_platform("Monster") is None


def test_search_url_quotes_title_and_location() -> None:
    url = LINKEDIN.build_search_url("C# Developer", "New York")
    assert "keywords=C%23+Developer" in url
    assert "location=New+York" in url
    assert KARIYER.build_search_url("Yazılım Uzmanı", "Turkey").startswith(
        "https://www.kariyer.net/is-ilanlari?q=",
    )


def test_profile_for_returns_registered_profile() -> None:
    assert profile_for(Platform.KARIYER) is KARIYER
    assert LINKEDIN.apply_flow is not None
    assert KARIYER.apply_flow is None
    assert (LINKEDIN.page_size_cap, KARIYER.page_size_cap) == (25, 20)
