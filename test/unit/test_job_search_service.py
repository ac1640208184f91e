from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from domain.models import AppConfig, Platform, UserConfiguration
from domain.services import (
    KARIYER,
    LINKEDIN,
    DiscoveryEngine,
    JobSearchService,
    PacingPolicy,
    PageActions,
    PostingExtractor,
)
from test.mocks import FakePage, FakeUserInteraction, FixedClock, InMemoryLogger, RecordingSleeper

APP_CONFIG = AppConfig(
    linkedin_email="jane@example.com",
    linkedin_password="secret",
    max_jobs_per_session=2,
    search_location="Istanbul",
)


def _service(
    page: FakePage,
    *,
    ui: FakeUserInteraction | None = None,
    logger: InMemoryLogger | None = None,
    app_config: AppConfig = APP_CONFIG,
) -> JobSearchService:
    logger = logger or InMemoryLogger()
    actions = PageActions(page, PacingPolicy(0, sleep=RecordingSleeper()))
    return JobSearchService(
        actions=actions,
        discovery=DiscoveryEngine(actions, logger),
        extractor=PostingExtractor(actions, FixedClock(datetime(2025, 6, 1, tzinfo=timezone.utc)), logger),
        ui=ui or FakeUserInteraction(),
        logger=logger,
        app_config=app_config,
    )


def _kariyer_listing(page: FakePage, listing_id: str, **texts: str) -> None:
    url = KARIYER.build_detail_url(listing_id)
    page.texts_by_url[url] = {
        getattr(KARIYER, f"{field}_selector"): value for field, value in texts.items()
    }


def test_search_title_discovers_and_extracts() -> None:
    page = FakePage()
    page.set_attribute_rounds(
        KARIYER.link_selector,
        "href",
        [[f"/is-ilani/ilan/{n}" for n in ("101", "102", "103")]],
    )
    _kariyer_listing(page, "101", title="Backend Developer", company="Acme", description="cv: hr@acme.com")
    _kariyer_listing(page, "102", title="Frontend Developer")

    postings = asyncio.run(_service(page).search_title(KARIYER, "Developer"))

    assert [p.platform_id for p in postings] == ["101"]
    assert postings[0].contact_email == "hr@acme.com"
    assert postings[0].platform is Platform.KARIYER
    assert page.visited[0] == KARIYER.build_search_url("Developer", "Istanbul")
    assert KARIYER.build_detail_url("103") not in page.visited


def test_search_skips_unknown_platform_and_continues() -> None:
    page = FakePage()
    logger = InMemoryLogger()
    configuration = UserConfiguration(platforms=("Monster", "Kariyer.net"), job_titles=("QA",))

    postings = asyncio.run(_service(page, logger=logger).search(configuration))

    assert postings == []
    assert logger.fields_of("unknown_platform") == [{"platform": "Monster"}]
    assert page.visited == [KARIYER.build_search_url("QA", "Istanbul")]


def test_platform_error_does_not_stop_other_platforms() -> None:
    page = FakePage()
    page.goto_errors[LINKEDIN.login.login_url] = RuntimeError("net::ERR_CONNECTION_RESET")  # type: ignore[union-attr]
    logger = InMemoryLogger()
    configuration = UserConfiguration(platforms=("LinkedIn", "Kariyer.net"), job_titles=("QA",))

    asyncio.run(_service(page, logger=logger).search(configuration))

    assert logger.messages("error") == ["platform_search_failed"]
    assert KARIYER.build_search_url("QA", "Istanbul") in page.visited


def test_login_types_credentials_and_hands_verification_to_user() -> None:
    login = LINKEDIN.login
    assert login is not None
    page = FakePage(visible={login.verification_selector})
    ui = FakeUserInteraction()

    asyncio.run(_service(page, ui=ui).ensure_logged_in(LINKEDIN))

    assert page.typed == [
        (login.username_selector, "jane@example.com"),
        (login.password_selector, "secret"),
    ]
    assert page.clicks == [login.submit_selector]
    assert ui.free_text_calls == ["linkedin_verification"]


def test_login_skipped_when_session_already_active() -> None:
    login = LINKEDIN.login
    assert login is not None
    page = FakePage(visible={login.logged_in_marker})

    asyncio.run(_service(page).ensure_logged_in(LINKEDIN))

    assert page.typed == []
    assert page.clicks == []
