from __future__ import annotations

import asyncio

import pytest

from domain.services import ChallengeGate, PacingPolicy, PageActions
from test.mocks import FakePage, FakeUserInteraction, InMemoryLogger, RecordingSleeper


def _pacing(delay_ms: int = 2000, item_delay_ms: int = 1500) -> tuple[PacingPolicy, RecordingSleeper]:
    sleeper = RecordingSleeper()
    return PacingPolicy(delay_ms, item_delay_ms=item_delay_ms, sleep=sleeper), sleeper


# -- PacingPolicy -------------------------------------------------------------


def test_pacing_waits_full_half_and_item_delays() -> None:
    pacing, sleeper = _pacing()

    async def _run() -> None:
        await pacing.after_action()
        await pacing.after_input()
        await pacing.between_items()

    asyncio.run(_run())
    assert sleeper.delays == [2.0, 1.0, 1.5]


def test_pacing_settle_zero_does_not_sleep() -> None:
    pacing, sleeper = _pacing(delay_ms=0, item_delay_ms=0)

    async def _run() -> None:
        await pacing.after_action()
        await pacing.settle(0)
        await pacing.between_items()

    asyncio.run(_run())
    assert sleeper.delays == []


def test_pacing_rejects_negative_delay() -> None:
    with pytest.raises(ValueError):
        PacingPolicy(-1)


# -- PageActions --------------------------------------------------------------


def test_navigate_and_click_pace_after_each_action() -> None:
    page = FakePage()
    pacing, sleeper = _pacing(delay_ms=1000)
    actions = PageActions(page, pacing)

    async def _run() -> None:
        await actions.navigate("https://example.test/jobs")
        await actions.click("#apply")
        await actions.type_text("#name", "Jane")

    asyncio.run(_run())
    assert page.visited == ["https://example.test/jobs"]
    assert page.clicks == ["#apply"]
    assert page.typed == [("#name", "Jane")]
    assert sleeper.delays == [1.0, 1.0, 0.5]


def test_replace_text_clears_then_types() -> None:
    page = FakePage()
    actions = PageActions(page, _pacing(delay_ms=0)[0])

    asyncio.run(actions.replace_text("#years", "5"))
    assert page.cleared == ["#years"]
    assert page.typed == [("#years", "5")]


def test_first_visible_returns_highest_priority_match() -> None:
    page = FakePage(visible={".b", ".c"})
    actions = PageActions(page, _pacing(delay_ms=0)[0])

    assert asyncio.run(actions.first_visible([".a", ".b", ".c"])) == ".b"
    assert asyncio.run(actions.first_visible([".x", ".y"])) is None


def test_click_failure_propagates() -> None:
    page = FakePage()
    page.click_errors["#gone"] = TimeoutError("element not found")
    actions = PageActions(page, _pacing(delay_ms=0)[0])

    with pytest.raises(TimeoutError):
        asyncio.run(actions.click("#gone"))


def test_navigation_runs_challenge_check() -> None:
    page = FakePage(visible={".g-recaptcha"})

    def _solve(_question_id: str) -> None:
        page.visible.discard(".g-recaptcha")

    ui = FakeUserInteraction(on_free_text=_solve)
    gate = ChallengeGate(page, ui, InMemoryLogger())
    actions = PageActions(page, _pacing(delay_ms=0)[0], gate)

    asyncio.run(actions.navigate("https://example.test/jobs"))
    assert ui.free_text_calls == ["challenge_ack"]
