from __future__ import annotations

from typing import Callable, Iterable

from domain.models import FormField
from domain.ports import PageAutomationPort


class FakePage:
    """
    Scriptable in-memory ``PageAutomationPort``.

    ``visible`` and ``texts`` apply everywhere; ``visible_by_url`` and
    ``texts_by_url`` only while the current URL matches. Attribute reads
    replay ``attribute_rounds`` one list per call and repeat the last list
    once exhausted. ``on_click`` hooks run after a selector is clicked.
    ``redirects`` maps a requested URL to the URL the page lands on.
    """

    def __init__(
        self,
        *,
        visible: Iterable[str] = (),
        texts: dict[str, str] | None = None,
    ) -> None:
        self.visible: set[str] = set(visible)
        self.texts: dict[str, str] = dict(texts or {})
        self.visible_by_url: dict[str, set[str]] = {}
        self.texts_by_url: dict[str, dict[str, str]] = {}
        self.attribute_rounds: dict[tuple[str, str], list[list[str]]] = {}
        self.form_fields: dict[str, list[FormField]] = {}
        self.checked: set[str] = set()
        self.on_click: dict[str, Callable[["FakePage"], None]] = {}
        self.click_errors: dict[str, Exception] = {}
        self.goto_errors: dict[str, Exception] = {}
        self.attribute_error: Exception | None = None
        self.redirects: dict[str, str] = {}

        self.url = "about:blank"
        self.visited: list[str] = []
        self.clicks: list[str] = []
        self.typed: list[tuple[str, str]] = []
        self.cleared: list[str] = []
        self.uploads: list[tuple[str, str]] = []
        self.selected: list[tuple[str, str]] = []
        self.scrolls: list[tuple[str, str]] = []
        self._attribute_calls: dict[tuple[str, str], int] = {}

    # -- scripting helpers ---------------------------------------------------

    def set_attribute_rounds(self, selector: str, attribute: str, rounds: list[list[str]]) -> None:
        self.attribute_rounds[(selector, attribute)] = rounds
        self._attribute_calls[(selector, attribute)] = 0

    def attribute_calls(self, selector: str, attribute: str) -> int:
        return self._attribute_calls.get((selector, attribute), 0)

    # -- PageAutomationPort --------------------------------------------------

    async def goto(self, url: str, *, timeout_ms: int = 30_000) -> None:
        if url in self.goto_errors:
            raise self.goto_errors[url]
        self.url = self.redirects.get(url, url)
        self.visited.append(url)

    async def is_visible(self, selector: str, *, timeout_ms: int = 5_000) -> bool:
        return selector in self.visible or selector in self.visible_by_url.get(self.url, set())

    async def get_text(self, selector: str) -> str:
        page_texts = self.texts_by_url.get(self.url, {})
        if selector in page_texts:
            return page_texts[selector]
        if selector in self.texts:
            return self.texts[selector]
        raise TimeoutError(f"Timeout waiting for {selector}")

    async def click(self, selector: str) -> None:
        if selector in self.click_errors:
            raise self.click_errors[selector]
        self.clicks.append(selector)
        hook = self.on_click.get(selector)
        if hook is not None:
            hook(self)

    async def type_text(self, selector: str, text: str) -> None:
        self.typed.append((selector, text))

    async def clear(self, selector: str) -> None:
        self.cleared.append(selector)

    async def upload_file(self, selector: str, path: str) -> None:
        self.uploads.append((selector, path))

    async def select_option(self, selector: str, value: str) -> None:
        self.selected.append((selector, value))

    async def is_checked(self, selector: str) -> bool:
        return selector in self.checked

    async def get_attribute_values(self, selector: str, attribute: str) -> list[str]:
        if self.attribute_error is not None:
            raise self.attribute_error
        key = (selector, attribute)
        rounds = self.attribute_rounds.get(key)
        calls = self._attribute_calls.get(key, 0)
        self._attribute_calls[key] = calls + 1
        if not rounds:
            return []
        return list(rounds[min(calls, len(rounds) - 1)])

    async def scroll_list_after(self, header_selector: str, item_selector: str) -> None:
        self.scrolls.append((header_selector, item_selector))

    async def current_url(self) -> str:
        return self.url

    async def list_form_fields(self, group_selector: str) -> list[FormField]:
        return list(self.form_fields.get(group_selector, []))


_page_check: PageAutomationPort = FakePage()
