from __future__ import annotations

from typing import Any

from domain.models import FieldKind, FormField

_SCROLL_LIST_JS = """
([headerSelector, itemSelector]) => {
    const header = document.querySelector(headerSelector);
    const container = header ? header.nextElementSibling : null;
    if (!container) {
        return 0;
    }
    let total = 0;
    container.querySelectorAll(itemSelector).forEach((item) => {
        total += item.getBoundingClientRect().height;
    });
    if (total <= 0) {
        total = container.clientHeight;
    }
    container.scrollTop += total;
    return total;
}
"""

_ATTRIBUTE_VALUES_JS = """
(elements, attribute) => elements
    .map((el) => el.getAttribute(attribute))
    .filter((value) => value !== null && value !== "")
"""

_FIELD_KIND_JS = """
(el) => [el.tagName.toLowerCase(), (el.getAttribute("type") || "").toLowerCase()]
"""

_SKIPPED_INPUT_TYPES = {"file", "checkbox", "radio", "hidden", "submit", "button"}


class PlaywrightPageAutomation:
    """
    Playwright-backed implementation of ``PageAutomationPort``.

    Requires ``playwright`` to be installed and browsers set up via
    ``playwright install chromium``.

    The session uses a single Chromium page instance. Use it as an async
    context manager so the browser is closed on every exit path; a failed
    launch propagates to the caller.
    """

    def __init__(self, *, headless: bool = True) -> None:
        self._headless = headless
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    async def __aenter__(self) -> "PlaywrightPageAutomation":
        try:
            await self.launch()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.close()

    async def launch(self) -> None:
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
        self._page = await self._browser.new_page(viewport={"width": 1920, "height": 1080})

    async def close(self) -> None:
        if self._page:
            await self._page.close()
            self._page = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    def _ensure_page(self) -> Any:
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page

    # -- navigation ---------------------------------------------------------

    async def goto(self, url: str, *, timeout_ms: int = 30_000) -> None:
        page = self._ensure_page()
        await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    async def current_url(self) -> str:
        return self._ensure_page().url

    # -- presence checks ----------------------------------------------------

    async def is_visible(self, selector: str, *, timeout_ms: int = 5_000) -> bool:
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        page = self._ensure_page()
        try:
            await page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True

    async def is_checked(self, selector: str) -> bool:
        page = self._ensure_page()
        return await page.locator(selector).first.is_checked()

    # -- element interactions -----------------------------------------------

    async def get_text(self, selector: str) -> str:
        page = self._ensure_page()
        return await page.locator(selector).first.inner_text(timeout=5_000)

    async def click(self, selector: str) -> None:
        page = self._ensure_page()
        await page.locator(selector).first.click()

    async def type_text(self, selector: str, text: str) -> None:
        page = self._ensure_page()
        await page.locator(selector).first.fill(text)

    async def clear(self, selector: str) -> None:
        page = self._ensure_page()
        await page.locator(selector).first.fill("")

    async def upload_file(self, selector: str, path: str) -> None:
        page = self._ensure_page()
        await page.locator(selector).first.set_input_files(path)

    async def select_option(self, selector: str, value: str) -> None:
        page = self._ensure_page()
        await page.locator(selector).first.select_option(value)

    # -- listing helpers ----------------------------------------------------

    async def get_attribute_values(self, selector: str, attribute: str) -> list[str]:
        page = self._ensure_page()
        values = await page.eval_on_selector_all(selector, _ATTRIBUTE_VALUES_JS, attribute)
        return [str(v) for v in values]

    async def scroll_list_after(self, header_selector: str, item_selector: str) -> None:
        page = self._ensure_page()
        await page.evaluate(_SCROLL_LIST_JS, [header_selector, item_selector])

    async def list_form_fields(self, group_selector: str) -> list[FormField]:
        page = self._ensure_page()
        fields: list[FormField] = []
        groups = page.locator(group_selector)
        for index in range(await groups.count()):
            group = groups.nth(index)
            control = group.locator("input, select, textarea").first
            if await control.count() == 0:
                continue
            tag, input_type = await control.evaluate(_FIELD_KIND_JS)
            if tag == "input" and input_type in _SKIPPED_INPUT_TYPES:
                continue

            kind = FieldKind.TEXT
            options: tuple[str, ...] = ()
            if tag == "select":
                kind = FieldKind.SELECT
                options = tuple(
                    t.strip() for t in await control.locator("option").all_inner_texts() if t.strip()
                )
            elif tag == "textarea":
                kind = FieldKind.TEXTAREA

            fields.append(
                FormField(
                    selector=f"{group_selector} >> nth={index} >> input, select, textarea >> nth=0",
                    label=await self._group_label(group),
                    kind=kind,
                    options=options,
                ),
            )
        return fields

    # -- internal helpers ---------------------------------------------------

    @staticmethod
    async def _group_label(group: Any) -> str:
        label = group.locator("label, legend").first
        if await label.count() > 0:
            return " ".join((await label.inner_text()).split())
        return " ".join((await group.inner_text()).split())
