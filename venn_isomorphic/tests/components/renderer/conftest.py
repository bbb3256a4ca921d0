import asyncio
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest


def fake_layout(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Mimics the in-page render function: one settled entry per diagram.

    A diagram containing a negative size fails like venn.js would, with a
    flattened error record as the reason.
    """
    settled = []
    for index, diagram in enumerate(payload["diagrams"]):
        element_id = f"{payload['prefix']}-{index}"
        if any(area.get("size", 0) < 0 for area in diagram):
            settled.append({
                "status": "rejected",
                "reason": {
                    "name": "Error",
                    "message": "negative size",
                    "stack": f"Error: negative size\n    at render ({element_id})",
                },
            })
            continue
        width, height = (600, 350) if payload["screenshot"] else (1, 0.58)
        settled.append({
            "status": "fulfilled",
            "value": {
                "id": element_id,
                "svg": f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 1 0.58"><g data-id="{element_id}"/></svg>',
                "width": width,
                "height": height,
            },
        })
    return settled


class FakeLocator:
    def __init__(self, page: 'FakePage', selector: str):
        self.page = page
        self.selector = selector

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.page.screenshot_calls.append((self.selector, kwargs))
        if self.selector in self.page.failing_screenshots:
            raise Exception(f"Element {self.selector} is not visible")
        return b"\x89PNG" + self.selector.encode()


class FakePage:
    """A stand-in for `playwright.async_api.Page` that records what the renderer does."""

    def __init__(self, browser: 'FakeBrowser'):
        self.browser = browser
        self.closed = False
        self.goto_calls: List[Any] = []
        self.script_tags: List[Dict[str, Any]] = []
        self.style_tags: List[Dict[str, Any]] = []
        self.evaluate_calls: List[Any] = []
        self.screenshot_calls: List[Any] = []
        self.failing_screenshots = set(browser.failing_screenshots)

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.goto_calls.append((url, kwargs))
        if self.browser.fail_goto:
            raise Exception("net::ERR_FILE_NOT_FOUND")

    async def add_script_tag(self, **kwargs: Any) -> None:
        source = kwargs.get("url") or kwargs.get("path")
        # Like a real <script src>, a tag is only "added" once its source has loaded.
        await asyncio.sleep(self.browser.script_delays.get(source, 0))
        self.script_tags.append(kwargs)
        if self.browser.fail_script and source == self.browser.fail_script:
            raise self.browser.script_error

    async def add_style_tag(self, **kwargs: Any) -> None:
        self.style_tags.append(kwargs)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.evaluate_calls.append((expression, arg))
        # Yield so concurrent render calls interleave like real page round-trips.
        await asyncio.sleep(0)
        if self.browser.evaluate_error is not None:
            raise self.browser.evaluate_error
        return self.browser.layout(arg)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self):
        self.pages: List[FakePage] = []
        self.new_page_kwargs: List[Dict[str, Any]] = []
        self.close = AsyncMock()
        self.layout = fake_layout
        self.fail_goto = False
        self.fail_script: Optional[str] = None
        self.script_error: BaseException = Exception("Loading script failed")
        self.script_delays: Dict[str, float] = {}
        self.evaluate_error: Optional[Exception] = None
        self.failing_screenshots: List[str] = []

    async def new_page(self, **kwargs: Any) -> FakePage:
        self.new_page_kwargs.append(kwargs)
        page = FakePage(self)
        self.pages.append(page)
        return page

    @property
    def open_pages(self) -> List[FakePage]:
        return [page for page in self.pages if not page.closed]


class FakePlaywright:
    """
    Replaces `async_playwright` in the browser session module.

    `async_playwright().start()` returns a mock engine whose browser launchers
    record every launch. Set `fail_launches` to make the next N launches fail.
    """

    def __init__(self):
        self.engines: List[MagicMock] = []
        self.browsers: List[FakeBrowser] = []
        self.launch_kwargs: List[Dict[str, Any]] = []
        self.fail_launches = 0
        self.configure_browser = None

    def __call__(self) -> 'FakePlaywright':
        return self

    @property
    def launches(self) -> int:
        return len(self.launch_kwargs)

    @property
    def browser(self) -> FakeBrowser:
        return self.browsers[-1]

    async def start(self) -> MagicMock:
        engine = MagicMock()
        engine.stop = AsyncMock()
        for name in ("chromium", "firefox", "webkit"):
            getattr(engine, name).launch = AsyncMock(side_effect=self._launch)
        self.engines.append(engine)
        return engine

    async def _launch(self, **kwargs: Any) -> FakeBrowser:
        self.launch_kwargs.append(kwargs)
        # Give other callers a chance to arrive while the launch is in flight.
        await asyncio.sleep(0.01)
        if self.fail_launches:
            self.fail_launches -= 1
            raise Exception("Executable doesn't exist at /ms-playwright/chromium/chrome")
        browser = FakeBrowser()
        if self.configure_browser is not None:
            self.configure_browser(browser)
        self.browsers.append(browser)
        return browser


@pytest.fixture
def fake_playwright(monkeypatch) -> FakePlaywright:
    fake = FakePlaywright()
    monkeypatch.setattr("venn_isomorphic.components.renderer.browser_session.async_playwright", fake)
    return fake
