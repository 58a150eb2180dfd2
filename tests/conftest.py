"""Shared fixtures: in-memory stand-ins for the Playwright driver objects.

The fakes implement only the calls the browser manager and fetcher make,
record what they were asked to do, and can be told to fail at any step.
"""

import asyncio
from typing import Callable

import pytest

from src.config.settings import Settings


ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head><title>微信公众平台</title></head>
<body>
  <h1 id="activity-name">Hello</h1>
  <span id="js_author_name"> Jane </span>
  <a id="js_name">Some Account</a>
  <em id="publish_time">2024-01-01</em>
  <div id="js_content"><p>Line1</p><p>Line2</p></div>
</body>
</html>
"""


class FakePage:
    """A page that serves fixed markup and can fail at any step."""

    def __init__(
        self,
        html: str = ARTICLE_HTML,
        goto_error: Exception | None = None,
        wait_error: Exception | None = None,
        content_error: Exception | None = None,
        close_error: Exception | None = None,
    ):
        self.html = html
        self.goto_error = goto_error
        self.wait_error = wait_error
        self.content_error = content_error
        self.close_error = close_error
        self.url = "about:blank"
        self.closed = False
        self.close_calls = 0
        self.wait_calls: list[tuple[str, str | None, int | None]] = []

    async def goto(self, url: str):
        await asyncio.sleep(0)
        if self.goto_error is not None:
            raise self.goto_error
        self.url = url

    async def wait_for_selector(self, selector: str, state: str | None = None, timeout: int | None = None):
        self.wait_calls.append((selector, state, timeout))
        await asyncio.sleep(0)
        if self.wait_error is not None:
            raise self.wait_error

    async def content(self) -> str:
        if self.content_error is not None:
            raise self.content_error
        return self.html

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


class FakeContext:
    def __init__(self, page_factory: Callable[[], FakePage], new_page_error: Exception | None = None):
        self.page_factory = page_factory
        self.new_page_error = new_page_error
        self.listeners: dict[str, list[Callable]] = {}
        self.pages: list[FakePage] = []
        self.navigation_timeout: int | None = None
        self.closed = False

    def on(self, event: str, callback: Callable) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def emit(self, event: str, payload) -> None:
        for callback in self.listeners.get(event, []):
            callback(payload)

    def set_default_navigation_timeout(self, timeout: int) -> None:
        self.navigation_timeout = timeout

    async def new_page(self) -> FakePage:
        if self.new_page_error is not None:
            raise self.new_page_error
        page = self.page_factory()
        self.pages.append(page)
        self.emit("page", page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, context: FakeContext):
        self.context = context
        self.context_options: dict | None = None
        self.listeners: dict[str, list[Callable]] = {}
        self.closed = False

    def on(self, event: str, callback: Callable) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def emit(self, event: str) -> None:
        for callback in self.listeners.get(event, []):
            callback(self)

    async def new_context(self, **options) -> FakeContext:
        self.context_options = options
        return self.context

    async def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, browser: FakeBrowser, launch_error: Exception | None = None):
        self.browser = browser
        self.launch_error = launch_error
        self.launch_calls: list[dict] = []

    async def launch(self, **options) -> FakeBrowser:
        self.launch_calls.append(options)
        # Yield so concurrent callers really overlap with the launch
        await asyncio.sleep(0.01)
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium: FakeChromium):
        self.chromium = chromium
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class FakePlaywrightFactory:
    """Stands in for ``async_playwright``: calling it returns a starter."""

    def __init__(
        self,
        page_factory: Callable[[], FakePage] = FakePage,
        launch_error: Exception | None = None,
        new_page_error: Exception | None = None,
    ):
        self.context = FakeContext(page_factory, new_page_error=new_page_error)
        self.browser = FakeBrowser(self.context)
        self.chromium = FakeChromium(self.browser, launch_error=launch_error)
        self.playwright = FakePlaywright(self.chromium)
        self.start_calls = 0

    def __call__(self) -> "FakePlaywrightFactory":
        return self

    async def start(self) -> FakePlaywright:
        self.start_calls += 1
        return self.playwright

    @property
    def launch_count(self) -> int:
        return len(self.chromium.launch_calls)


@pytest.fixture
def settings() -> Settings:
    return Settings(wait_timeout_ms=5_000, navigation_timeout_ms=10_000)


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def make_playwright() -> Callable[..., FakePlaywrightFactory]:
    """Build a fake Playwright factory; keyword arguments configure failures."""
    return FakePlaywrightFactory


@pytest.fixture
def make_page() -> Callable[..., FakePage]:
    return FakePage
