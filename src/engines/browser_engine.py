"""Headless Chromium lifecycle for article rendering.

A ``BrowserEngineManager`` launches one Chromium instance on first use and
shares it with every fetch for the rest of the process. Each fetch gets its
own page from the shared browser context.

The launch runs at most once per manager, even when many fetches arrive
before it completes. Its outcome (engine or error) is remembered: a failed
launch keeps failing with the same ``BrowserError`` until the process is
restarted.

While the engine is alive a detached task drains the browser's event
queue. Nothing awaits that task; if it stops, it only logs.
"""

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Awaitable, Callable, Generic, TypeVar

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from src.config.settings import ConfigurationError, Settings
from src.engines.errors import BrowserError


logger = logging.getLogger(__name__)


# Hides navigator.webdriver from page scripts
ANTI_AUTOMATION_FLAG = "--disable-blink-features=AutomationControlled"
NO_SANDBOX_FLAG = "--no-sandbox"

T = TypeVar("T")


class AsyncOnceCell(Generic[T]):
    """Runs an async initializer at most once and replays its outcome.

    Concurrent callers that arrive while the initializer is running wait on
    the lock and then see the stored result. A raised exception is stored
    too and re-raised to every caller, so a failed initializer is never
    retried. Every re-raise starts from the traceback captured at the
    original failure, so repeated calls do not grow it.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._initialized = False
        self._value: T | None = None
        self._error: Exception | None = None
        self._error_tb: TracebackType | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def value(self) -> T | None:
        """The stored value, or None if not initialized or initialization failed."""
        return self._value

    async def get_or_init(self, init: Callable[[], Awaitable[T]]) -> T:
        if not self._initialized:
            async with self._lock:
                if not self._initialized:
                    try:
                        self._value = await init()
                    except Exception as e:
                        self._error = e
                        self._error_tb = e.__traceback__
                    self._initialized = True

        if self._error is not None:
            raise self._error.with_traceback(self._error_tb)
        return self._value


@dataclass
class EngineEvent:
    """An event reported by the browser or its context.

    Attributes:
        kind: Playwright event name ("page", "console", "requestfailed", "disconnected")
        detail: Short human-readable description
    """
    kind: str
    detail: str


class BrowserEngine:
    """A running Chromium with its shared context and event drain task.

    Attributes:
        playwright: The Playwright driver that launched the browser
        browser: The launched Chromium browser
        context: Shared context every page is opened in
        events: Queue fed by browser and context event listeners
    """

    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.events: asyncio.Queue[EngineEvent] = asyncio.Queue()
        self._drain_task: asyncio.Task | None = None
        self._subscribe()

    @property
    def drain_task(self) -> asyncio.Task | None:
        return self._drain_task

    def start_draining(self) -> None:
        """Spawn the detached task that keeps the event queue empty."""
        self._drain_task = asyncio.create_task(
            self._drain_events(), name="browser-event-drain"
        )
        self._drain_task.add_done_callback(self._on_drain_done)

    async def new_page(self) -> Page:
        return await self.context.new_page()

    def _subscribe(self) -> None:
        self.browser.on(
            "disconnected",
            lambda _browser: self._emit("disconnected", "browser connection closed"),
        )
        self.context.on("page", lambda page: self._emit("page", page.url))
        self.context.on(
            "console", lambda message: self._emit("console", f"{message.type}: {message.text}")
        )
        self.context.on("requestfailed", lambda request: self._emit("requestfailed", request.url))

    def _emit(self, kind: str, detail: str) -> None:
        self.events.put_nowait(EngineEvent(kind=kind, detail=detail))

    async def _drain_events(self) -> None:
        while True:
            event = await self.events.get()
            if event.kind == "disconnected":
                logger.warning("Browser disconnected; event drain stopped")
                return
            logger.debug(f"Browser event {event.kind}: {event.detail}")

    def _on_drain_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Browser event drain failed: {error}")

    async def aclose(self) -> None:
        """Shut the browser down. Only used when the process is exiting."""
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
        await _release(self.playwright, self.browser, self.context)


async def _release(
    playwright: Playwright | None,
    browser: Browser | None,
    context: BrowserContext | None = None,
) -> None:
    """Close whatever part of a launch exists, innermost first."""
    for name, closer in (
        ("context", context.close if context is not None else None),
        ("browser", browser.close if browser is not None else None),
        ("playwright", playwright.stop if playwright is not None else None),
    ):
        if closer is None:
            continue
        try:
            await closer()
        except Exception as e:
            logger.warning(f"Failed to close {name}: {e}")


class BrowserEngineManager:
    """Owns the lazily launched ``BrowserEngine`` shared by all fetches.

    Create one manager per process and hand it to every ``ArticleFetcher``.

    Attributes:
        settings: Browser configuration
    """

    def __init__(
        self,
        settings: Settings,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        """Initialize the manager without launching anything.

        Args:
            settings: Viewport, sandbox and timeout configuration
            playwright_factory: Returns an object whose ``start()`` coroutine
                yields a Playwright driver; defaults to ``async_playwright``
        """
        self.settings = settings
        self._playwright_factory = playwright_factory
        self._engine: AsyncOnceCell[BrowserEngine] = AsyncOnceCell()

    async def acquire(self) -> BrowserEngine:
        """Return the shared engine, launching it on the first call.

        Raises:
            BrowserError: If the launch failed, now or on an earlier call.
        """
        return await self._engine.get_or_init(self._launch)

    def launch_options(self) -> dict[str, Any]:
        args = [ANTI_AUTOMATION_FLAG]
        if self.settings.no_sandbox:
            args.insert(0, NO_SANDBOX_FLAG)

        options: dict[str, Any] = {
            "headless": self.settings.headless,
            "chromium_sandbox": not self.settings.no_sandbox,
            "args": args,
        }
        if self.settings.executable_path:
            options["executable_path"] = self.settings.executable_path
        return options

    def context_options(self) -> dict[str, Any]:
        return {
            "viewport": {
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
        }

    async def _launch(self) -> BrowserEngine:
        try:
            self.settings.validate()
        except ConfigurationError as e:
            logger.error(f"Invalid browser configuration: {e}")
            raise BrowserError(f"Config error: {e}") from e

        logger.info("Launching headless Chromium...")
        playwright = None
        browser = None
        try:
            playwright = await self._playwright_factory().start()
            browser = await playwright.chromium.launch(**self.launch_options())
            context = await browser.new_context(**self.context_options())
            context.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
        except Exception as e:
            logger.error(f"Failed to launch Chromium: {e}")
            await _release(playwright, browser)
            raise BrowserError(f"Launch error: {e}") from e

        engine = BrowserEngine(playwright, browser, context)
        engine.start_draining()
        logger.info(
            f"Chromium ready ({self.settings.viewport_width}x{self.settings.viewport_height})"
        )
        return engine

    async def aclose(self) -> None:
        """Close the engine if it was launched. Call only at process exit."""
        engine = self._engine.value
        if engine is not None:
            await engine.aclose()
            logger.info("Chromium closed")
