"""Fetch a single Weixin article through the shared headless browser."""

import logging

from bs4 import ParserRejectedMarkup
from playwright.async_api import Error as PlaywrightError, Page

from src.config.settings import Settings
from src.engines.article_extractor import (
    CONTENT_CONTAINER_SELECTOR,
    ArticleExtractor,
    ArticleRecord,
)
from src.engines.browser_engine import BrowserEngineManager
from src.engines.errors import AppError, BrowserError, PageTimeoutError, ParseError


logger = logging.getLogger(__name__)


class ArticleFetcher:
    """Renders an article page and extracts it into an ``ArticleRecord``.

    Every fetch opens its own page, waits for the article body to render,
    reads the serialized DOM and closes the page again. Only the browser
    itself is shared between fetches. Nothing is retried: the first failure
    of a fetch is what the caller gets.

    Attributes:
        engines: Manager owning the shared browser
        extractor: Structured extractor for rendered markup
        settings: Timeouts used while waiting for content
    """

    def __init__(
        self,
        engines: BrowserEngineManager,
        extractor: ArticleExtractor,
        settings: Settings,
    ):
        self.engines = engines
        self.extractor = extractor
        self.settings = settings

    async def fetch(self, url: str) -> ArticleRecord:
        """Fetch and parse one article.

        Args:
            url: Article URL, already validated by the caller

        Returns:
            ArticleRecord for the rendered page

        Raises:
            BrowserError: Launch, navigation, content read or page close failed
            PageTimeoutError: The article body never appeared
            ParseError: The rendered markup could not be parsed at all
        """
        engine = await self.engines.acquire()

        try:
            page = await engine.new_page()
        except PlaywrightError as e:
            raise BrowserError(f"New page error: {e}") from e

        error: AppError | None = None
        html = ""
        try:
            html = await self._render(page, url)
        except AppError as e:
            error = e
        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                if error is None:
                    error = BrowserError(f"Close page error: {e}")
                else:
                    logger.warning(f"Failed to close page for {url}: {e}")

        if error is not None:
            raise error

        try:
            return self.extractor.extract(html)
        except ParserRejectedMarkup as e:
            raise ParseError(str(e)) from e

    async def _render(self, page: Page, url: str) -> str:
        """Navigate, wait for the article body and return the rendered markup."""
        try:
            await page.goto(url)
        except PlaywrightError as e:
            raise BrowserError(f"New page error: {e}") from e

        try:
            await page.wait_for_selector(
                CONTENT_CONTAINER_SELECTOR,
                state="attached",
                timeout=self.settings.wait_timeout_ms,
            )
        except PlaywrightError as e:
            raise PageTimeoutError(
                f"Waiting for #js_content failed: {e}. "
                "The page may not be a valid WeChat article."
            ) from e

        try:
            return await page.content()
        except PlaywrightError as e:
            raise BrowserError(f"Get content error: {e}") from e
