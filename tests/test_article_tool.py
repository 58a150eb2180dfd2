"""Tests for the read_weixin_article tool responses."""

import asyncio
import json

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.agent.article_tool import (
    TOOL_NAME,
    ArticleTool,
    validate_article_url,
)
from src.engines.article_extractor import ArticleExtractor, build_extractor_config
from src.engines.article_fetcher import ArticleFetcher
from src.engines.browser_engine import BrowserEngineManager
from src.engines.errors import InvalidUrlError


ARTICLE_URL = "https://mp.weixin.qq.com/s/abc123"


def make_tool(settings, factory) -> ArticleTool:
    manager = BrowserEngineManager(settings, playwright_factory=factory)
    extractor = ArticleExtractor(build_extractor_config())
    return ArticleTool(ArticleFetcher(manager, extractor, settings))


class TestUrlValidation:
    """Unit tests for article URL validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://mp.weixin.qq.com/s/abc123",
            "https://mp.weixin.qq.com/s/AbC-_x?scene=1",
        ],
    )
    def test_article_urls_accepted(self, url):
        assert validate_article_url(url) == url

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/foo",
            "http://mp.weixin.qq.com/s/abc",
            "https://mp.weixin.qq.com/mp/profile",
            "mp.weixin.qq.com/s/abc",
            "",
        ],
    )
    def test_other_urls_rejected(self, url):
        with pytest.raises(InvalidUrlError) as exc_info:
            validate_article_url(url)
        assert "Invalid URL format" in str(exc_info.value)


class TestArticleToolResponses:
    """Tests for the success and failure response shapes."""

    def test_invalid_url_rejected_before_browser_work(self, settings, make_playwright):
        factory = make_playwright()
        tool = make_tool(settings, factory)

        response = asyncio.run(tool.call("https://example.com/foo"))

        assert response["success"] is False
        assert "Invalid URL format" in response["error"]
        assert "https://example.com/foo" in response["error"]
        assert "title" not in response
        assert factory.start_calls == 0

    def test_success_response_shape(self, settings, make_playwright):
        tool = make_tool(settings, make_playwright())

        response = asyncio.run(tool.call(ARTICLE_URL))

        assert response == {
            "success": True,
            "title": "Hello",
            "author": "Jane",
            "publish_time": "2024-01-01",
            "content": "Line1\nLine2",
            "error": None,
        }

    def test_timeout_response_and_page_closed(self, settings, make_playwright, make_page):
        factory = make_playwright(
            page_factory=lambda: make_page(
                wait_error=PlaywrightTimeoutError("Timeout 5000ms exceeded.")
            )
        )
        tool = make_tool(settings, factory)

        response = asyncio.run(tool.call(ARTICLE_URL))

        assert response["success"] is False
        assert "timeout" in response["error"].lower()
        assert set(response) == {"success", "error"}
        assert factory.context.pages[0].closed is True

    def test_launch_failure_response(self, settings, make_playwright):
        tool = make_tool(settings, make_playwright(launch_error=PlaywrightError("no display")))

        response = asyncio.run(tool.call(ARTICLE_URL))

        assert response == {
            "success": False,
            "error": "Browser error: Launch error: no display",
        }

    def test_json_response_keeps_chinese_text(self, settings, make_playwright, make_page):
        html = (
            '<h1 id="activity-name">标题</h1>'
            '<div id="js_content"><p>正文</p></div>'
        )
        tool = make_tool(settings, make_playwright(page_factory=lambda: make_page(html=html)))

        payload = asyncio.run(tool.call_json(ARTICLE_URL))

        assert "标题" in payload
        assert "\n" not in payload
        decoded = json.loads(payload)
        assert decoded["author"] == "未知作者"
        assert decoded["publish_time"] == "未知时间"
        assert decoded["content"] == "正文"

    def test_unexpected_fetch_error_becomes_failure_response(self):
        class ExplodingFetcher:
            async def fetch(self, url):
                raise RecursionError("maximum recursion depth exceeded")

        tool = ArticleTool(ExplodingFetcher())

        response = asyncio.run(tool.call(ARTICLE_URL))

        assert response["success"] is False
        assert "maximum recursion depth exceeded" in response["error"]
        assert set(response) == {"success", "error"}


class TestToolMetadata:
    def test_tool_name_and_description(self):
        assert ArticleTool.name == TOOL_NAME == "read_weixin_article"
        assert "https://mp.weixin.qq.com/s/" in ArticleTool.description
