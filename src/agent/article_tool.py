"""The ``read_weixin_article`` tool exposed to callers.

Validates the requested URL, runs the fetcher and turns the outcome into a
JSON-ready response. Every error is reported inside the response; nothing
is raised to the caller.
"""

import json
import logging
from typing import Any

from src.config.settings import ARTICLE_URL_PREFIX
from src.engines.article_fetcher import ArticleFetcher
from src.engines.errors import AppError, InvalidUrlError


logger = logging.getLogger(__name__)


TOOL_NAME = "read_weixin_article"

TOOL_DESCRIPTION = (
    "读取微信公众号文章内容。接收一个微信文章 URL，使用浏览器渲染页面并提取结构化内容"
    "（标题、作者、发布时间、正文）。URL 必须以 https://mp.weixin.qq.com/s/ 开头。"
)

URL_PARAMETER_DESCRIPTION = "微信文章URL，格式: https://mp.weixin.qq.com/s/xxx"


def validate_article_url(url: str) -> str:
    """Check that a URL points at a Weixin article.

    Raises:
        InvalidUrlError: If the URL does not start with the article prefix.
    """
    if not url.startswith(ARTICLE_URL_PREFIX):
        raise InvalidUrlError(url)
    return url


def failure_response(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


class ArticleTool:
    """Callable wrapper around ``ArticleFetcher`` producing tool responses.

    Attributes:
        fetcher: Fetcher shared by all calls
    """

    name = TOOL_NAME
    description = TOOL_DESCRIPTION

    def __init__(self, fetcher: ArticleFetcher):
        self.fetcher = fetcher

    async def call(self, url: str) -> dict[str, Any]:
        """Read one article.

        Args:
            url: Weixin article URL

        Returns:
            On success ``{"success": True, "title", "author", "publish_time",
            "content", "error": None}``; otherwise ``{"success": False,
            "error": message}``.
        """
        try:
            validate_article_url(url)
        except InvalidUrlError as e:
            logger.warning(str(e))
            return failure_response(str(e))

        logger.info(f"Fetching article: {url}")

        try:
            article = await self.fetcher.fetch(url)
        except AppError as e:
            logger.error(f"Failed to fetch article: {e}")
            return failure_response(str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while fetching {url}")
            return failure_response(f"Unexpected error: {e}")

        logger.info(f"Successfully fetched: {article.title}")
        return {"success": True, **article.to_dict(), "error": None}

    async def call_json(self, url: str) -> str:
        """Same as ``call`` but serialized as a single JSON line."""
        return json.dumps(await self.call(url), ensure_ascii=False)
