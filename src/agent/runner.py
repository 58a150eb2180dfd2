"""Runner module for the Weixin article reader.

This module wires the browser manager, extractor, fetcher and tool together
and serves requests either from command-line arguments or as an MCP
server on stdio.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from src.agent.article_tool import ArticleTool
from src.agent.mcp_server import build_server
from src.config.settings import ConfigurationError, Settings, load_settings
from src.engines.article_extractor import ArticleExtractor, build_extractor_config
from src.engines.article_fetcher import ArticleFetcher
from src.engines.browser_engine import BrowserEngineManager


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_FETCH_ERROR = 2


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Logs go to stderr; stdout is reserved for JSON responses.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_tool(settings: Settings) -> tuple[ArticleTool, BrowserEngineManager]:
    """Create the tool and the browser manager it shares across calls."""
    engines = BrowserEngineManager(settings)
    extractor = ArticleExtractor(build_extractor_config())
    fetcher = ArticleFetcher(engines, extractor, settings)
    return ArticleTool(fetcher), engines


def _write_response(out: TextIO, response: dict[str, Any]) -> None:
    out.write(json.dumps(response, ensure_ascii=False) + "\n")
    out.flush()


async def read_articles(tool: ArticleTool, urls: list[str], out: TextIO) -> bool:
    """Fetch all URLs concurrently and write responses in argument order.

    Returns:
        True if every response succeeded.
    """
    responses = await asyncio.gather(*(tool.call(url) for url in urls))
    for response in responses:
        _write_response(out, response)
    return all(response["success"] for response in responses)


async def _serve(settings: Settings, urls: list[str], stdio: bool) -> int:
    tool, engines = build_tool(settings)
    try:
        if stdio:
            logger.info("Serving read_weixin_article over MCP stdio")
            await build_server(tool).run_stdio_async()
            return EXIT_SUCCESS

        all_succeeded = await read_articles(tool, urls, sys.stdout)
        return EXIT_SUCCESS if all_succeeded else EXIT_FETCH_ERROR
    finally:
        await engines.aclose()


def run(
    urls: list[str],
    stdio: bool = False,
    verbose: bool = False,
    env_path: str | Path | None = None,
) -> int:
    """Run the article reader.

    Args:
        urls: Article URLs to read; ignored in stdio mode
        stdio: If True, serve the tool over MCP stdio until the client disconnects
        verbose: If True, enable verbose/debug logging
        env_path: Optional .env file to load settings from

    Returns:
        Exit code:
        - 0: Success
        - 1: Configuration error
        - 2: At least one article could not be read
    """
    _setup_logging(verbose)

    logger.info("Weixin article reader starting...")

    try:
        settings = load_settings(env_path=env_path, validate=True)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    exit_code = asyncio.run(_serve(settings, urls, stdio))
    logger.info("Weixin article reader stopped.")
    return exit_code
