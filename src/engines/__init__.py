"""Engines module - core processing components."""

from src.engines.article_extractor import (
    ArticleExtractor,
    ArticleRecord,
    ExtractorConfig,
    build_extractor_config,
)
from src.engines.article_fetcher import ArticleFetcher
from src.engines.browser_engine import BrowserEngine, BrowserEngineManager
from src.engines.errors import (
    AppError,
    BrowserError,
    InvalidUrlError,
    PageTimeoutError,
    ParseError,
)
from src.engines.text_normalizer import normalize_text

__all__ = [
    # Extraction
    "ArticleExtractor",
    "ArticleRecord",
    "ExtractorConfig",
    "build_extractor_config",
    "normalize_text",
    # Browser
    "ArticleFetcher",
    "BrowserEngine",
    "BrowserEngineManager",
    # Exceptions
    "AppError",
    "BrowserError",
    "InvalidUrlError",
    "PageTimeoutError",
    "ParseError",
]
