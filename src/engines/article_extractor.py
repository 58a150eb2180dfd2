"""Structured extraction of Weixin article pages.

Turns a fully rendered article page into an ``ArticleRecord``. Every field
has an ordered list of CSS selectors and a placeholder, so extraction always
produces a complete record even for pages that are not articles at all.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import soupsieve as sv
from bs4 import BeautifulSoup
from bs4.element import Tag
from soupsieve import SoupSieve

from src.engines.text_normalizer import normalize_text


logger = logging.getLogger(__name__)


TITLE_PLACEHOLDER = "未找到标题"
AUTHOR_PLACEHOLDER = "未知作者"
PUBLISH_TIME_PLACEHOLDER = "未知时间"
CONTENT_PLACEHOLDER = "未找到正文内容"

# Selectors for the Weixin article template, most specific first
TITLE_SELECTORS = ("h1#activity-name",)
AUTHOR_SELECTORS = ("span#js_author_name", "a#js_name")
PUBLISH_TIME_SELECTORS = ("em#publish_time",)
CONTENT_SELECTORS = ("div#js_content",)

# The rendered page is waited on until this element exists
CONTENT_CONTAINER_SELECTOR = CONTENT_SELECTORS[0]


@dataclass(frozen=True)
class ArticleRecord:
    """A parsed Weixin article.

    All fields are always populated; a field that could not be found holds
    its placeholder text instead.

    Attributes:
        title: Article headline
        author: Author name, or the account name when no author is shown
        publish_time: Publication time as displayed on the page (not parsed)
        content: Body text with paragraphs separated by newlines
    """
    title: str
    author: str
    publish_time: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "author": self.author,
            "publish_time": self.publish_time,
            "content": self.content,
        }


@dataclass(frozen=True)
class FieldRule:
    """Ordered selectors for one record field.

    Attributes:
        name: Field name used in log messages
        selectors: Pre-compiled selectors, tried in order
        placeholder: Value used when no selector produces text
        allow_empty: Accept a matching element even if its text is empty
    """
    name: str
    selectors: tuple[SoupSieve, ...]
    placeholder: str
    allow_empty: bool = False


@dataclass(frozen=True)
class ExtractorConfig:
    """Compiled extraction rules, built once and shared by every extraction.

    Attributes:
        title: Rule for the article title
        author: Rule for the author, primary byline first
        publish_time: Rule for the displayed publication time
        content: Rule for the body container
        parser: BeautifulSoup tree builder used for documents and fragments
    """
    title: FieldRule
    author: FieldRule
    publish_time: FieldRule
    content: FieldRule
    parser: str = "lxml"


def _compile_rule(
    name: str,
    selectors: tuple[str, ...],
    placeholder: str,
    allow_empty: bool = False,
) -> FieldRule:
    return FieldRule(
        name=name,
        selectors=tuple(sv.compile(selector) for selector in selectors),
        placeholder=placeholder,
        allow_empty=allow_empty,
    )


def build_extractor_config(parser: str = "lxml") -> ExtractorConfig:
    """Compile the Weixin article selectors.

    Call once at startup and pass the result to ``ArticleExtractor``.

    Args:
        parser: BeautifulSoup tree builder name

    Returns:
        ExtractorConfig with every selector compiled
    """
    return ExtractorConfig(
        title=_compile_rule("title", TITLE_SELECTORS, TITLE_PLACEHOLDER),
        author=_compile_rule("author", AUTHOR_SELECTORS, AUTHOR_PLACEHOLDER),
        publish_time=_compile_rule(
            "publish_time", PUBLISH_TIME_SELECTORS, PUBLISH_TIME_PLACEHOLDER
        ),
        # An empty container is still the article body, not a missing one
        content=_compile_rule(
            "content", CONTENT_SELECTORS, CONTENT_PLACEHOLDER, allow_empty=True
        ),
        parser=parser,
    )


def element_text(element: Tag) -> str:
    """Concatenate all text nodes under an element and strip the result."""
    return "".join(element.strings).strip()


class ArticleExtractor:
    """Extracts ``ArticleRecord`` values from rendered article markup.

    Attributes:
        config: Compiled selectors and parser settings
    """

    def __init__(self, config: ExtractorConfig):
        self.config = config

    def extract(self, html: str) -> ArticleRecord:
        """Parse rendered page markup into an article record.

        Never fails for a parseable document: fields that cannot be found
        get their placeholder.

        Args:
            html: Serialized DOM of the rendered page

        Returns:
            ArticleRecord with all four fields populated

        Raises:
            bs4.ParserRejectedMarkup: Only if the tree builder refuses the
                markup outright.
        """
        soup = BeautifulSoup(html, self.config.parser)

        return ArticleRecord(
            title=self._resolve(soup, self.config.title, element_text),
            author=self._resolve(soup, self.config.author, element_text),
            publish_time=self._resolve(soup, self.config.publish_time, element_text),
            content=self._resolve(soup, self.config.content, self._fragment_text),
        )

    def _resolve(
        self,
        soup: BeautifulSoup,
        rule: FieldRule,
        collect: Callable[[Tag], str],
    ) -> str:
        """Try each selector of a rule in order; first usable text wins."""
        for selector in rule.selectors:
            element = selector.select_one(soup)
            if element is None:
                continue

            text = collect(element)
            if text or rule.allow_empty:
                logger.debug(f"{rule.name} found by '{selector.pattern}'")
                return text

            logger.debug(
                f"Selector '{selector.pattern}' for {rule.name} matched empty text, "
                "trying next"
            )

        logger.debug(f"No text for {rule.name}, using placeholder")
        return rule.placeholder

    def _fragment_text(self, container: Tag) -> str:
        """Re-parse a container's inner markup on its own and join its text nodes.

        Text nodes are joined with newlines so block elements stay on
        separate lines. Script, style and comment nodes carry no text.
        """
        fragment = BeautifulSoup(container.decode_contents(), self.config.parser)
        return normalize_text("\n".join(fragment.strings))
