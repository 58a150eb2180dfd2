"""Error taxonomy for article fetching.

Every failure a caller can observe is one of the four ``AppError``
subclasses below. Playwright and parser exceptions are wrapped, never
re-raised raw, so ``str(error)`` is always a readable message.
"""


class AppError(Exception):
    """Base class for all article reader errors.

    Attributes:
        detail: The underlying cause, without the category prefix
    """

    prefix = "Error"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}")


class InvalidUrlError(AppError):
    """Raised when a URL is not a Weixin article URL.

    Detected before any browser work happens and never retried.

    Example:
        >>> raise InvalidUrlError("https://example.com/foo")
        InvalidUrlError: Invalid URL format. Must be a Weixin article URL (https://mp.weixin.qq.com/s/xxx). Got: https://example.com/foo
    """

    prefix = (
        "Invalid URL format. Must be a Weixin article URL "
        "(https://mp.weixin.qq.com/s/xxx). Got"
    )

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(url)


class BrowserError(AppError):
    """Raised when the browser cannot be configured, launched, navigated,
    read from, or when a page cannot be closed."""

    prefix = "Browser error"


class PageTimeoutError(AppError):
    """Raised when the article content container never appears."""

    prefix = "Page load timeout"


class ParseError(AppError):
    """Raised when rendered markup cannot be parsed at all."""

    prefix = "Parse error"
