"""Configuration settings for the Weixin article reader."""

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv


# Only article pages under this prefix are accepted by the tool shell
ARTICLE_URL_PREFIX = "https://mp.weixin.qq.com/s/"

DEFAULT_VIEWPORT_WIDTH = 1920
DEFAULT_VIEWPORT_HEIGHT = 1080
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000
DEFAULT_WAIT_TIMEOUT_MS = 30_000


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class Settings:
    """Configuration settings for the headless browser and article fetcher.

    Attributes:
        headless: Run Chromium without a visible window
        no_sandbox: Disable the Chromium sandbox (required in most containers)
        viewport_width: Fixed viewport width for every page
        viewport_height: Fixed viewport height for every page
        navigation_timeout_ms: Default navigation timeout for new pages
        wait_timeout_ms: Bound for waiting on the article content container
        executable_path: Optional Chromium binary; empty uses Playwright's bundled one
    """

    headless: bool = True
    no_sandbox: bool = True
    viewport_width: int = DEFAULT_VIEWPORT_WIDTH
    viewport_height: int = DEFAULT_VIEWPORT_HEIGHT
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    wait_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS
    executable_path: str = ""

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.
        """
        errors: list[str] = []

        if self.viewport_width < 1:
            errors.append("viewport_width must be at least 1")

        if self.viewport_height < 1:
            errors.append("viewport_height must be at least 1")

        if self.navigation_timeout_ms < 1:
            errors.append("navigation_timeout_ms must be positive")

        if self.wait_timeout_ms < 1:
            errors.append("wait_timeout_ms must be positive")

        if self.executable_path and not Path(self.executable_path).exists():
            errors.append(f"executable_path does not exist: {self.executable_path}")

        if errors:
            raise ConfigurationError("; ".join(errors))


def _parse_int(value: str | None, default: int) -> int:
    """Parse a string to int, returning default if None or invalid."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_bool(value: str | None, default: bool) -> bool:
    """Parse a string flag such as "1", "true" or "no", returning default if unrecognised."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default


def load_settings(env_path: str | Path | None = None, validate: bool = True) -> Settings:
    """Load settings from environment variables and .env file.

    Args:
        env_path: Optional path to .env file. If None, searches for .env
                  in current directory and parent directories.
        validate: If True, validate settings after loading.

    Returns:
        Settings instance with loaded configuration.

    Raises:
        ConfigurationError: If validate=True and configuration is invalid.
    """
    # Load .env file if it exists
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    settings = Settings(
        headless=_parse_bool(os.getenv("BROWSER_HEADLESS"), True),
        no_sandbox=_parse_bool(os.getenv("BROWSER_NO_SANDBOX"), True),
        viewport_width=_parse_int(
            os.getenv("VIEWPORT_WIDTH"), DEFAULT_VIEWPORT_WIDTH
        ),
        viewport_height=_parse_int(
            os.getenv("VIEWPORT_HEIGHT"), DEFAULT_VIEWPORT_HEIGHT
        ),
        navigation_timeout_ms=_parse_int(
            os.getenv("NAVIGATION_TIMEOUT_MS"), DEFAULT_NAVIGATION_TIMEOUT_MS
        ),
        wait_timeout_ms=_parse_int(
            os.getenv("CONTENT_WAIT_TIMEOUT_MS"), DEFAULT_WAIT_TIMEOUT_MS
        ),
        executable_path=os.getenv("BROWSER_EXECUTABLE_PATH", ""),
    )

    if validate:
        settings.validate()

    return settings
