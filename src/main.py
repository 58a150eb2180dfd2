#!/usr/bin/env python3
"""Main entry point for the Weixin article reader.

This module provides the CLI interface for reading Weixin articles.

Usage:
    python -m src.main https://mp.weixin.qq.com/s/xxx    # Read one or more articles
    python -m src.main --stdio                           # Run as an MCP server on stdio
    python -m src.main -v URL                            # Run with verbose logging
"""

import argparse
import sys

from src.agent.runner import run


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="weixin-article-reader",
        description="Render Weixin articles in headless Chromium and print them as JSON",
    )

    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="Article URL, must start with https://mp.weixin.qq.com/s/",
    )

    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Serve the read_weixin_article tool to an MCP client over stdio",
    )

    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file with browser settings",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    parsed = parser.parse_args(args)
    if not parsed.urls and not parsed.stdio:
        parser.error("at least one URL is required unless --stdio is given")
    return parsed


def main(args: list[str] | None = None) -> int:
    """Main entry point for the article reader.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parsed = parse_args(args)
    return run(
        urls=parsed.urls,
        stdio=parsed.stdio,
        verbose=parsed.verbose,
        env_path=parsed.env_file,
    )


if __name__ == "__main__":
    sys.exit(main())
