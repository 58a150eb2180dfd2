"""Whitespace cleanup for extracted article text."""

import re


# Three or more newlines become a single paragraph break
EXCESS_NEWLINES_PATTERN = re.compile(r"\n{3,}")

# Two or more spaces become one; tabs and other whitespace are left alone
EXCESS_SPACES_PATTERN = re.compile(r" {2,}")


def normalize_text(text: str) -> str:
    """Collapse redundant newlines and spaces, then trim.

    Newlines are collapsed before spaces so that paragraph breaks are
    settled before any space run is touched.

    Args:
        text: Raw text joined from document text nodes

    Returns:
        Cleaned text with at most two consecutive newlines and no double spaces

    Example:
        >>> normalize_text("  Line1\\n\\n\\n\\n\\nLine2    end  ")
        'Line1\\n\\nLine2 end'
    """
    text = EXCESS_NEWLINES_PATTERN.sub("\n\n", text)
    text = EXCESS_SPACES_PATTERN.sub(" ", text)
    return text.strip()
