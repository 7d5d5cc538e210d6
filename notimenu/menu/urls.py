"""URL extraction from notification text and chooser output."""

import logging
import re
from functools import lru_cache
from typing import Iterator, Optional, Pattern

from notimenu.errors import UrlPatternError

logger = logging.getLogger(__name__)

URL_PATTERN = r"((http|ftp|https)(://))?(www\.)?[\w-]+\.\S+"


@lru_cache(maxsize=1)
def get_url_pattern() -> Pattern[str]:
    """Compile the URL pattern once per process.

    Raises:
        UrlPatternError: If the pattern does not compile
    """
    try:
        return re.compile(URL_PATTERN, re.IGNORECASE)
    except re.error as e:
        logger.error(f"Failed to compile URL pattern: {e}")
        raise UrlPatternError(f"Invalid URL pattern {URL_PATTERN!r}: {e}") from e


def iter_urls(text: Optional[str]) -> Iterator[str]:
    """Yield URL-like substrings of text, left to right, without overlap.

    Args:
        text: Text to scan

    Yields:
        Each match in order of appearance (duplicates included)
    """
    if not text:
        return

    pattern = get_url_pattern()
    pos = 0
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            return
        if match.end() == match.start():
            logger.error(f"Zero-length URL match at offset {match.start()}, stopping scan")
            return

        yield match.group(0)
        pos = match.end()


def extract_urls(text: Optional[str]) -> Optional[str]:
    """Extract all URLs from text.

    Args:
        text: Text to scan

    Returns:
        URLs joined by newlines, or None if there are none
    """
    urls = list(iter_urls(text))
    if not urls:
        return None
    return "\n".join(urls)
