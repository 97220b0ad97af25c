"""URL extraction from free-text prompts."""

import re

# http:// or https:// followed by the maximal run of non-whitespace characters
URL_PATTERN = re.compile(r"https?://[^\s]+")


def extract_urls(prompt: str) -> list[str]:
    """
    Return every URL in the prompt, in encounter order.

    Duplicates are kept. A prompt without URLs yields an empty list.

    Example:
        >>> extract_urls("Check out https://example.com and http://test.com")
        ['https://example.com', 'http://test.com']
    """
    return URL_PATTERN.findall(prompt)
