import re
from typing import List, Optional

from autocrawler.domain.crawl_config import TraversalMode

PAGE_PLACEHOLDER = "{{page}}"

_TRAILING_ID = re.compile(r"(\d+)(/?)$")


def generate_paginated_urls(base_url: str, start: int, end: int) -> List[str]:
    """Build one URL per ID in the inclusive range `start`..`end`.

    A `{{page}}` token in `base_url` is replaced by the ID; otherwise the ID
    is appended, adding a `/` unless the base already ends in `=` or `/`.
    An invalid range yields an empty list.
    """
    if start < 0 or end < 0 or start > end:
        return []

    has_placeholder = PAGE_PLACEHOLDER in base_url
    urls = []
    for i in range(start, end + 1):
        if has_placeholder:
            urls.append(base_url.replace(PAGE_PLACEHOLDER, str(i), 1))
        elif base_url.endswith("=") or base_url.endswith("/"):
            urls.append(f"{base_url}{i}")
        else:
            urls.append(f"{base_url}/{i}")
    return urls


def auto_format_url(url: str) -> Optional[str]:
    """Swap the trailing numeric ID of `url` for the page placeholder.

    Returns None when the URL does not end in a number (optionally followed
    by a slash).
    """
    if not _TRAILING_ID.search(url):
        return None
    return _TRAILING_ID.sub(lambda m: PAGE_PLACEHOLDER + m.group(2), url, count=1)


def preview_url(url: str, mode: TraversalMode, start: int) -> str:
    """First URL a run with these settings will visit."""
    if mode is not TraversalMode.PAGINATE:
        return url
    urls = generate_paginated_urls(url, start, start)
    return urls[0] if urls else url
