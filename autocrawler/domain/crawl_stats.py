from typing import NamedTuple


class CrawlStats(NamedTuple):
    """Aggregate figures shown alongside a run."""
    total_pages: int
    total_links: int
    total_size: int
    """Sum of recorded content lengths, in characters."""
    status: str
