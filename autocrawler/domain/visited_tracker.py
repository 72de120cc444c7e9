from typing import Set


class VisitedTracker:
    """
    Tracks which URLs have been visited during a crawl.

    Marks are permanent for the life of the tracker: a run relies on this to
    never record the same URL twice, so there is no eviction.
    """

    def __init__(self):
        self._visited: Set[str] = set()

    def mark(self, url: str) -> None:
        """Mark a URL as visited."""
        self._visited.add(url)

    def is_visited(self, url: str) -> bool:
        """Check if a URL has been visited."""
        return url in self._visited

    def __len__(self) -> int:
        return len(self._visited)
