from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TraversalMode(str, Enum):
    SINGLE = "single"
    PAGINATE = "paginate"
    FOLLOW_LINKS = "follow-links"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            aliases = {
                "single": cls.SINGLE,
                "paginate": cls.PAGINATE,
                "pagination": cls.PAGINATE,
                "follow-links": cls.FOLLOW_LINKS,
                "link-follow": cls.FOLLOW_LINKS,
            }
            return aliases.get(normalized)
        return None


@dataclass(frozen=True)
class CrawlConfig:
    """Settings for a single crawl run.

    `page_limit` only bounds follow-links runs; single and paginate runs are
    bounded by their initial queue. `start_id`/`end_id` are used by paginate.
    """

    seed_url: str
    mode: TraversalMode = TraversalMode.SINGLE
    page_limit: int = 5
    start_id: int = 1
    end_id: int = 3
    summarize: bool = False
    record_failures: bool = False

    def __post_init__(self):
        # accept plain strings for mode so callers can pass user input through
        if not isinstance(self.mode, TraversalMode):
            object.__setattr__(self, "mode", TraversalMode(self.mode))
