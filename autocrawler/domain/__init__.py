"""Domain objects for AutoCrawler - explicit re-exports to satisfy linters."""
from .crawl_config import CrawlConfig as CrawlConfig, TraversalMode as TraversalMode
from .page_result import PageResult as PageResult, PageStatus as PageStatus
from .log_entry import LogEntry as LogEntry, Severity as Severity
from .run_status import RunStatus as RunStatus
from .crawl_state import CrawlState as CrawlState

__all__ = [
    "CrawlConfig",
    "TraversalMode",
    "PageResult",
    "PageStatus",
    "LogEntry",
    "Severity",
    "RunStatus",
    "CrawlState",
]
