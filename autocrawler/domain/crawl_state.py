import logging
import threading
import uuid
from collections import deque
from datetime import datetime
from typing import Deque, Iterable, List, Optional

from autocrawler.domain.crawl_config import CrawlConfig
from autocrawler.domain.crawl_stats import CrawlStats
from autocrawler.domain.log_entry import LogEntry, Severity
from autocrawler.domain.page_result import PageResult, PageStatus
from autocrawler.domain.run_status import RunStatus
from autocrawler.domain.visited_tracker import VisitedTracker

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class CrawlState:
    """
    Mutable state owned by a single crawl run.

    Holds the queue, visited tracker, recorded pages, run log and status.
    A fresh instance is created for every run so nothing leaks between runs.
    Only the traversal engine mutates it; readers go through `snapshot()`
    or the copying accessors, which take the lock.
    """

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        visited_tracker: Optional[VisitedTracker] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        self.config = config
        self.queue: Deque[str] = deque()
        self.visited = visited_tracker if visited_tracker is not None else VisitedTracker()
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._pages: List[PageResult] = []
        self._logs: List[LogEntry] = []
        self._status = RunStatus.IDLE
        self._lock = threading.RLock()

    @property
    def status(self) -> RunStatus:
        with self._lock:
            return self._status

    def set_status(self, status: RunStatus) -> None:
        with self._lock:
            self._status = status

    def compare_and_set_status(self, expected: RunStatus, status: RunStatus) -> bool:
        """Move to `status` only if the run is currently `expected`."""
        with self._lock:
            if self._status is not expected:
                return False
            self._status = status
            return True

    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    def add_log(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        """Append a run log entry and mirror it to the module logger."""
        entry = LogEntry(
            id=uuid.uuid4().hex[:9],
            timestamp=datetime.now(),
            message=message,
            severity=severity,
        )
        with self._lock:
            self._logs.append(entry)
        logger.log(_LOG_LEVELS[severity], "%s", message)
        return entry

    def enqueue(self, urls: Iterable[str]) -> int:
        added = 0
        with self._lock:
            for url in urls:
                self.queue.append(url)
                added += 1
        return added

    def dequeue(self) -> Optional[str]:
        with self._lock:
            if not self.queue:
                return None
            return self.queue.popleft()

    def queue_length(self) -> int:
        with self._lock:
            return len(self.queue)

    def mark_visited(self, url: str) -> None:
        with self._lock:
            self.visited.mark(url)

    def is_visited(self, url: str) -> bool:
        with self._lock:
            return self.visited.is_visited(url)

    @property
    def visited_count(self) -> int:
        with self._lock:
            return len(self.visited)

    def record(self, page: PageResult) -> None:
        with self._lock:
            self._pages.append(page)

    @property
    def pages(self) -> List[PageResult]:
        with self._lock:
            return list(self._pages)

    @property
    def logs(self) -> List[LogEntry]:
        with self._lock:
            return list(self._logs)

    def successful_count(self) -> int:
        with self._lock:
            return sum(1 for p in self._pages if p.status is PageStatus.SUCCESS)

    def request_stop(self) -> bool:
        """Pause a running crawl. Returns False when the run is not running."""
        if not self.compare_and_set_status(RunStatus.RUNNING, RunStatus.PAUSED):
            return False
        self.stop_event.set()
        return True

    def stats(self) -> CrawlStats:
        with self._lock:
            return CrawlStats(
                total_pages=len(self._pages),
                total_links=sum(p.links_found for p in self._pages),
                total_size=sum(len(p.content) for p in self._pages),
                status=self._status.value,
            )

    def snapshot(self) -> dict:
        """Point-in-time copy for display; safe to hand to other threads."""
        with self._lock:
            return {
                "status": self._status.value,
                "seed_url": self.config.seed_url if self.config else None,
                "mode": self.config.mode.value if self.config else None,
                "queue_length": len(self.queue),
                "visited_count": len(self.visited),
                "stats": self.stats()._asdict(),
            }
