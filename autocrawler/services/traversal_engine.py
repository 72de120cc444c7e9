import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from autocrawler.domain.crawl_config import CrawlConfig, TraversalMode
from autocrawler.domain.crawl_state import CrawlState
from autocrawler.domain.extracted_page import ExtractedPage
from autocrawler.domain.log_entry import LogEntry, Severity
from autocrawler.domain.page_result import PageResult, PageStatus
from autocrawler.domain.run_status import RunStatus
from autocrawler.exceptions import ConfigurationError, RetrievalError, SummarizationError
from autocrawler.services.report_exporter import encode_report
from autocrawler.services.summarizer import compose_summarized_content
from autocrawler.services.url_generator import generate_paginated_urls

logger = logging.getLogger(__name__)

SOFT_404_BANNER = "[WARNING: PAGE NOT FOUND OR EMPTY]"
_SOFT_404_MARKERS = ("page not found", "404")


def is_soft_404(title: str) -> bool:
    lowered = (title or "").lower()
    return any(marker in lowered for marker in _SOFT_404_MARKERS)


class StepOutcome(Enum):
    HALT = "halt"
    SKIPPED = "skipped"
    PROCESSED = "processed"


class TraversalEngine:
    """Drives a crawl run: one URL at a time, queue in, page results out.

    The engine owns the current run's `CrawlState`; every `start`/`run`
    replaces it with a fresh one. The loop checks the run status at the top
    of each step, so `stop()` takes effect once the in-flight URL finishes.
    It does NOT construct its collaborators (that stays in the DI layer).
    """

    def __init__(
        self,
        *,
        retriever,
        extractor,
        summarizer=None,
        delay_seconds: float = 1.0,
        clock: Callable[[], float] = time.time,
    ):
        self.retriever = retriever
        self.extractor = extractor
        self.summarizer = summarizer
        self.delay_seconds = delay_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CrawlState()
        self._thread: Optional[threading.Thread] = None

    # -- command interface -------------------------------------------------

    def start(self, config: CrawlConfig) -> CrawlState:
        """Begin a fresh run in a background thread and return its state.

        A configuration error leaves the returned state in `error` without
        starting a thread.
        """
        with self._lock:
            state = self._replace_state(config)
            if state.is_running():
                self._thread = threading.Thread(
                    target=self._run_loop,
                    args=(state,),
                    name="autocrawler-run",
                    daemon=True,
                )
                self._thread.start()
            return state

    def run(self, config: CrawlConfig) -> CrawlState:
        """Execute a whole run in the calling thread."""
        with self._lock:
            state = self._replace_state(config)
        if state.is_running():
            self._run_loop(state)
        return state

    def stop(self) -> bool:
        """Pause the current run. Returns False if nothing is running."""
        state = self.state
        if not state.request_stop():
            return False
        state.add_log("Process paused by user.", Severity.WARNING)
        return True

    def download_results(self) -> Optional[bytes]:
        """Export artifact for the current run, or None when nothing was recorded."""
        state = self.state
        pages = state.pages
        if not pages:
            state.add_log("No data to download.", Severity.WARNING)
            return None
        data = encode_report(pages)
        state.add_log("File download initiated.", Severity.SUCCESS)
        return data

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    # -- observables -------------------------------------------------------

    @property
    def state(self) -> CrawlState:
        with self._lock:
            return self._state

    @property
    def status(self) -> RunStatus:
        return self.state.status

    @property
    def logs(self) -> List[LogEntry]:
        return self.state.logs

    @property
    def pages(self) -> List[PageResult]:
        return self.state.pages

    @property
    def visited_count(self) -> int:
        return self.state.visited_count

    def stats(self):
        return self.state.stats()

    def snapshot(self) -> dict:
        return self.state.snapshot()

    # -- run lifecycle -----------------------------------------------------

    def _replace_state(self, config: Optional[CrawlConfig]) -> CrawlState:
        # caller holds self._lock
        self._state.request_stop()
        state = self.prepare(config)
        self._state = state
        return state

    def prepare(self, config: Optional[CrawlConfig]) -> CrawlState:
        """Create the state for a new run with its initial queue loaded."""
        state = CrawlState(config)
        try:
            urls = self._initial_urls(config, state)
        except ConfigurationError as e:
            state.add_log(str(e), Severity.ERROR)
            state.set_status(RunStatus.ERROR)
            return state
        state.enqueue(urls)
        state.set_status(RunStatus.RUNNING)
        return state

    def _initial_urls(self, config: Optional[CrawlConfig], state: CrawlState) -> List[str]:
        if config is None or not config.seed_url or not config.seed_url.strip():
            raise ConfigurationError("Please enter a valid URL")
        seed = config.seed_url.strip()

        if config.mode is TraversalMode.PAGINATE:
            state.add_log(f"Generating URLs from ID {config.start_id} to {config.end_id}...")
            urls = generate_paginated_urls(seed, config.start_id, config.end_id)
            if not urls:
                raise ConfigurationError("Could not generate URLs. Check format.")
            state.add_log(f"Generated {len(urls)} target URLs.")
            state.add_log(f"First URL: {urls[0]}")
            return urls

        if config.mode is TraversalMode.SINGLE:
            state.add_log(f"Preparing to crawl single page: {seed}")
        else:
            state.add_log(f"Starting Link Discovery from: {seed}")
        return [seed]

    def _run_loop(self, state: CrawlState) -> None:
        logger.info("Crawl loop started for %s", state.config.seed_url)
        try:
            while True:
                outcome = self.process_next(state)
                if outcome is StepOutcome.HALT:
                    break
                if outcome is StepOutcome.PROCESSED:
                    # wakes early on stop; the status check above is the exit point
                    state.stop_event.wait(self.delay_seconds)
        except Exception as e:
            logger.exception("Crawl loop failed for %s", state.config.seed_url)
            if state.compare_and_set_status(RunStatus.RUNNING, RunStatus.ERROR):
                state.add_log(f"Crawl aborted: {e}", Severity.ERROR)
        logger.info("Crawl loop exited with status %s", state.status.value)

    def _finish(self, state: CrawlState, reason: str) -> None:
        if state.compare_and_set_status(RunStatus.RUNNING, RunStatus.COMPLETED):
            state.add_log(f"Crawl Finished: {reason}", Severity.SUCCESS)

    # -- step --------------------------------------------------------------

    def process_next(self, state: CrawlState) -> StepOutcome:
        """Advance the run by one queue entry."""
        if not state.is_running():
            return StepOutcome.HALT

        if state.queue_length() == 0:
            self._finish(state, "Queue is empty.")
            return StepOutcome.HALT

        config = state.config
        if config.mode is TraversalMode.FOLLOW_LINKS and state.successful_count() >= config.page_limit:
            self._finish(state, f"Reached limit of {config.page_limit} pages.")
            return StepOutcome.HALT

        url = state.dequeue()
        if url is None:
            self._finish(state, "Queue is empty.")
            return StepOutcome.HALT

        if state.is_visited(url):
            logger.debug("Skipping (visited) %s", url)
            return StepOutcome.SKIPPED

        state.mark_visited(url)
        state.add_log(f"Crawling: {url}")
        self._process_url(state, url)
        return StepOutcome.PROCESSED

    def _process_url(self, state: CrawlState, url: str) -> None:
        try:
            document = self.retriever.retrieve(url)
        except RetrievalError as e:
            self._record_failure(state, url, str(e))
            return
        except Exception as e:
            logger.exception("Unexpected retrieval error for %s", url)
            self._record_failure(state, url, str(e))
            return

        if document.status_code != 200:
            self._record_failure(state, url, f"Failed to fetch. Status: {document.status_code}")
            return

        state.add_log(f"Fetched {len(document.content)} bytes. Parsing...", Severity.SUCCESS)
        page: ExtractedPage = self.extractor.extract(document.content, url)

        content = page.text
        if is_soft_404(page.title):
            state.add_log("Warning: Page appears to be empty or 404.", Severity.WARNING)
            content = f"{SOFT_404_BANNER}\n\n{content}"

        if state.config.summarize:
            content = self._summarize(state, page, content)

        state.record(PageResult(
            url=url,
            title=page.title,
            content=content,
            status=PageStatus.SUCCESS,
            timestamp=self._now_ms(),
            links_found=len(page.links),
        ))

        if state.config.mode is TraversalMode.FOLLOW_LINKS:
            # only the visited set is consulted; a URL may be queued twice
            new_links = [link for link in page.links if not state.is_visited(link)]
            state.enqueue(new_links)
            state.add_log(f"Found {len(page.links)} links, queued {len(new_links)} new.")

    def _summarize(self, state: CrawlState, page: ExtractedPage, content: str) -> str:
        if self.summarizer is None:
            state.add_log("AI Summary skipped: no summarizer configured.", Severity.WARNING)
            return content

        state.add_log(f"Summarizing: {page.title[:30]}...")
        try:
            summary = self.summarizer.summarize(page.text)
        except SummarizationError as e:
            state.add_log(f"AI Summary skipped: {e}", Severity.WARNING)
            return content
        except Exception as e:
            logger.exception("Summarizer failed unexpectedly")
            state.add_log(f"AI Summary skipped: {e}", Severity.WARNING)
            return content
        return compose_summarized_content(summary, content)

    def _record_failure(self, state: CrawlState, url: str, message: str) -> None:
        state.add_log(f"Error: {message}", Severity.ERROR)
        if not state.config.record_failures:
            return
        state.record(PageResult(
            url=url,
            title="",
            content="",
            status=PageStatus.FAILED,
            timestamp=self._now_ms(),
            links_found=0,
            error=message,
        ))

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
