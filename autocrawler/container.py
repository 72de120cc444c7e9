"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests

from autocrawler.services.fetch_channels import DEFAULT_CHANNELS
from autocrawler.services.html_text_extractor import HtmlTextExtractor
from autocrawler.services.retriever import Retriever
from autocrawler.services.summarizer import GeminiSummarizer
from autocrawler.services.traversal_engine import TraversalEngine
from autocrawler import config as env


# Environment variables used by the container (read via `autocrawler.config` helpers).
#
# USER_AGENT (str, default: "AutoCrawler/0.1")
#   User-Agent header sent to the fetch channels.
#
# HTTP_TIMEOUT (int seconds, default: 30)
#   Bounded wait for a single fetch channel attempt.
#
# MIN_CONTENT_LENGTH (int, default: 50)
#   Responses shorter than this are treated as a failed channel attempt.
#
# CRAWL_DELAY (float seconds, default: 1.0)
#   Delay between processed URLs, to respect the fetch channels' rate limits.
#
# GEMINI_API_KEY (str | optional, falls back to API_KEY)
#   Credential for the summarizer. Without it summaries are skipped per page.
#
# GEMINI_MODEL (str, default: "gemini-2.0-flash")
#   Model used for page summaries.
#
# SUMMARY_MAX_INPUT_CHARS (int, default: 10000)
#   Page text is truncated to this many characters before summarizing.
ENV = {
    "USER_AGENT": env.get_str_env("USER_AGENT", "AutoCrawler/0.1"),
    "HTTP_TIMEOUT": env.get_int_env("HTTP_TIMEOUT", 30),
    "MIN_CONTENT_LENGTH": env.get_int_env("MIN_CONTENT_LENGTH", 50),
    "CRAWL_DELAY": env.get_float_env("CRAWL_DELAY", 1.0),
    "GEMINI_API_KEY": env.gemini_api_key(),
    "GEMINI_MODEL": env.get_str_env("GEMINI_MODEL", "gemini-2.0-flash"),
    "SUMMARY_MAX_INPUT_CHARS": env.get_int_env("SUMMARY_MAX_INPUT_CHARS", 10_000),
}

# Keys that must never be echoed back by the systems endpoint.
SECRET_KEYS = frozenset({"GEMINI_API_KEY"})


class Container(containers.DeclarativeContainer):
    """Dependency injection container for AutoCrawler."""

    # Configuration
    config = providers.Configuration(default=ENV)

    retriever = providers.Singleton(
        Retriever,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        channels=providers.Object(DEFAULT_CHANNELS),
        timeout=config.HTTP_TIMEOUT.as_(int),
        min_content_length=config.MIN_CONTENT_LENGTH.as_(int),
    )

    extractor = providers.Singleton(
        HtmlTextExtractor
    )

    summarizer = providers.Singleton(
        GeminiSummarizer,
        api_key=config.GEMINI_API_KEY,
        http_client=providers.Object(requests.post),
        model=config.GEMINI_MODEL.as_(str),
        max_input_chars=config.SUMMARY_MAX_INPUT_CHARS.as_(int),
    )

    # One engine per process: it owns the current run.
    traversal_engine = providers.Singleton(
        TraversalEngine,
        retriever=retriever,
        extractor=extractor,
        summarizer=summarizer,
        delay_seconds=config.CRAWL_DELAY.as_(float),
    )
