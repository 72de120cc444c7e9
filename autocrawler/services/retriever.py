import logging
import time
from typing import Callable, Optional, Sequence

import requests

from autocrawler.domain.retrieved_document import RetrievedDocument
from autocrawler.exceptions import ChannelError, RetrievalError
from autocrawler.services.fetch_channels import DEFAULT_CHANNELS, FetchChannel

logger = logging.getLogger(__name__)


def add_cache_buster(url: str, now_ms: int) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}_t={now_ms}"


class Retriever:
    """
    Fetches a page through an ordered list of fetch channels.

    Requires http_client callable for dependency injection, the same way a
    plain `requests.get` is called. The first channel returning plausible
    content wins; channel failures are logged and the next channel is tried.
    """

    def __init__(
        self,
        user_agent: str,
        http_client: Callable,
        channels: Optional[Sequence[FetchChannel]] = None,
        timeout: float = 30,
        min_content_length: int = 50,
        clock: Callable[[], float] = time.time,
    ):
        self.user_agent = user_agent
        self.http_client = http_client
        self.channels = tuple(channels) if channels is not None else DEFAULT_CHANNELS
        self.timeout = timeout
        self.min_content_length = min_content_length
        self._clock = clock

    def retrieve(self, url: str) -> RetrievedDocument:
        """Return the first non-trivial document any channel yields for `url`."""
        for channel in self.channels:
            try:
                content = self._attempt(channel, url)
            except ChannelError as e:
                logger.warning("Proxy %s failed for %s: %s", channel.name, url, e.reason)
                continue
            logger.debug("Proxy %s returned %d chars for %s", channel.name, len(content), url)
            return RetrievedDocument(content=content, status_code=200)

        raise RetrievalError(url)

    def _attempt(self, channel: FetchChannel, url: str) -> str:
        # cache buster is regenerated per attempt
        target = add_cache_buster(url, int(self._clock() * 1000))
        headers = {"User-Agent": self.user_agent}
        try:
            resp = self.http_client(channel.build_url(target), headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ChannelError(channel.name, str(e)) from e
        except Exception as e:
            logger.warning("Proxy %s raised unexpectedly for %s", channel.name, url, exc_info=True)
            raise ChannelError(channel.name, f"unexpected error: {e!r}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise ChannelError(channel.name, f"status {resp.status_code}")

        try:
            content = channel.extract_content(resp)
        except ValueError as e:
            # requests raises a ValueError subclass for undecodable JSON
            raise ChannelError(channel.name, f"unreadable response: {e}") from e
        except Exception as e:
            logger.warning("Proxy %s returned an unreadable response for %s", channel.name, url, exc_info=True)
            raise ChannelError(channel.name, f"unreadable response: {e!r}") from e

        if not isinstance(content, str) or len(content) < self.min_content_length:
            raise ChannelError(channel.name, "Empty or invalid response from proxy")
        return content
