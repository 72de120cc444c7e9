"""Custom exceptions for AutoCrawler services."""


class ConfigurationError(Exception):
    """Raised when a crawl cannot start because its configuration is unusable."""


class RetrievalError(Exception):
    """Raised when every fetch channel failed for a URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Unable to crawl {url}. The site might be blocking access or is unreachable."
        )


class ChannelError(Exception):
    """Raised for a single failed fetch channel attempt."""

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"Channel {channel} failed: {reason}")


class SummarizationError(Exception):
    """Raised when a summary cannot be produced (missing key or upstream failure)."""
