"""AutoCrawler - best-effort web content extractor."""

__version__ = "0.1.0"
