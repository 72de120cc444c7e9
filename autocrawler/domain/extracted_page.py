from typing import List, NamedTuple


class ExtractedPage(NamedTuple):
    """Readable view of a document produced by the HTML extractor."""
    text: str
    title: str
    links: List[str]
