from typing import NamedTuple


class RetrievedDocument(NamedTuple):
    """Document returned by the first fetch channel that succeeded."""
    content: str
    status_code: int = 200
