from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class PageStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class PageResult:
    url: str
    title: str
    content: str
    status: PageStatus
    timestamp: int
    """Epoch milliseconds at which the page was recorded."""
    links_found: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.value
        return d
