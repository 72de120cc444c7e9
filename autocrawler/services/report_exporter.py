from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union

from autocrawler.domain.page_result import PageResult

DEFAULT_FILENAME = "crawl_data.txt"
REPORT_ENCODING = "utf-8-sig"  # BOM so naive viewers pick UTF-8

_RULE = "=" * 49
_DASH = "-" * 49


def render_report(pages: Sequence[PageResult], generated_at: Optional[datetime] = None) -> str:
    """Render recorded pages as the plain-text crawl report (no BOM)."""
    generated_at = generated_at or datetime.now()
    lines = [
        f"CRAWL REPORT - {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n",
        f"Total Pages: {len(pages)}\n",
        f"{_RULE}\n\n",
    ]
    for index, page in enumerate(pages, start=1):
        lines.append(f"FILE #{index}: {page.url}\n")
        lines.append(f"TITLE: {page.title}\n")
        lines.append(f"STATUS: {page.status.value}\n")
        if page.error:
            lines.append(f"ERROR: {page.error}\n")
        lines.append(f"{_DASH}\n")
        lines.append(f"{page.content}\n")
        lines.append(f"\n{_RULE}\n\n")
    return "".join(lines)


def encode_report(pages: Sequence[PageResult], generated_at: Optional[datetime] = None) -> bytes:
    return render_report(pages, generated_at).encode(REPORT_ENCODING)


def write_report(pages: Sequence[PageResult], path: Union[str, Path], generated_at: Optional[datetime] = None) -> Path:
    target = Path(path)
    target.write_bytes(encode_report(pages, generated_at))
    return target


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {units[i]}"
