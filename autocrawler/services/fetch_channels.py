"""Upstream relays used to fetch a page on the crawler's behalf.

Each channel knows how to wrap a target URL for its relay and how to pull
the document back out of the relay's response. Order in DEFAULT_CHANNELS is
the order the retriever tries them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from urllib.parse import quote


@dataclass(frozen=True)
class FetchChannel:
    name: str
    build_url: Callable[[str], str]
    extract_content: Callable[[object], Optional[str]]


def _encode(target: str) -> str:
    # matches encodeURIComponent
    return quote(target, safe="-_.!~*'()")


def _response_text(response) -> Optional[str]:
    return response.text


def _allorigins_contents(response) -> Optional[str]:
    data = response.json()
    if not isinstance(data, dict):
        return None
    return data.get("contents")


ALL_ORIGINS = FetchChannel(
    name="AllOrigins",
    build_url=lambda target: f"https://api.allorigins.win/get?url={_encode(target)}",
    extract_content=_allorigins_contents,
)

CODE_TABS = FetchChannel(
    name="CodeTabs",
    build_url=lambda target: f"https://api.codetabs.com/v1/proxy?quest={_encode(target)}",
    extract_content=_response_text,
)

CORS_PROXY = FetchChannel(
    name="CorsProxy",
    build_url=lambda target: f"https://corsproxy.io/?{_encode(target)}",
    extract_content=_response_text,
)

THING_PROXY = FetchChannel(
    name="ThingProxy",
    build_url=lambda target: f"https://thingproxy.freeboard.io/fetch/{target}",
    extract_content=_response_text,
)

HAC_APP = FetchChannel(
    name="HacApp",
    build_url=lambda target: f"https://api.hac.app/proxy?url={_encode(target)}",
    extract_content=_response_text,
)

DEFAULT_CHANNELS: Tuple[FetchChannel, ...] = (
    ALL_ORIGINS,
    CODE_TABS,
    CORS_PROXY,
    THING_PROXY,
    HAC_APP,
)
