"""
UnifiedItem dataclass and BaseCollector ABC.
Every collector returns a Page of UnifiedItems from its fetch_page() method.
"""
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

import httpx
from loguru import logger

from config.settings import HTTP_TIMEOUT, USER_AGENT
from src.collectors.errors import MalformedResponse, UpstreamError
from src.formatter.normalize import host_from_url


class SourceType(str, Enum):
    NEWS    = "news"      # Hacker News search
    FORUM   = "forum"     # Reddit listings
    FEATURE = "feature"   # NASA picture of the day
    QUOTE   = "quote"     # Quotable


Window = Literal["24h", "7d", "30d", "all"]

WINDOW_SECONDS: dict[str, int] = {
    "24h": 24 * 3600,
    "7d":  7 * 24 * 3600,
    "30d": 30 * 24 * 3600,
}


@dataclass(frozen=True)
class UnifiedItem:
    id:            str           # collector-prefixed, e.g. "news_4031"
    source:        SourceType
    title:         str
    url:           str = ""      # validated absolute URL or ""
    timestamp:     datetime | None = None
    summary:       str = ""      # clamped + whitespace-collapsed
    score:         int = 0
    comment_count: int = 0
    author:        str = ""
    image_url:     str = ""
    tags:          tuple[str, ...] = ()

    @property
    def host(self) -> str:
        return host_from_url(self.url)


@dataclass(frozen=True)
class SourceParams:
    query:   str = ""
    window:  Window = "7d"                 # news only
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Page:
    items:       tuple[UnifiedItem, ...] = ()
    next_cursor: Any = None
    has_more:    bool = False


class BaseCollector(ABC):
    source_type: SourceType
    paginated:   bool = True

    def __init__(self, config: dict | None = None):
        self.config = config or {}

    @abstractmethod
    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        """
        Fetch one page. Raises UpstreamError / MalformedResponse on failure.
        Task cancellation propagates as asyncio.CancelledError.
        """
        ...

    async def _get_json(
        self, url: str, params: dict | None = None, headers: dict | None = None
    ) -> Any:
        """GET `url` and decode the JSON body, mapping every failure to a SourceError."""
        request_headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if headers:
            request_headers.update(headers)

        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, headers=request_headers) as client:
            try:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.warning(f"[{self.source_type.value}] HTTP {exc.response.status_code} from {url}")
                raise UpstreamError(self.source_type, exc.response.status_code) from exc
            except httpx.TransportError as exc:
                logger.warning(f"[{self.source_type.value}] transport error for {url}: {exc!r}")
                raise UpstreamError(self.source_type, "network") from exc

        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedResponse(self.source_type, "body is not JSON") from exc
