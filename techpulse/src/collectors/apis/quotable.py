"""
Quotable collector — one random quotation per fetch.
Public API, no authentication required.

API reference: https://github.com/lukePeavey/quotable
"""
from typing import Any

from loguru import logger

from src.collectors.base import BaseCollector, Page, SourceParams, SourceType, UnifiedItem
from src.collectors.errors import MalformedResponse
from src.formatter.normalize import clamp_text, parse_timestamp

_RANDOM_URL  = "https://api.quotable.io/random"
_SUMMARY_MAX = 240


class QuotableCollector(BaseCollector):
    """Always returns exactly one quote; never paginates."""

    source_type = SourceType.QUOTE
    paginated   = False

    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        data = await self._get_json(self.config.get("url", _RANDOM_URL))

        # /quotes/random style endpoints wrap the quote in a one-element list
        if isinstance(data, list) and len(data) == 1:
            data = data[0]
        if not isinstance(data, dict) or not data.get("content") or not data.get("_id"):
            raise MalformedResponse(self.source_type, "expected a quote with _id and content")

        item = _to_item(data)
        logger.info(f"[Quotable] {item.id} by {item.author or 'unknown'}")
        return Page(items=(item,), next_cursor=None, has_more=False)


def _to_item(data: dict) -> UnifiedItem:
    author = data.get("author") or ""
    tags   = data.get("tags") if isinstance(data.get("tags"), list) else []

    return UnifiedItem(
        id        = f"quote_{data['_id']}",
        source    = SourceType.QUOTE,
        title     = f"Quote by {author}" if author else "Quote",
        url       = "",
        timestamp = parse_timestamp(data.get("dateAdded")),
        summary   = clamp_text(f"“{data['content']}”", _SUMMARY_MAX),
        author    = author,
        tags      = tuple(str(t) for t in tags),
    )
