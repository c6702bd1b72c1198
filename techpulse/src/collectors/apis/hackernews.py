"""
Hacker News collector — newest stories from the Algolia search API.
Public API, no authentication required.

Pagination is by page index (cursor 0, 1, 2 …). The recency window is sent
as a numeric filter on created_at_i; "all" sends no filter.

API reference: https://hn.algolia.com/api
"""
import time
from typing import Any

from loguru import logger

from config.settings import NEWS_PAGE_SIZE
from src.collectors.base import (
    WINDOW_SECONDS,
    BaseCollector,
    Page,
    SourceParams,
    SourceType,
    UnifiedItem,
)
from src.collectors.errors import MalformedResponse
from src.formatter.normalize import clamp_text, non_negative_int, parse_timestamp, safe_url

_SEARCH_URL   = "https://hn.algolia.com/api/v1/search_by_date"
_ITEM_URL     = "https://news.ycombinator.com/item?id={}"
_SUMMARY_MAX  = 140


class HackerNewsCollector(BaseCollector):
    """
    config keys:
        page_size  (int)  hits per page (default NEWS_PAGE_SIZE)
    """

    source_type = SourceType.NEWS

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.page_size = int(self.config.get("page_size", NEWS_PAGE_SIZE))

    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        page = int(cursor or 0)
        query = {
            "tags":        "story",
            "hitsPerPage": str(self.page_size),
            "page":        str(page),
        }
        if params.query.strip():
            query["query"] = params.query.strip()

        min_created = _window_floor(params.window)
        if min_created is not None:
            query["numericFilters"] = f"created_at_i>{min_created}"

        logger.debug(f"[HN] page {page} query={params.query!r} window={params.window}")
        data = await self._get_json(_SEARCH_URL, params=query)

        if not isinstance(data, dict) or not isinstance(data.get("hits", []), list):
            raise MalformedResponse(self.source_type, "expected an object with a 'hits' list")

        items = tuple(
            _to_item(hit) for hit in data.get("hits", [])
            if isinstance(hit, dict) and hit.get("objectID")
        )

        nb_pages = data.get("nbPages")
        has_more = isinstance(nb_pages, int) and page + 1 < nb_pages

        logger.info(f"[HN] page {page} → {len(items)} stories (has_more={has_more})")
        return Page(items=items, next_cursor=page + 1, has_more=has_more)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _window_floor(window: str) -> int | None:
    """Lower-bound unix timestamp for the recency window, None for "all"."""
    if window == "all":
        return None
    seconds = WINDOW_SECONDS.get(window)
    if seconds is None:
        raise ValueError(f"unknown recency window: {window!r}")
    return int(time.time()) - seconds


def _to_item(hit: dict) -> UnifiedItem:
    object_id = str(hit["objectID"])
    url       = safe_url(hit.get("url") or _ITEM_URL.format(object_id))
    tags      = hit.get("_tags") if isinstance(hit.get("_tags"), list) else []

    return UnifiedItem(
        id            = f"news_{object_id}",
        source        = SourceType.NEWS,
        title         = str(hit.get("title") or "").strip() or "(Untitled)",
        url           = url,
        timestamp     = parse_timestamp(hit.get("created_at")),
        summary       = clamp_text(hit.get("story_text"), _SUMMARY_MAX),
        score         = non_negative_int(hit.get("points")),
        comment_count = non_negative_int(hit.get("num_comments")),
        author        = hit.get("author") or "",
        tags          = tuple(str(t) for t in tags if t != "story"),
    )
