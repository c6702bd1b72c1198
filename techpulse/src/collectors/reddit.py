"""
Reddit collector — hot posts from one or more subreddits via the public JSON
listing (no OAuth app needed).

The listing has no full-text search, so params.query is applied client-side
after each page is fetched, against title + summary + subreddit. The cursor
is Reddit's opaque `after` token; no token means the listing is exhausted.
"""
import html
from typing import Any

from loguru import logger

from config.settings import FORUM_PAGE_SIZE, FORUM_SUBREDDITS
from src.collectors.base import BaseCollector, Page, SourceParams, SourceType, UnifiedItem
from src.collectors.errors import MalformedResponse
from src.formatter.normalize import clamp_text, non_negative_int, parse_timestamp, safe_url

_LISTING_URL = "https://www.reddit.com/r/{}/hot.json"
_SUMMARY_MAX = 160


class RedditCollector(BaseCollector):
    """
    config keys:
        subreddits  (str)  default listing, e.g. "technology+startups"
        limit       (int)  posts per page (default FORUM_PAGE_SIZE)

    params.options["subreddits"] overrides the configured listing per column.
    """

    source_type = SourceType.FORUM

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.subreddits = self.config.get("subreddits", FORUM_SUBREDDITS)
        self.limit      = int(self.config.get("limit", FORUM_PAGE_SIZE))

    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        subreddits = params.options.get("subreddits") or self.subreddits
        query = {"limit": str(self.limit), "raw_json": "1"}
        if cursor:
            query["after"] = str(cursor)

        logger.debug(f"[Reddit] r/{subreddits} after={cursor}")
        data = await self._get_json(_LISTING_URL.format(subreddits), params=query)

        listing = data.get("data") if isinstance(data, dict) else None
        if not isinstance(listing, dict) or not isinstance(listing.get("children", []), list):
            raise MalformedResponse(self.source_type, "expected a listing with data.children")

        posts = [
            child.get("data") for child in listing.get("children", [])
            if isinstance(child, dict) and isinstance(child.get("data"), dict)
        ]
        needle = params.query.strip().lower()
        items = [
            _to_item(post) for post in posts
            if post.get("id") and (not needle or needle in _haystack(post))
        ]

        after = listing.get("after") or None
        logger.info(
            f"[Reddit] r/{subreddits} → {len(items)} posts"
            f"{f' matching {needle!r}' if needle else ''} (has_more={bool(after)})"
        )
        return Page(items=tuple(items), next_cursor=after, has_more=bool(after))


# ── Helpers ───────────────────────────────────────────────────────────────────

def _to_item(post: dict) -> UnifiedItem:
    permalink = post.get("permalink") or ""
    url = safe_url(
        post.get("url_overridden_by_dest")
        or (f"https://www.reddit.com{permalink}" if permalink else "")
    )
    subreddit = post.get("subreddit_name_prefixed") or ""
    flair     = post.get("link_flair_text") or ""

    return UnifiedItem(
        id            = f"forum_{post['id']}",
        source        = SourceType.FORUM,
        title         = str(post.get("title") or "").strip() or "(Untitled)",
        url           = url,
        timestamp     = parse_timestamp(post.get("created_utc")),
        summary       = clamp_text(post.get("selftext"), _SUMMARY_MAX),
        score         = non_negative_int(post.get("ups")),
        comment_count = non_negative_int(post.get("num_comments")),
        author        = post.get("author") or "",
        image_url     = _extract_image(post),
        tags          = tuple(t for t in (subreddit, flair) if t),
    )


def _extract_image(post: dict) -> str:
    """Return the full-size preview image if Reddit generated one."""
    try:
        source_url = post["preview"]["images"][0]["source"]["url"]
    except (KeyError, IndexError, TypeError):
        return ""
    return safe_url(html.unescape(source_url or ""))


def _haystack(post: dict) -> str:
    """Title, clamped summary and subreddit of a raw post, lowercased."""
    title     = str(post.get("title") or "")
    summary   = clamp_text(post.get("selftext"), _SUMMARY_MAX)
    subreddit = str(post.get("subreddit_name_prefixed") or post.get("subreddit") or "")
    return f"{title} {summary} {subreddit}".lower()
