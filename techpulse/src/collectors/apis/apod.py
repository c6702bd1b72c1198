"""
NASA APOD collector — today's Astronomy Picture of the Day.
Single-shot: at most one item, never paginates.

A failed request is raised as UpstreamError; no placeholder item is ever
substituted for the real picture.

API reference: https://api.nasa.gov/
"""
from typing import Any

from loguru import logger

from config.settings import NASA_API_KEY
from src.collectors.base import BaseCollector, Page, SourceParams, SourceType, UnifiedItem
from src.collectors.errors import MalformedResponse
from src.formatter.normalize import clamp_text, parse_timestamp, safe_url

_APOD_URL    = "https://api.nasa.gov/planetary/apod"
_APOD_HOME   = "https://apod.nasa.gov/"
_SUMMARY_MAX = 240


class ApodCollector(BaseCollector):
    """config keys: api_key (str) — defaults to NASA_API_KEY (DEMO_KEY)."""

    source_type = SourceType.FEATURE
    paginated   = False

    def __init__(self, config: dict | None = None):
        super().__init__(config)
        self.api_key = self.config.get("api_key", NASA_API_KEY)

    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        data = await self._get_json(_APOD_URL, params={"api_key": self.api_key})

        if not isinstance(data, dict):
            raise MalformedResponse(self.source_type, "expected a JSON object")
        if not data:
            logger.warning("[APOD] empty response — no picture today")
            return Page(has_more=False)

        item = _to_item(data)
        logger.info(f"[APOD] {item.id}: {item.title}")
        return Page(items=(item,), next_cursor=None, has_more=False)


def _to_item(data: dict) -> UnifiedItem:
    url   = safe_url(data.get("url"))
    hd    = safe_url(data.get("hdurl"))
    image = (hd or url) if data.get("media_type") == "image" else ""
    date  = data.get("date") or ""

    return UnifiedItem(
        id        = f"feature_{date or 'apod'}",
        source    = SourceType.FEATURE,
        title     = str(data.get("title") or "").strip() or "Astronomy Picture of the Day",
        url       = url or _APOD_HOME,
        timestamp = parse_timestamp(date) if date else None,
        summary   = clamp_text(data.get("explanation"), _SUMMARY_MAX),
        author    = clamp_text(data.get("copyright"), 120) or "NASA",
        image_url = image,
        tags      = ("space", "science"),
    )
