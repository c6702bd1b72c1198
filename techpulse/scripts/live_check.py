"""
Live smoke test — hits every public API once through its collector, then
runs a full controller cycle (refresh → load more → filtered view).

Needs network access; no credentials (NASA falls back to DEMO_KEY).

Usage:
    cd techpulse
    python scripts/live_check.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger
from src.collectors.base import SourceParams, SourceType
from src.collectors.errors import SourceError
from src.feed.controller import AggregationController
from src.formatter.formatter import format_card, format_column
from src.main import build_collectors


async def main() -> None:
    logger.info("=" * 60)
    logger.info("Tech Pulse smoke test")
    logger.info("=" * 60)

    collectors = build_collectors()

    # ── 1. Each collector on its own ──────────────────────────────────────────
    logger.info("\n[1] Collectors")
    for source_type, collector in collectors.items():
        try:
            page = await collector.fetch_page(SourceParams(query="", window="7d"))
        except SourceError as exc:
            logger.warning(f"    {source_type.value}: {exc}")
            continue
        logger.info(
            f"    {source_type.value} → {len(page.items)} items "
            f"(next_cursor={page.next_cursor!r}, has_more={page.has_more})"
        )
        if page.items:
            logger.info("\n" + format_card(page.items[0]))

    # ── 2. Controller cycle ───────────────────────────────────────────────────
    logger.info("\n[2] Controller: refresh_all → load_more on news")
    controller = AggregationController(collectors)
    news_id = controller.activate_source(SourceType.NEWS, SourceParams(query="ai", window="7d"))
    controller.activate_source(SourceType.FORUM)
    controller.activate_source(SourceType.QUOTE)

    await controller.refresh_all()
    await controller.load_more(news_id)

    snapshots = controller.snapshot()
    for instance_id, items in controller.view("", "newest").items():
        snap = snapshots[instance_id]
        logger.info(
            f"    {instance_id}: {len(snap.items)} items, cursor={snap.cursor!r}, "
            f"has_more={snap.has_more}, error={snap.last_error}"
        )
        logger.info("\n" + format_column(snap, items[:3]))

    logger.info("\n" + "=" * 60)
    logger.info("Smoke test complete.")
    logger.info("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
