"""
Entry point — builds the collectors and the aggregation controller, then
refreshes every dashboard column on an APScheduler interval and logs the
filtered/sorted view.

Columns come from DEFAULT_COLUMNS (e.g. "news,forum,forum,quote" gives two
independent Reddit columns). The news column uses NEWS_QUERY / NEWS_WINDOW;
FILTER_TEXT and SORT_BY shape the rendered view.

Usage:
    cd techpulse
    python src/main.py
    # or, once installed: techpulse
"""
import asyncio
import signal
import sys
from datetime import datetime, timezone
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import (
    DEFAULT_COLUMNS,
    FILTER_TEXT,
    LOG_LEVEL,
    LOGS_DIR,
    NEWS_QUERY,
    NEWS_WINDOW,
    REFRESH_INTERVAL,
    SORT_BY,
)
from src.collectors.apis.apod import ApodCollector
from src.collectors.apis.hackernews import HackerNewsCollector
from src.collectors.apis.quotable import QuotableCollector
from src.collectors.base import BaseCollector, SourceParams, SourceType
from src.collectors.reddit import RedditCollector
from src.feed.controller import AggregationController
from src.formatter.formatter import format_column
from src.monitoring.alerts import alert_source_failure, alert_startup


# ── Collector factory ──────────────────────────────────────────────────────────

def build_collectors() -> dict[SourceType, BaseCollector]:
    return {
        SourceType.NEWS:    HackerNewsCollector(),
        SourceType.FORUM:   RedditCollector(),
        SourceType.FEATURE: ApodCollector(),
        SourceType.QUOTE:   QuotableCollector(),
    }


def build_controller(columns: list[str] | None = None) -> AggregationController:
    controller = AggregationController(build_collectors())
    for name in (DEFAULT_COLUMNS if columns is None else columns):
        try:
            source_type = SourceType(name)
        except ValueError:
            logger.warning(f"[Main] unknown column type {name!r} — skipping")
            continue
        params = SourceParams(query=NEWS_QUERY, window=NEWS_WINDOW) if source_type is SourceType.NEWS else None
        try:
            controller.activate_source(source_type, params)
        except ValueError as exc:
            logger.warning(f"[Main] {name} column not started: {exc} — skipping")
    return controller


# ── Job runners ────────────────────────────────────────────────────────────────

async def _run_refresh(controller: AggregationController) -> None:
    try:
        await controller.refresh_all()
    except Exception as exc:
        logger.error(f"[Scheduler] refresh failed: {exc}")
        return

    render(controller)
    for instance_id, snap in controller.snapshot().items():
        if snap.last_error:
            await alert_source_failure(instance_id, snap.last_error)


def render(controller: AggregationController) -> None:
    snapshots = controller.snapshot()
    view      = controller.view(FILTER_TEXT, SORT_BY)
    now       = datetime.now(timezone.utc)
    for instance_id, items in view.items():
        logger.info("\n" + format_column(snapshots[instance_id], items, now))


# ── Logging ────────────────────────────────────────────────────────────────────

def setup_logging() -> None:
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)
    logger.add(
        LOGS_DIR / "techpulse_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention="14 days",
        level=LOG_LEVEL,
        encoding="utf-8",
    )


# ── Main ───────────────────────────────────────────────────────────────────────

async def main() -> None:
    controller = build_controller()
    logger.info(f"Tech Pulse starting up — {len(controller.snapshot())} columns")

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        _run_refresh,
        "interval",
        seconds       = REFRESH_INTERVAL,
        args          = [controller],
        id            = "refresh_all",
        name          = "Refresh all columns",
        max_instances = 1,
        coalesce      = True,
        next_run_time = datetime.now(timezone.utc),
    )
    await alert_startup(len(controller.snapshot()))
    scheduler.start()
    logger.info(f"Scheduler running — refreshing every {REFRESH_INTERVAL}s")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await stop.wait()
    logger.info("Shutting down scheduler…")
    scheduler.shutdown(wait=False)
    await controller.shutdown()


def run() -> None:
    setup_logging()
    asyncio.run(main())


if __name__ == "__main__":
    run()
