"""Pytest fixtures and fake collectors for Tech Pulse tests."""

import asyncio
from datetime import datetime, timezone
from typing import Any

import pytest

from src.collectors.base import BaseCollector, Page, SourceParams, SourceType, UnifiedItem


def make_item(item_id: str, source: SourceType = SourceType.NEWS, **overrides) -> UnifiedItem:
    fields = {
        "id":        item_id,
        "source":    source,
        "title":     f"Title {item_id}",
        "url":       f"https://example.com/{item_id}",
        "timestamp": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return UnifiedItem(**fields)


class ScriptedCollector(BaseCollector):
    """Returns (or raises) the next scripted outcome immediately; records every call."""

    def __init__(self, source_type: SourceType, outcomes: list, paginated: bool = True):
        super().__init__({})
        self.source_type = source_type
        self.paginated = paginated
        self.outcomes = list(outcomes)
        self.calls: list[tuple[SourceParams, Any]] = []

    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        self.calls.append((params, cursor))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class GatedCollector(BaseCollector):
    """
    Every call blocks on a future the test resolves by hand.
    With stubborn=True the call ignores cancellation and still returns
    whatever the test resolves, like a transport that cannot be aborted.
    """

    def __init__(self, source_type: SourceType, paginated: bool = True, stubborn: bool = False):
        super().__init__({})
        self.source_type = source_type
        self.paginated = paginated
        self.stubborn = stubborn
        self.pending: list[asyncio.Future] = []
        self.calls: list[Any] = []

    async def fetch_page(self, params: SourceParams, cursor: Any = None) -> Page:
        self.calls.append(cursor)
        fut = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        try:
            return await asyncio.shield(fut)
        except asyncio.CancelledError:
            if not self.stubborn:
                raise
            return await fut


async def wait_until(predicate, attempts: int = 100) -> None:
    """Yield to the event loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def news_page() -> Page:
    return Page(items=(make_item("news_1"), make_item("news_2")), next_cursor=1, has_more=True)
