"""
Per-column pagination state. Owned and mutated only by AggregationController;
callers only ever see InstanceSnapshot copies.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any

from src.collectors.base import SourceParams, SourceType, UnifiedItem


@dataclass(frozen=True)
class RequestTag:
    """Identifies one dispatched fetch: the refresh epoch it belongs to + a unique serial."""
    epoch:  int
    serial: int


@dataclass
class SourceInstance:
    instance_id: str
    source_type: SourceType
    params:      SourceParams
    paginated:   bool
    cursor:      Any = None
    items:       list[UnifiedItem] = field(default_factory=list)
    has_more:    bool = True
    is_loading:  bool = False
    last_error:  str | None = None

    # in-flight bookkeeping
    task:        asyncio.Task | None = field(default=None, repr=False)
    request:     RequestTag | None = field(default=None, repr=False)
    _seen_ids:   set[str] = field(default_factory=set, init=False, repr=False)

    def reset(self) -> None:
        """Back to first-page state: empty buffer, initial cursor, no error."""
        self.cursor     = None
        self.items      = []
        self.has_more   = self.paginated
        self.last_error = None
        self._seen_ids  = set()

    def append(self, items) -> int:
        """Append items whose id is not already buffered. Returns the number added."""
        added = 0
        for item in items:
            if item.id in self._seen_ids:
                continue
            self._seen_ids.add(item.id)
            self.items.append(item)
            added += 1
        return added

    def cancel_in_flight(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()
        self.task    = None
        self.request = None

    def snapshot(self) -> "InstanceSnapshot":
        return InstanceSnapshot(
            instance_id = self.instance_id,
            source_type = self.source_type,
            params      = self.params,
            cursor      = self.cursor,
            items       = tuple(self.items),
            has_more    = self.has_more,
            is_loading  = self.is_loading,
            last_error  = self.last_error,
        )


@dataclass(frozen=True)
class InstanceSnapshot:
    instance_id: str
    source_type: SourceType
    params:      SourceParams
    cursor:      Any
    items:       tuple[UnifiedItem, ...]
    has_more:    bool
    is_loading:  bool
    last_error:  str | None
