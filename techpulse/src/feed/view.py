"""
View projection — derives the visible columns from controller snapshots.
Pure functions: no I/O, no mutation, same input → same output.
"""
from collections.abc import Iterable, Mapping

from src.collectors.base import UnifiedItem

SORT_KEYS = ("newest", "oldest", "score")


def matches(item: UnifiedItem, needle: str) -> bool:
    """`needle` must already be lower-cased."""
    haystack = " ".join(
        part for part in (item.title, item.summary, item.author, " ".join(item.tags)) if part
    )
    return needle in haystack.lower()


def filter_items(items: Iterable[UnifiedItem], filter_text: str) -> tuple[UnifiedItem, ...]:
    needle = (filter_text or "").strip().lower()
    if not needle:
        return tuple(items)
    return tuple(it for it in items if matches(it, needle))


def sort_items(items: Iterable[UnifiedItem], sort_by: str | None) -> tuple[UnifiedItem, ...]:
    """
    newest / oldest — by timestamp (undated items count as the epoch)
    score           — highest score first, ties broken newest first
    None            — insertion order
    """
    if sort_by is None:
        return tuple(items)
    if sort_by not in SORT_KEYS:
        raise ValueError(f"unknown sort key: {sort_by!r} (expected one of {SORT_KEYS})")

    if sort_by == "oldest":
        return tuple(sorted(items, key=_epoch_seconds))
    if sort_by == "newest":
        return tuple(sorted(items, key=_epoch_seconds, reverse=True))
    return tuple(sorted(items, key=lambda it: (-it.score, -_epoch_seconds(it))))


def project(
    instances: Mapping,
    filter_text: str = "",
    sort_by: str | None = None,
) -> dict[str, tuple[UnifiedItem, ...]]:
    """
    instance_id → visible items for that column.
    `instances` maps ids to anything with an `.items` sequence (InstanceSnapshot).
    """
    return {
        instance_id: sort_items(filter_items(inst.items, filter_text), sort_by)
        for instance_id, inst in instances.items()
    }


def _epoch_seconds(item: UnifiedItem) -> float:
    return item.timestamp.timestamp() if item.timestamp else 0.0
