"""
Formatter — maps UnifiedItem → plain-text card lines for the terminal runner.

Card layout (one item):
    [Hacker News] 1.2k pts · 87 comments · 3h ago · example.com
      Show HN: a title that may be cut at a word boundary…
      https://example.com/article

Nothing here feeds back into the controller; it only reads snapshots.
"""
from datetime import datetime, timezone

from src.collectors.base import SourceType, UnifiedItem
from src.feed.state import InstanceSnapshot
from src.formatter.normalize import format_score

MAX_TITLE_CHARS = 100

SOURCE_LABELS: dict[SourceType, str] = {
    SourceType.NEWS:    "Hacker News",
    SourceType.FORUM:   "Reddit",
    SourceType.FEATURE: "NASA",
    SourceType.QUOTE:   "Quotes",
}


# ── Public API ─────────────────────────────────────────────────────────────────

def format_relative(when: datetime | None, now: datetime | None = None) -> str:
    """'42s ago', '5m ago', '3h ago', '2d ago'; "" for unknown times."""
    if when is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = max(int((now - when).total_seconds()), 0)
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def format_card(item: UnifiedItem, now: datetime | None = None) -> str:
    meta = [f"[{SOURCE_LABELS.get(item.source, item.source.value)}]"]
    if item.score:
        meta.append(f"{format_score(item.score)} pts")
    if item.comment_count:
        meta.append(f"{format_score(item.comment_count)} comments")
    age = format_relative(item.timestamp, now)
    if age:
        meta.append(age)
    if item.host:
        meta.append(item.host)

    lines = [" · ".join(meta), f"  {_truncate(item.title, MAX_TITLE_CHARS)}"]
    if item.source is SourceType.QUOTE and item.summary:
        lines.append(f"  {item.summary}")
    if item.url:
        lines.append(f"  {item.url}")
    return "\n".join(lines)


def format_column(snapshot: InstanceSnapshot, items, now: datetime | None = None) -> str:
    """Header line for one column followed by its visible cards."""
    status = "loading…" if snapshot.is_loading else f"{len(items)} items"
    if snapshot.has_more:
        status += ", more available"
    header = f"══ {snapshot.instance_id} ({status}) ══"

    blocks = [header]
    if snapshot.last_error:
        blocks.append(f"  ! {snapshot.last_error}")
    blocks.extend(format_card(item, now) for item in items)
    return "\n".join(blocks)


# ── Internal helpers ───────────────────────────────────────────────────────────

def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    # Try to cut at a word boundary, leaving room for "…"
    cut = text[: limit - 1].rsplit(" ", 1)[0]
    return cut + "…"
