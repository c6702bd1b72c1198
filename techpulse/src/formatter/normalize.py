"""
Normalization helpers — the pure functions every collector uses to turn
upstream payload fields into UnifiedItem fields.

None of these raise on bad input: an unusable value maps to "" / None.
"""
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

_WHITESPACE_RE = re.compile(r"\s+")
_URL_SCHEMES   = {"http", "https"}


def parse_timestamp(value) -> datetime | None:
    """
    Parse an ISO-8601 string or unix seconds into an aware UTC datetime.
    Dates without a time component resolve to 00:00 UTC.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    try:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # offset pushes the instant outside datetime's range
        return None


def clamp_text(text, limit: int) -> str:
    """Collapse whitespace and cap at `limit` chars, ending with "…" when cut."""
    if not text:
        return ""
    collapsed = _WHITESPACE_RE.sub(" ", str(text)).strip()
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 1] + "…"


def safe_url(value) -> str:
    """Return `value` if it is an absolute http(s) URL, otherwise ""."""
    if not value or not isinstance(value, str):
        return ""
    candidate = value.strip()
    if not candidate or _WHITESPACE_RE.search(candidate):
        return ""
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        parsed.port  # raises on a non-numeric or out-of-range port
    except ValueError:
        return ""
    if parsed.scheme.lower() not in _URL_SCHEMES or not hostname:
        return ""
    return parsed.geturl()


def host_from_url(url: str) -> str:
    """'https://www.example.com/a' → 'example.com'."""
    if not url:
        return ""
    try:
        netloc = urlparse(url).netloc
    except ValueError:
        return ""
    return netloc.removeprefix("www.")


def format_score(value) -> str:
    """Compact popularity count: 999 → '999', 1234 → '1.2k'."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "0"
    if value >= 1000:
        return f"{value / 1000:.1f}k"
    return str(int(value))


def non_negative_int(value) -> int:
    """Coerce a count field to an int ≥ 0 (missing / junk → 0)."""
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)
