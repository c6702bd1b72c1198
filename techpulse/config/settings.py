"""
Global settings — loads from .env and exposes typed config values to the rest of the app.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent.parent
LOGS_DIR = Path(os.getenv("LOGS_DIR", str(ROOT_DIR / "logs")))

# ── General ────────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ── HTTP ───────────────────────────────────────────────────────────────────────
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "15"))
USER_AGENT   = os.getenv("USER_AGENT", "TechPulseDashboard/1.0")

# ── Hacker News (Algolia) ──────────────────────────────────────────────────────
NEWS_PAGE_SIZE = int(os.getenv("NEWS_PAGE_SIZE", "20"))
NEWS_QUERY     = os.getenv("NEWS_QUERY", "")
NEWS_WINDOW    = os.getenv("NEWS_WINDOW", "7d")

# ── Reddit ─────────────────────────────────────────────────────────────────────
FORUM_PAGE_SIZE  = int(os.getenv("FORUM_PAGE_SIZE", "15"))
FORUM_SUBREDDITS = os.getenv("FORUM_SUBREDDITS", "technology+startups")

# ── NASA APOD ──────────────────────────────────────────────────────────────────
NASA_API_KEY = os.getenv("NASA_API_KEY", "DEMO_KEY")

# ── Dashboard ──────────────────────────────────────────────────────────────────
# Comma-separated source types, one column each (duplicates allowed)
DEFAULT_COLUMNS  = [
    c.strip() for c in os.getenv("DEFAULT_COLUMNS", "news,forum,feature").split(",")
    if c.strip()
]
FILTER_TEXT      = os.getenv("FILTER_TEXT", "")
SORT_BY          = os.getenv("SORT_BY") or None    # newest | oldest | score
REFRESH_INTERVAL = int(os.getenv("REFRESH_INTERVAL", "900"))

# ── Discord alerts ─────────────────────────────────────────────────────────────
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL")
