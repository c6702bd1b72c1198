"""
Discord webhook alerts — fires when a dashboard column fails to load,
plus startup notices from the runner.

Set DISCORD_WEBHOOK_URL in .env to enable. If unset, all calls are no-ops.
"""
from datetime import datetime, timezone

import httpx
from loguru import logger

from config.settings import DISCORD_WEBHOOK_URL

# Colour codes for Discord embeds
_COLOUR = {
    "error":   0xE74C3C,   # red
    "warning": 0xF39C12,   # amber
    "success": 0x2ECC71,   # green
    "info":    0x3498DB,   # blue
}


async def send_alert(message: str, level: str = "error", webhook_url: str | None = None) -> None:
    """
    Send a plain-text alert to Discord.
    level: "error" | "warning" | "info" | "success"
    """
    url = webhook_url or DISCORD_WEBHOOK_URL
    if not url:
        return

    payload = {
        "embeds": [{
            "description": message,
            "color":       _COLOUR.get(level, _COLOUR["error"]),
            "footer":      {"text": f"Tech Pulse • {_utcnow()}"},
        }]
    }
    await _post(url, payload)


async def alert_source_failure(instance_id: str, error: str, webhook_url: str | None = None) -> None:
    await send_alert(
        f"**Column failed** `{instance_id}`\n```{error[:500]}```",
        level="warning",
        webhook_url=webhook_url,
    )


async def alert_startup(columns: int) -> None:
    await send_alert(f"Tech Pulse started [{columns} columns]", level="success")


# ── Internal ──────────────────────────────────────────────────────────────────

async def _post(url: str, payload: dict) -> None:
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(url, json=payload)
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning(f"[Alerts] Discord webhook failed: {exc}")


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
