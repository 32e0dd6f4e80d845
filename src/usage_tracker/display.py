"""Plain-text formatting for usage numbers shown in the CLI and dashboards."""

from __future__ import annotations

from datetime import datetime, timezone


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def time_until_reset(resets_at: str | None, now: datetime | None = None) -> str:
    """Human countdown to *resets_at*, e.g. ``"2d 3h"`` or ``"45m"``.

    Overdue resets read as ``"resets soon"``, never as a negative duration.
    """
    if not resets_at:
        return ""
    reset = _parse_timestamp(resets_at)
    if reset is None:
        return ""

    now = now or datetime.now(timezone.utc)
    seconds = (reset - now).total_seconds()
    if seconds <= 0:
        return "resets soon"

    minutes = int(seconds // 60)
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        rem_hours = hours % 24
        return f"{days}d {rem_hours}h" if rem_hours else f"{days}d"
    if hours > 0:
        rem_minutes = minutes % 60
        return f"{hours}h {rem_minutes}m" if rem_minutes else f"{hours}h"
    return f"{minutes}m"


def utilization_level(utilization: float) -> str:
    if utilization >= 95:
        return "critical"
    if utilization >= 80:
        return "warning"
    return "normal"


def format_delta(delta: float, precision: int = 0) -> str:
    """Percentage-point contribution, always shown as an increase."""
    if delta == 0:
        return "0%"
    if precision == 0:
        return f"+{round(delta)}%"
    return f"+{delta:.{precision}f}%"


def format_tokens(tokens: int) -> str:
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.1f}M"
    if tokens >= 1_000:
        return f"{tokens / 1_000:.1f}K"
    return str(tokens)


def format_cost(cost_usd: float) -> str:
    if cost_usd == 0:
        return "$0.00"
    if cost_usd < 0.001:
        return f"${cost_usd:.4f}"
    if cost_usd < 0.01:
        return f"${cost_usd:.3f}"
    return f"${cost_usd:.2f}"
