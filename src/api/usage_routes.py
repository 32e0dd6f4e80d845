"""API routes for subscription usage and session statistics.

Endpoints:
  GET  /api/usage            - latest snapshot, availability and loading flag
  POST /api/usage/refresh    - fetch now and return the resulting state
  POST /api/sessions/stats   - aggregate a posted list of session records
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from src.session_stats.aggregator import aggregate_sessions
from src.session_stats.models import AggregateStats, SessionRecord
from src.usage_tracker.poller import UsagePoller

logger = logging.getLogger(__name__)

usage_router = APIRouter(tags=["usage"])


# ── Helpers ──────────────────────────────────────────────────────────────────


def _get_poller(request: Request) -> UsagePoller:
    poller = getattr(request.app.state, "usage_poller", None)
    if poller is None:
        raise HTTPException(status_code=503, detail="Usage poller is not running")
    return poller  # type: ignore[no-any-return]


# ── Request models ───────────────────────────────────────────────────────────


class SessionStatsBody(BaseModel):
    sessions: list[SessionRecord] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=0)


# ── Usage endpoints ──────────────────────────────────────────────────────────


@usage_router.get("/usage")
async def get_usage(request: Request) -> dict[str, Any]:
    """Current usage state. Never triggers a fetch."""
    return _get_poller(request).current().to_dict()


@usage_router.post("/usage/refresh")
async def refresh_usage(request: Request) -> dict[str, Any]:
    state = await _get_poller(request).refresh()
    return state.to_dict()


# ── Session endpoints ────────────────────────────────────────────────────────


@usage_router.post("/sessions/stats", response_model=AggregateStats)
def session_stats(body: SessionStatsBody) -> AggregateStats:
    stats = aggregate_sessions(body.sessions, limit=body.limit)
    logger.debug(
        "Aggregated %d sessions (%d with usage)",
        stats.total_sessions,
        stats.sessions_with_usage,
    )
    return stats
