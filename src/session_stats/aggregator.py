"""Summary statistics over a collection of session records.

Hidden sessions are ignored entirely.  Token totals count every visible
session that has token usage; delta totals and ``sessions_with_usage`` only
count sessions that also carry a usage delta.  The top list ranks sessions
with a delta by ``five_hour_delta``, highest first.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.config import settings
from src.session_stats.models import AggregateStats, SessionRecord

DEFAULT_TOP_LIMIT = 10


def _visible(sessions: Iterable[SessionRecord]) -> list[SessionRecord]:
    return [s for s in sessions if not s.hidden]


def top_session_records(
    sessions: Iterable[SessionRecord],
    limit: int | None = None,
) -> list[SessionRecord]:
    """Visible sessions with a usage delta, by 5-hour delta descending.

    ``sorted`` is stable, so sessions with equal deltas keep their input order.
    """
    limit = settings.top_sessions_limit if limit is None else limit
    with_delta = [s for s in _visible(sessions) if s.usage_delta is not None]
    ranked = sorted(with_delta, key=lambda s: s.usage_delta.five_hour_delta, reverse=True)
    return ranked[: max(0, limit)]


def aggregate_sessions(
    sessions: Iterable[SessionRecord],
    limit: int | None = None,
) -> AggregateStats:
    visible = _visible(sessions)
    stats = AggregateStats(total_sessions=len(visible))

    for session in visible:
        usage = session.token_usage
        if usage is None:
            continue
        stats.total_tokens += usage.total_tokens
        if usage.usage_delta is not None:
            stats.total_five_hour_delta += usage.usage_delta.five_hour_delta
            stats.total_seven_day_delta += usage.usage_delta.seven_day_delta
            stats.sessions_with_usage += 1

    stats.top_sessions = [s.id for s in top_session_records(visible, limit)]
    return stats
