from src.session_stats.aggregator import aggregate_sessions, top_session_records
from src.session_stats.models import (
    AggregateStats,
    SessionRecord,
    SessionTokenUsage,
    SessionUsageDelta,
)

__all__ = [
    "aggregate_sessions",
    "top_session_records",
    "AggregateStats",
    "SessionRecord",
    "SessionTokenUsage",
    "SessionUsageDelta",
]
