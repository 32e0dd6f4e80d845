from src.usage_tracker.client import (
    UsageApiError,
    UsageClient,
    UsageFetchError,
    UsageFetcher,
    UsageNotEligibleError,
    UsageTransientError,
)
from src.usage_tracker.models import (
    FetchOutcome,
    FetchResult,
    PollerStatus,
    UsageAvailability,
    UsageEvent,
    UsageEventKind,
    UsageSnapshot,
    UsageState,
    UsageWindow,
)
from src.usage_tracker.normalizer import normalize_usage
from src.usage_tracker.poller import UsagePoller

__all__ = [
    "UsageApiError",
    "UsageClient",
    "UsageFetchError",
    "UsageFetcher",
    "UsageNotEligibleError",
    "UsageTransientError",
    "FetchOutcome",
    "FetchResult",
    "PollerStatus",
    "UsageAvailability",
    "UsageEvent",
    "UsageEventKind",
    "UsageSnapshot",
    "UsageState",
    "UsageWindow",
    "normalize_usage",
    "UsagePoller",
]
