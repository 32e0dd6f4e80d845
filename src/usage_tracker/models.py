"""Pydantic models for subscription usage windows and poller state."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ── Usage values ─────────────────────────────────────────────────────────────


class UsageWindow(BaseModel):
    """Fill level of one rate-limit window.

    ``utilization`` is a percentage (0-100, may briefly exceed 100).
    ``resets_at`` is the ISO timestamp of the next reset exactly as the API
    sent it, or ``None`` when the window has no scheduled reset.
    """

    model_config = ConfigDict(frozen=True)

    utilization: float = Field(default=0.0, allow_inf_nan=False)
    resets_at: str | None = None


class UsageSnapshot(BaseModel):
    """One fetch worth of usage data. Replaced wholesale, never patched."""

    model_config = ConfigDict(frozen=True)

    five_hour: UsageWindow = UsageWindow()
    seven_day: UsageWindow = UsageWindow()
    # None means "no Opus entitlement", which differs from a zeroed window.
    seven_day_opus: UsageWindow | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "five_hour": self.five_hour.model_dump(),
            "seven_day": self.seven_day.model_dump(),
        }
        if self.seven_day_opus is not None:
            data["seven_day_opus"] = self.seven_day_opus.model_dump()
        return data


class UsageAvailability(str, Enum):
    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


# ── Fetch outcomes ───────────────────────────────────────────────────────────


class FetchOutcome(str, Enum):
    SNAPSHOT = "snapshot"
    NOT_ELIGIBLE = "not_eligible"
    TRANSIENT_FAILURE = "transient_failure"
    ERROR = "error"


class FetchResult(BaseModel):
    """Classified result of a single usage request."""

    model_config = ConfigDict(frozen=True)

    outcome: FetchOutcome
    snapshot: UsageSnapshot | None = None
    status_code: int | None = None
    detail: str = ""

    @classmethod
    def ok(cls, snapshot: UsageSnapshot) -> FetchResult:
        return cls(outcome=FetchOutcome.SNAPSHOT, snapshot=snapshot, status_code=200)


# ── Poller state ─────────────────────────────────────────────────────────────


class PollerStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class UsageState(BaseModel):
    """What ``UsagePoller.current()`` hands to readers."""

    model_config = ConfigDict(frozen=True)

    snapshot: UsageSnapshot | None = None
    availability: UsageAvailability = UsageAvailability.UNKNOWN
    is_loading: bool = False
    last_updated: str | None = None  # ISO timestamp of the last applied snapshot
    last_outcome: FetchOutcome | None = None

    @property
    def status(self) -> PollerStatus:
        if self.is_loading:
            return PollerStatus.LOADING
        if self.availability is UsageAvailability.AVAILABLE:
            return PollerStatus.AVAILABLE
        if self.availability is UsageAvailability.UNAVAILABLE:
            return PollerStatus.UNAVAILABLE
        return PollerStatus.IDLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "availability": self.availability.value,
            "is_loading": self.is_loading,
            "last_updated": self.last_updated,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "usage": self.snapshot.to_dict() if self.snapshot else None,
        }


class UsageEventKind(str, Enum):
    SNAPSHOT_CHANGED = "snapshot_changed"
    AVAILABILITY_CHANGED = "availability_changed"


class UsageEvent(BaseModel):
    """Notification delivered to poller listeners."""

    model_config = ConfigDict(frozen=True)

    kind: UsageEventKind
    state: UsageState
