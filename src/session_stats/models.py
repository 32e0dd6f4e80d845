"""Pydantic models for session token usage as supplied by the session store.

The store writes camelCase JSON (``tokenUsage.usageDelta.fiveHourDelta``);
both that and snake_case field names are accepted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_RECORD_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SessionUsageDelta(BaseModel):
    """Percentage points of subscription usage one session consumed."""

    model_config = _RECORD_CONFIG

    five_hour_delta: float = 0.0
    seven_day_delta: float = 0.0
    seven_day_opus_delta: float | None = None


class SessionTokenUsage(BaseModel):
    model_config = _RECORD_CONFIG

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    context_tokens: int = Field(default=0, ge=0)
    cost_usd: float = Field(default=0.0, ge=0)
    usage_delta: SessionUsageDelta | None = None


class SessionRecord(BaseModel):
    model_config = _RECORD_CONFIG

    id: str
    name: str | None = None
    hidden: bool = False
    last_message_at: int | None = None  # epoch milliseconds
    token_usage: SessionTokenUsage | None = None

    @property
    def usage_delta(self) -> SessionUsageDelta | None:
        return self.token_usage.usage_delta if self.token_usage else None


class AggregateStats(BaseModel):
    """Summary over the visible sessions. Recomputed per call, never stored."""

    total_sessions: int = 0
    sessions_with_usage: int = 0
    total_five_hour_delta: float = 0.0
    total_seven_day_delta: float = 0.0
    total_tokens: int = 0
    top_sessions: list[str] = Field(default_factory=list)
