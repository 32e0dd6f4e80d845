"""Normalize the raw OAuth usage payload into a ``UsageSnapshot``.

The API answers with snake_case windows::

    {
      "five_hour":      {"utilization": 12.0, "resets_at": "2026-..."},
      "seven_day":      {"utilization": 40.0, "resets_at": null},
      "seven_day_opus": null
    }

Every field is optional as far as we are concerned.  Missing values are
defaulted, never raised on.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from src.usage_tracker.models import UsageSnapshot, UsageWindow


def _utilization(value: Any) -> float:
    # bool is an int subclass; a stray True must not read as 1%.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


def _resets_at(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def normalize_window(raw: Any) -> UsageWindow:
    """Normalize one ``{utilization, resets_at}`` entry."""
    if not isinstance(raw, Mapping):
        return UsageWindow()
    return UsageWindow(
        utilization=_utilization(raw.get("utilization")),
        resets_at=_resets_at(raw.get("resets_at")),
    )


def normalize_usage(payload: Any) -> UsageSnapshot:
    """Map a raw usage response to a snapshot.

    The Opus window is only carried over when the payload has one; an absent
    or null ``seven_day_opus`` leaves ``UsageSnapshot.seven_day_opus`` as None.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    opus_raw = payload.get("seven_day_opus")
    return UsageSnapshot(
        five_hour=normalize_window(payload.get("five_hour")),
        seven_day=normalize_window(payload.get("seven_day")),
        seven_day_opus=normalize_window(opus_raw) if isinstance(opus_raw, Mapping) else None,
    )
