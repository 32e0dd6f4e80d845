"""Tests for the usage payload normalizer."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.usage_tracker.models import UsageSnapshot, UsageWindow
from src.usage_tracker.normalizer import normalize_usage, normalize_window


class TestNormalizeUsage:
    def test_empty_payload_defaults_required_windows(self) -> None:
        snapshot = normalize_usage({})
        assert snapshot.five_hour == UsageWindow(utilization=0.0, resets_at=None)
        assert snapshot.seven_day == UsageWindow(utilization=0.0, resets_at=None)
        assert snapshot.seven_day_opus is None

    def test_documented_example(self) -> None:
        snapshot = normalize_usage({
            "five_hour": {"utilization": 42, "resets_at": "T"},
            "seven_day": {"utilization": 0, "resets_at": None},
        })
        assert snapshot.five_hour.utilization == 42
        assert snapshot.five_hour.resets_at == "T"
        assert snapshot.seven_day.utilization == 0
        assert snapshot.seven_day.resets_at is None
        assert snapshot.seven_day_opus is None
        assert "seven_day_opus" not in snapshot.to_dict()

    def test_opus_window_kept_when_present(self) -> None:
        snapshot = normalize_usage({
            "five_hour": {"utilization": 1},
            "seven_day": {"utilization": 2},
            "seven_day_opus": {"utilization": 0, "resets_at": None},
        })
        # A zeroed Opus window is still an Opus window.
        assert snapshot.seven_day_opus == UsageWindow(utilization=0.0)
        assert snapshot.to_dict()["seven_day_opus"] == {"utilization": 0.0, "resets_at": None}

    def test_null_opus_is_omitted(self, usage_payload) -> None:
        assert normalize_usage(usage_payload).seven_day_opus is None

    def test_missing_utilization_defaults_to_zero(self) -> None:
        snapshot = normalize_usage({"five_hour": {"resets_at": "2026-10-18T15:00:00Z"}})
        assert snapshot.five_hour.utilization == 0.0
        assert snapshot.five_hour.resets_at == "2026-10-18T15:00:00Z"

    def test_null_windows_default(self) -> None:
        snapshot = normalize_usage({"five_hour": None, "seven_day": None})
        assert snapshot == UsageSnapshot()

    def test_utilization_over_100_is_kept(self) -> None:
        assert normalize_usage({"five_hour": {"utilization": 104.5}}).five_hour.utilization == 104.5

    def test_ignores_unknown_windows(self, usage_payload) -> None:
        usage_payload["seven_day_oauth_apps"] = {"utilization": 99}
        snapshot = normalize_usage(usage_payload)
        assert set(snapshot.to_dict()) == {"five_hour", "seven_day"}

    def test_is_deterministic(self, usage_payload) -> None:
        assert normalize_usage(usage_payload) == normalize_usage(usage_payload)


class TestShapeMismatches:
    def test_non_mapping_payload(self) -> None:
        assert normalize_usage(None) == UsageSnapshot()
        assert normalize_usage(["five_hour"]) == UsageSnapshot()

    def test_non_numeric_utilization(self) -> None:
        assert normalize_window({"utilization": "42"}).utilization == 0.0
        assert normalize_window({"utilization": True}).utilization == 0.0

    def test_non_finite_utilization(self) -> None:
        assert normalize_window({"utilization": float("nan")}).utilization == 0.0
        assert normalize_window({"utilization": float("inf")}).utilization == 0.0

    def test_non_string_resets_at(self) -> None:
        assert normalize_window({"utilization": 5, "resets_at": 1760000000}).resets_at is None
        assert normalize_window({"utilization": 5, "resets_at": ""}).resets_at is None

    def test_non_mapping_window(self) -> None:
        assert normalize_window("full") == UsageWindow()


class TestUsageWindowModel:
    def test_rejects_non_finite_utilization(self) -> None:
        with pytest.raises(ValidationError):
            UsageWindow(utilization=float("nan"))
        with pytest.raises(ValidationError):
            UsageWindow.model_validate({"utilization": float("inf")})

    def test_snapshot_rejects_non_finite_window(self) -> None:
        with pytest.raises(ValidationError):
            UsageSnapshot.model_validate({"five_hour": {"utilization": float("-inf")}})
