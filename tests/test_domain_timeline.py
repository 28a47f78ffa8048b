"""Tests for shared timeline and payload parsing helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from jdy_bridge.domain import (
    domain_build_stage_event,
    domain_normalize_optional_text,
    domain_parse_optional_timestamp,
)


def test_domain_parse_optional_timestamp_accepts_iso_and_epoch_values() -> None:
    """Parse ISO text, epoch seconds, and epoch milliseconds into aware UTC values.

    Returns:
        None: Assertions validate supported timestamp encodings.

    Raises:
        AssertionError: Raised when parsing output regresses.
    """

    expected = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    assert domain_parse_optional_timestamp("2024-01-02T03:04:05Z") == expected
    assert domain_parse_optional_timestamp("2024-01-02T11:04:05+08:00") == expected
    assert domain_parse_optional_timestamp(expected.timestamp()) == expected
    assert domain_parse_optional_timestamp(int(expected.timestamp() * 1000)) == expected


def test_domain_parse_optional_timestamp_rejects_unusable_values() -> None:
    """Return None for absent, boolean, blank, or malformed values."""

    assert domain_parse_optional_timestamp(None) is None
    assert domain_parse_optional_timestamp(True) is None
    assert domain_parse_optional_timestamp("   ") is None
    assert domain_parse_optional_timestamp("yesterday") is None
    assert domain_parse_optional_timestamp({"at": 1}) is None


def test_domain_stage_event_and_text_normalization() -> None:
    """Build timeline events and normalize optional text."""

    event = domain_build_stage_event(stage="resolve", status="completed", details={"form_handle": "f1"})

    assert event["stage"] == "resolve"
    assert event["status"] == "completed"
    assert event["details"] == {"form_handle": "f1"}
    assert "at_utc" in event
    assert "details" not in domain_build_stage_event(stage="submit", status="failed")
    assert domain_normalize_optional_text("  x ") == "x"
    assert domain_normalize_optional_text("  ") is None
    assert domain_normalize_optional_text(5) is None
