"""Regression tests for value-wrapped submission formatting."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from jdy_bridge.mapping import (
    SUBMISSION_BATCH_LIMIT,
    BatchLimitExceededError,
    DateValue,
    NestedRecordListValue,
    NestedRecordValue,
    ScalarValue,
    WrappedValue,
    formatter_classify_value,
    formatter_format_date,
    formatter_format_record,
    formatter_format_value,
    formatter_validate_batch_size,
)


def test_mapping_formatter_classifies_each_value_shape() -> None:
    """Classify raw values into their closed variants.

    Returns:
        None: Assertions validate variant selection per value shape.

    Raises:
        AssertionError: Raised when a value lands in the wrong variant.
    """

    assert formatter_classify_value(None) is None
    assert isinstance(formatter_classify_value({"value": 1}), WrappedValue)
    assert isinstance(formatter_classify_value({"province": "Zhejiang"}), NestedRecordValue)
    assert isinstance(formatter_classify_value([{"a": 1}]), NestedRecordListValue)
    assert isinstance(formatter_classify_value(date(2024, 1, 2)), DateValue)
    assert isinstance(formatter_classify_value(["a", "b"]), ScalarValue)
    assert isinstance(formatter_classify_value([]), ScalarValue)
    assert isinstance(formatter_classify_value(0), ScalarValue)


def test_mapping_formatter_wraps_scalars_and_drops_absent_values() -> None:
    """Wrap plain values and omit keys whose value is None."""

    formatted = formatter_format_record({"a": "text", "b": 3, "c": None, "d": False, "e": ["x", "y"]})

    assert formatted == {
        "a": {"value": "text"},
        "b": {"value": 3},
        "d": {"value": False},
        "e": {"value": ["x", "y"]},
    }


def test_mapping_formatter_is_idempotent_on_formatted_records() -> None:
    """Return an equal record when formatting an already formatted record."""

    record = {"a": "text", "items": [{"q": 1}], "when": date(2024, 5, 6), "addr": {"city": "Hangzhou"}}

    once = formatter_format_record(record)

    assert formatter_format_record(once) == once


def test_mapping_formatter_formats_sub_form_rows_recursively() -> None:
    """Wrap every cell of every sub-form row.

    Returns:
        None: Assertions validate nested row formatting.

    Raises:
        AssertionError: Raised when nested rows are not formatted.
    """

    formatted = formatter_format_record({"_widget_4": [{"_widget_5": "pen", "_widget_6": 2, "skip": None}]})

    assert formatted == {
        "_widget_4": {"value": [{"_widget_5": {"value": "pen"}, "_widget_6": {"value": 2}}]},
    }


def test_mapping_formatter_keeps_composite_objects_as_values() -> None:
    """Wrap composite objects such as addresses without formatting their members."""

    address = {"province": "Zhejiang", "city": "Hangzhou", "detail": None}

    assert formatter_format_record({"addr": address}) == {"addr": {"value": address}}


def test_mapping_formatter_date_rendering() -> None:
    """Render dates and datetimes as ISO-8601 text; aware values in UTC with `Z`."""

    assert formatter_format_date(date(2024, 1, 2)) == "2024-01-02"
    assert formatter_format_date(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
    aware_moment = datetime(2024, 1, 2, 11, 4, 5, tzinfo=timezone(timedelta(hours=8)))
    assert formatter_format_date(aware_moment) == "2024-01-02T03:04:05.000Z"
    assert formatter_format_record({"d": aware_moment}) == {"d": {"value": "2024-01-02T03:04:05.000Z"}}


def test_mapping_formatter_rejects_unknown_variant() -> None:
    """Raise TypeError for objects outside the variant set."""

    with pytest.raises(TypeError, match="unsupported"):
        formatter_format_value("raw")  # type: ignore[arg-type]


def test_mapping_formatter_batch_limit_boundary() -> None:
    """Accept exactly the batch limit and reject one more."""

    formatter_validate_batch_size([{}] * SUBMISSION_BATCH_LIMIT)

    with pytest.raises(BatchLimitExceededError, match=str(SUBMISSION_BATCH_LIMIT)):
        formatter_validate_batch_size([{}] * (SUBMISSION_BATCH_LIMIT + 1))
