"""Value-wrapped submission payload formatting."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Final, Mapping

from .interfaces import (
    DateValue,
    FieldValue,
    NestedRecordListValue,
    NestedRecordValue,
    ScalarValue,
    WrappedValue,
)

SUBMISSION_BATCH_LIMIT: Final[int] = 100


class BatchLimitExceededError(ValueError):
    """Raised when a submission batch exceeds `SUBMISSION_BATCH_LIMIT` records."""


def formatter_classify_value(value: Any) -> FieldValue | None:
    """Classify one raw field value into its closed variant.

    Args:
        value: Raw caller value.

    Returns:
        FieldValue | None: Variant for the value; None for absent values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None:
        return None
    if isinstance(value, Mapping):
        if "value" in value:
            return WrappedValue(payload=value)
        return NestedRecordValue(record=value)
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], Mapping):
        return NestedRecordListValue(rows=tuple(value))
    if isinstance(value, (datetime, date)):
        return DateValue(moment=value)
    return ScalarValue(value=value)


def formatter_format_value(field_value: FieldValue) -> dict[str, Any]:
    """Render one classified value into the backend `{"value": ...}` shape.

    Args:
        field_value: Classified value variant.

    Returns:
        dict[str, Any]: Wire-format field entry.

    Raises:
        TypeError: Raised for objects outside the variant set.
    """

    if isinstance(field_value, WrappedValue):
        return dict(field_value.payload)
    if isinstance(field_value, NestedRecordListValue):
        return {
            "value": [
                formatter_format_record(row) if isinstance(row, Mapping) else row for row in field_value.rows
            ]
        }
    if isinstance(field_value, NestedRecordValue):
        return {"value": dict(field_value.record)}
    if isinstance(field_value, DateValue):
        return {"value": formatter_format_date(field_value.moment)}
    if isinstance(field_value, ScalarValue):
        return {"value": field_value.value}
    raise TypeError(f"unsupported field value variant: {type(field_value).__name__}")


def formatter_format_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Format one record into the backend submission shape.

    Keys with absent values are dropped. Already wrapped values pass through,
    so formatting a formatted record returns an equal record.

    Args:
        record: Record keyed by backend field keys.

    Returns:
        dict[str, Any]: Wire payload for one record.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    formatted_record: dict[str, Any] = {}
    for key, value in record.items():
        field_value = formatter_classify_value(value)
        if field_value is None:
            continue
        formatted_record[key] = formatter_format_value(field_value)
    return formatted_record


def formatter_format_date(moment: date | datetime) -> str:
    """Serialize a date as ISO-8601; aware datetimes are rendered in UTC with `Z`."""

    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            return moment.isoformat()
        utc_moment = moment.astimezone(timezone.utc)
        return utc_moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return moment.isoformat()


def formatter_validate_batch_size(records: list[Any]) -> None:
    """Reject submission batches larger than the fixed ceiling.

    Raises:
        BatchLimitExceededError: Raised when more than `SUBMISSION_BATCH_LIMIT` records are given.
    """

    if len(records) > SUBMISSION_BATCH_LIMIT:
        raise BatchLimitExceededError(
            f"Batch submission limit is {SUBMISSION_BATCH_LIMIT} records; got {len(records)}"
        )
