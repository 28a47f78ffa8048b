"""Typed interfaces for field-mapping and payload-formatting transformations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Protocol, Sequence, Union

from jdy_bridge.domain import MappingResult


class FieldMappingError(RuntimeError):
    """Raised under the `fail` policy when field descriptors cannot be fetched."""


@dataclass(frozen=True)
class WrappedValue:
    """Value the caller already shaped as `{"value": ...}`.

    Attributes:
        payload: Original wrapped mapping.
    """

    payload: Mapping[str, Any]


@dataclass(frozen=True)
class NestedRecordListValue:
    """Sub-form rows: a list whose first element is a record.

    Attributes:
        rows: Row values in caller order.
    """

    rows: tuple[Any, ...]


@dataclass(frozen=True)
class NestedRecordValue:
    """Composite field value such as an address or location object.

    Attributes:
        record: Caller-built object, forwarded unchanged.
    """

    record: Mapping[str, Any]


@dataclass(frozen=True)
class DateValue:
    """Date or datetime value serialized as ISO-8601 text.

    Attributes:
        moment: Date or datetime value.
    """

    moment: date | datetime


@dataclass(frozen=True)
class ScalarValue:
    """String, number, boolean, or plain list forwarded unchanged.

    Attributes:
        value: Raw value.
    """

    value: Any


FieldValue = Union[WrappedValue, NestedRecordListValue, NestedRecordValue, DateValue, ScalarValue]


class FieldMatcherPort(Protocol):
    """Port definition for rekeying caller records onto backend field keys."""

    def matcher_map_fields(
        self,
        form_handle: str,
        record: Mapping[str, Any],
        app_key: str,
        application_id: str | None = None,
    ) -> MappingResult:
        """Map one caller record onto backend field keys.

        Args:
            form_handle: Resolved form handle.
            record: Caller record keyed by loose field names.
            app_key: API key used as bearer credential.
            application_id: Optional owning application id.

        Returns:
            MappingResult: Rekeyed record and flat field summary.

        Raises:
            FieldMappingError: Raised when descriptors cannot be fetched under the `fail` policy.
        """

    def matcher_map_batch(
        self,
        form_handle: str,
        records: Sequence[Mapping[str, Any]],
        app_key: str,
        application_id: str | None = None,
    ) -> tuple[MappingResult, ...]:
        """Map several records of one submission with a single descriptor fetch."""
