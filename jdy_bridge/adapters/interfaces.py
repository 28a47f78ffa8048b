"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from jdy_bridge.domain import ApplicationSummary, FieldDescriptor, FormSummary


@dataclass(frozen=True)
class RecordCreateRequest:
    """Request contract for creating one or more form records.

    Attributes:
        app_id: Owning application id.
        form_id: Target form handle.
        records: Already formatted (value-wrapped) records.
        transaction_id: Optional idempotency/transaction id.
        data_creator: Optional creator user id.
        is_start_workflow: Optional workflow trigger flag.
        is_start_trigger: Optional data-trigger flag.
    """

    app_id: str | None
    form_id: str
    records: tuple[dict[str, Any], ...]
    transaction_id: str | None = None
    data_creator: str | None = None
    is_start_workflow: bool | None = None
    is_start_trigger: bool | None = None


@dataclass(frozen=True)
class RecordQueryRequest:
    """Request contract for listing form records.

    Attributes:
        app_id: Owning application id.
        form_id: Target form handle.
        limit: Page size in the range 1..100.
        data_id: Optional last data id for pagination.
        fields: Optional widget keys to return.
        filter: Optional filter object (`rel` + `cond`).
    """

    app_id: str | None
    form_id: str
    limit: int = 10
    data_id: str | None = None
    fields: tuple[str, ...] | None = None
    filter: dict[str, Any] | None = None


class JianDaoYunAdapterPort(Protocol):
    """Port definition for the JianDaoYun remote API."""

    def adapter_list_applications(self, app_key: str) -> tuple[ApplicationSummary, ...]:
        """List applications visible to one API key.

        Args:
            app_key: API key used as bearer credential.

        Returns:
            tuple[ApplicationSummary, ...]: Applications in listing order.

        Raises:
            JdyAdapterError: Raised on transport or API failures.
        """

    def adapter_list_forms(self, app_key: str, app_id: str) -> tuple[FormSummary, ...]:
        """List forms owned by one application.

        Args:
            app_key: API key used as bearer credential.
            app_id: Application id.

        Returns:
            tuple[FormSummary, ...]: Forms in listing order.

        Raises:
            JdyAdapterError: Raised on transport or API failures.
        """

    def adapter_list_fields(self, app_key: str, form_id: str, app_id: str | None = None) -> tuple[FieldDescriptor, ...]:
        """Fetch field descriptors of one form in declaration order.

        Args:
            app_key: API key used as bearer credential.
            form_id: Form handle.
            app_id: Optional owning application id.

        Returns:
            tuple[FieldDescriptor, ...]: Field descriptor tree.

        Raises:
            JdyAdapterError: Raised on transport or API failures.
        """

    def adapter_create_records(self, app_key: str, request: RecordCreateRequest) -> Any:
        """Create one record, or a batch when more than one record is given."""

    def adapter_get_record(self, app_key: str, app_id: str | None, form_id: str, data_id: str) -> Any:
        """Fetch one record by data id."""

    def adapter_query_records(self, app_key: str, request: RecordQueryRequest) -> Any:
        """List records matching an optional filter."""

    def adapter_update_record(
        self,
        app_key: str,
        app_id: str | None,
        form_id: str,
        data_id: str,
        record: dict[str, Any],
        transaction_id: str | None = None,
        is_start_trigger: bool | None = None,
    ) -> Any:
        """Update one record with an already formatted payload."""

    def adapter_delete_records(
        self,
        app_key: str,
        app_id: str | None,
        form_id: str,
        data_ids: tuple[str, ...],
        is_start_trigger: bool | None = None,
    ) -> Any:
        """Delete one record, or a batch when more than one id is given."""

    def adapter_get_upload_token(self, app_key: str, app_id: str | None, form_id: str, transaction_id: str) -> Any:
        """Request file upload tokens bound to one transaction id."""
