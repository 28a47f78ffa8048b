"""Regression tests for form data operations composed over resolution and mapping."""
# pylint: disable=duplicate-code

from __future__ import annotations

from typing import Any

import pytest

from jdy_bridge.adapters import JdyApiError, RecordCreateRequest, RecordQueryRequest
from jdy_bridge.domain import ApplicationSummary, FieldDescriptor, FieldKind, FormSummary
from jdy_bridge.mapping import BatchLimitExceededError, FieldMatcher
from jdy_bridge.resolution import ApplicationListCache, FormResolver
from jdy_bridge.services import FormDataService, FormOperationError, MissingCredentialError

_FORM_HANDLE = "5f2a1b3c4d5e6f7a8b9c0d1e"


class _RecordingAdapterStub:
    """In-memory adapter stub recording every remote call."""

    def __init__(self) -> None:
        """Initialize deterministic metadata and empty call log.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: This stub does not raise value errors.
        """

        self.calls: list[tuple[str, Any]] = []
        self.errors: dict[str, Exception] = {}
        self.applications = (
            ApplicationSummary(application_id="app-1", name="CRM"),
            ApplicationSummary(application_id="app-empty", name="Empty"),
        )
        self.forms_by_app = {
            "app-1": (FormSummary(form_id="f1", name="Leads"), FormSummary(form_id="f2", name="Deals")),
            "app-empty": (),
        }
        self.descriptors = (
            FieldDescriptor(key="_widget_1", label="Name", kind=FieldKind.TEXT, required=True),
            FieldDescriptor(key="_widget_2", label="Phone Number", kind=FieldKind.PHONE),
            FieldDescriptor(
                key="_widget_3",
                label="Items",
                kind=FieldKind.SUBFORM,
                sub_fields=(FieldDescriptor(key="_widget_4", label="Quantity", kind=FieldKind.NUMBER),),
            ),
        )

    def _record(self, operation: str, details: Any) -> None:
        self.calls.append((operation, details))
        if operation in self.errors:
            raise self.errors[operation]

    def adapter_list_applications(self, app_key: str) -> tuple[ApplicationSummary, ...]:
        self._record("list_applications", app_key)
        return self.applications

    def adapter_list_forms(self, app_key: str, app_id: str) -> tuple[FormSummary, ...]:
        self._record("list_forms", app_id)
        return self.forms_by_app.get(app_id, ())

    def adapter_list_fields(
        self,
        app_key: str,
        form_id: str,
        app_id: str | None = None,
    ) -> tuple[FieldDescriptor, ...]:
        self._record("list_fields", (form_id, app_id))
        return self.descriptors

    def adapter_create_records(self, app_key: str, request: RecordCreateRequest) -> Any:
        self._record("create_records", request)
        return {"_id": "d-new"} if len(request.records) == 1 else {"success_count": len(request.records)}

    def adapter_get_record(self, app_key: str, app_id: str | None, form_id: str, data_id: str) -> Any:
        self._record("get_record", (app_id, form_id, data_id))
        return {"_id": data_id}

    def adapter_query_records(self, app_key: str, request: RecordQueryRequest) -> Any:
        self._record("query_records", request)
        return {"data": [{"_id": "d1"}]}

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
        self._record("update_record", (form_id, data_id, record))
        return {"_id": data_id}

    def adapter_delete_records(
        self,
        app_key: str,
        app_id: str | None,
        form_id: str,
        data_ids: tuple[str, ...],
        is_start_trigger: bool | None = None,
    ) -> Any:
        self._record("delete_records", data_ids)
        return {"status": "success"}

    def adapter_get_upload_token(self, app_key: str, app_id: str | None, form_id: str, transaction_id: str) -> Any:
        self._record("get_upload_token", transaction_id)
        return {"token_and_url_list": []}

    def operations(self) -> list[str]:
        """Return recorded operation names in call order."""

        return [operation for operation, _details in self.calls]


def _service(
    adapter: _RecordingAdapterStub,
    default_app_key: str | None = "key",
    default_app_id: str | None = "app-default",
) -> FormDataService:
    application_cache = ApplicationListCache(adapter=adapter)
    return FormDataService(
        adapter=adapter,
        form_resolver=FormResolver(adapter=adapter, application_cache=application_cache),
        field_matcher=FieldMatcher(adapter=adapter),
        application_cache=application_cache,
        default_app_key=default_app_key,
        default_app_id=default_app_id,
    )


def test_services_submit_over_batch_limit_is_rejected_before_remote_calls() -> None:
    """Reject 101 records without any metadata or data request.

    Returns:
        None: Assertions validate pre-flight batch validation.

    Raises:
        AssertionError: Raised when a remote call happens before validation.
    """

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    with pytest.raises(BatchLimitExceededError):
        service.service_submit_records(form_id="app-1", data=[{"Name": "x"}] * 101)

    assert adapter.calls == []


def test_services_submit_resolves_maps_formats_and_reports_ambiguity() -> None:
    """Submit through an application id with two forms.

    Returns:
        None: Assertions validate resolution, rekeying, formatting, and notice.

    Raises:
        AssertionError: Raised when the submission pipeline regresses.
    """

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_submit_records(
        form_id="app-1",
        data={"Name": "Ann", "Phone": "123", "Items": [{"Quantity": 2}], "extra": None},
    )

    assert payload["success"] is True
    assert payload["form_used"] == "f1"
    assert payload["app_id"] == "app-1"
    assert payload["result"] == {"_id": "d-new"}
    assert payload["alternatives"] == ["Leads (f1)", "Deals (f2)"]
    assert "Leads (f1), Deals (f2)" in str(payload["notice"])
    assert str(payload["message"]).startswith("Submitted 1 record(s)")
    assert payload["processed_data"] == {
        "_widget_1": "Ann",
        "_widget_2": "123",
        "_widget_3": [{"_widget_4": 2}],
        "extra": None,
    }
    assert [entry["key"] for entry in payload["field_mapping"]] == ["_widget_1", "_widget_2", "_widget_3", "_widget_4"]
    assert [event["stage"] for event in payload["diagnostics"]] == ["resolve", "mapping", "submit"]

    create_request = adapter.calls[-1][1]
    assert create_request.form_id == "f1"
    assert create_request.app_id == "app-1"
    assert create_request.records == (
        {
            "_widget_1": {"value": "Ann"},
            "_widget_2": {"value": "123"},
            "_widget_3": {"value": [{"_widget_4": {"value": 2}}]},
        },
    )


def test_services_submit_batch_fetches_descriptors_once() -> None:
    """Fetch field descriptors once for a multi-record submission."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_submit_records(form_id=_FORM_HANDLE, data=[{"Name": "A"}, {"Name": "B"}])

    assert payload["success"] is True
    assert adapter.operations().count("list_fields") == 1
    assert payload["processed_data"] == [{"_widget_1": "A"}, {"_widget_1": "B"}]
    assert payload["app_id"] == "app-default"
    assert "notice" not in payload


def test_services_submit_without_auto_match_skips_descriptor_fetch() -> None:
    """Forward caller keys unchanged when auto matching is disabled."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_submit_records(form_id=_FORM_HANDLE, data={"Name": "A"}, auto_match=False)

    assert "list_fields" not in adapter.operations()
    assert payload["processed_data"] == {"Name": "A"}
    assert payload["field_mapping"] is None


def test_services_submit_api_failure_is_returned_as_payload() -> None:
    """Return a classified failure payload instead of raising on API rejection.

    Returns:
        None: Assertions validate failure payload composition.

    Raises:
        AssertionError: Raised when failures escape or lose details.
    """

    adapter = _RecordingAdapterStub()
    adapter.errors["create_records"] = JdyApiError(
        "rejected",
        status_code=400,
        api_code=4000,
        api_message="Required field missing",
        response_payload={"code": 4000, "msg": "Required field missing"},
    )
    service = _service(adapter)

    payload = service.service_submit_records(form_id=_FORM_HANDLE, data={"Name": "A"})

    assert payload["success"] is False
    assert payload["error"] is True
    assert payload["message"] == "Submit form data failed: Required field missing"
    assert payload["suggestion"]
    assert payload["api_error"] == {
        "code": 4000,
        "message": "Required field missing",
        "details": {"code": 4000, "msg": "Required field missing"},
    }
    assert payload["form_used"] == _FORM_HANDLE


def test_services_submit_resolution_failure_is_returned_as_payload() -> None:
    """Report an application without forms as a failed submission."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_submit_records(form_id="app-empty", data={"Name": "A"})

    assert payload["success"] is False
    assert str(payload["message"]).startswith("Form id resolution failed")
    assert "create_records" not in adapter.operations()


def test_services_missing_credentials_raise_before_remote_calls() -> None:
    """Require an API key and an application id for data operations."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter, default_app_key=None, default_app_id=None)

    with pytest.raises(MissingCredentialError, match="app_key"):
        service.service_get_record(form_id=_FORM_HANDLE, data_id="d1")
    with pytest.raises(MissingCredentialError, match="app_id"):
        service.service_get_record(form_id=_FORM_HANDLE, data_id="d1", app_key="key")

    assert adapter.calls == []


def test_services_call_arguments_override_configured_defaults() -> None:
    """Prefer per-call credentials over configured defaults."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_get_record(form_id=_FORM_HANDLE, data_id="d1", app_id="app-call", app_key="other")

    assert payload["data"] == {"_id": "d1"}
    assert adapter.calls[-1] == ("get_record", ("app-call", _FORM_HANDLE, "d1"))


def test_services_get_form_fields_serializes_descriptor_tree() -> None:
    """Serialize descriptors with sub-form children."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_get_form_fields(form_id=_FORM_HANDLE)

    fields = payload["fields"]
    assert fields[0] == {"key": "_widget_1", "label": "Name", "type": "text", "required": True}
    assert fields[2]["sub_fields"] == [
        {"key": "_widget_4", "label": "Quantity", "type": "number", "required": False},
    ]


def test_services_query_validates_limit_and_merges_result() -> None:
    """Reject out-of-range limits and merge upstream rows with resolution details."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    with pytest.raises(ValueError, match="limit"):
        service.service_query_records(form_id=_FORM_HANDLE, limit=0)

    payload = service.service_query_records(
        form_id=_FORM_HANDLE,
        fields=["_widget_1"],
        filter={"rel": "and", "cond": []},
        limit=5,
    )

    assert payload["data"] == [{"_id": "d1"}]
    assert payload["form_used"] == _FORM_HANDLE
    query_request = adapter.calls[-1][1]
    assert query_request.limit == 5
    assert query_request.fields == ("_widget_1",)


def test_services_update_rekeys_and_formats_record() -> None:
    """Rekey and format update payloads before sending them."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_update_record(form_id=_FORM_HANDLE, data_id="d1", data={"Name": "New"})

    assert payload["success"] is True
    assert adapter.calls[-1] == ("update_record", (_FORM_HANDLE, "d1", {"_widget_1": {"value": "New"}}))


def test_services_delete_accepts_single_id_or_list() -> None:
    """Normalize a single id or a list of ids, dropping blanks."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    service.service_delete_records(form_id=_FORM_HANDLE, data_ids="d1")
    payload = service.service_delete_records(form_id=_FORM_HANDLE, data_ids=["d1", " ", "d2"])

    assert adapter.calls[0] == ("delete_records", ("d1",))
    assert adapter.calls[1] == ("delete_records", ("d1", "d2"))
    assert payload["message"] == "Deleted 2 record(s)"
    with pytest.raises(ValueError, match="data_ids"):
        service.service_delete_records(form_id=_FORM_HANDLE, data_ids=[])


def test_services_upload_token_forwards_transaction_id() -> None:
    """Request upload tokens with the caller's transaction id."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    payload = service.service_get_upload_token(form_id=_FORM_HANDLE, transaction_id="tx-1")

    assert payload["result"] == {"token_and_url_list": []}
    assert adapter.calls[-1] == ("get_upload_token", "tx-1")


def test_services_non_submit_failures_raise_classified_errors() -> None:
    """Raise FormOperationError carrying the classified diagnosis.

    Returns:
        None: Assertions validate classification on non-submit operations.

    Raises:
        AssertionError: Raised when failures are not classified.
    """

    adapter = _RecordingAdapterStub()
    adapter.errors["get_record"] = JdyApiError("forbidden", status_code=403)
    service = _service(adapter)

    with pytest.raises(FormOperationError) as error_info:
        service.service_get_record(form_id=_FORM_HANDLE, data_id="d1")

    assert error_info.value.classified.message == "Get form data failed: permission denied"
    assert error_info.value.classified.suggestion is not None


def test_services_list_apps_and_forms_ignores_default_app_id() -> None:
    """List applications unless an explicit app id is passed."""

    adapter = _RecordingAdapterStub()
    service = _service(adapter)

    apps_payload = service.service_list_apps_and_forms()
    forms_payload = service.service_list_apps_and_forms(app_id="app-1")

    assert [app["id"] for app in apps_payload["apps"]] == ["app-1", "app-empty"]
    assert apps_payload["total"] == 2
    assert "app_id" in str(apps_payload["message"])
    assert [form["id"] for form in forms_payload["forms"]] == ["f1", "f2"]
    assert forms_payload["app_id"] == "app-1"


def test_services_list_apps_and_forms_includes_form_descriptions() -> None:
    """Serialize each form's description next to its id and name."""

    adapter = _RecordingAdapterStub()
    adapter.forms_by_app["app-1"] = (
        FormSummary(form_id="f1", name="Leads", description="Sales leads"),
        FormSummary(form_id="f2", name="Deals"),
    )
    service = _service(adapter)

    forms_payload = service.service_list_apps_and_forms(app_id="app-1")

    assert forms_payload["forms"][0]["description"] == "Sales leads"
    assert forms_payload["forms"][1]["description"] is None
