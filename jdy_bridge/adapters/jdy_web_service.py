"""JianDaoYun open API adapter implementation over httpx."""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from jdy_bridge.domain import (
    ApplicationSummary,
    FieldDescriptor,
    FieldKind,
    FormSummary,
    domain_normalize_optional_text,
    domain_parse_optional_timestamp,
)

from .interfaces import JianDaoYunAdapterPort, RecordCreateRequest, RecordQueryRequest
from .jdy_errors import (
    JdyAdapterConnectionError,
    JdyAdapterTimeoutError,
    JdyApiError,
    JdyResponseContractError,
)

logger = logging.getLogger(__name__)

UNNAMED_FORM_LABEL: Final[str] = "Unnamed form"


class JianDaoYunWebServiceAdapter(JianDaoYunAdapterPort):
    """Adapter for the JianDaoYun v5 data API and v1 form listing endpoint.

    Every call is a single JSON `POST` authenticated with the caller's API key.
    The adapter performs no retries; transport and API failures surface as
    typed `JdyAdapterError` subclasses carrying status and business codes.
    """

    _USER_AGENT: Final[str] = "jiandaoyun-bridge/1.0 (Python/httpx)"
    _APP_LIST_PATH: Final[str] = "/api/v5/app/list"
    _FORM_LIST_PATH_TEMPLATE: Final[str] = "/api/v1/app/{app_id}/entry/list"
    _WIDGET_LIST_PATH: Final[str] = "/api/v5/app/entry/widget/list"
    _DATA_CREATE_PATH: Final[str] = "/api/v5/app/entry/data/create"
    _DATA_BATCH_CREATE_PATH: Final[str] = "/api/v5/app/entry/data/batch_create"
    _DATA_GET_PATH: Final[str] = "/api/v5/app/entry/data/get"
    _DATA_LIST_PATH: Final[str] = "/api/v5/app/entry/data/list"
    _DATA_UPDATE_PATH: Final[str] = "/api/v5/app/entry/data/update"
    _DATA_DELETE_PATH: Final[str] = "/api/v5/app/entry/data/delete"
    _DATA_BATCH_DELETE_PATH: Final[str] = "/api/v5/app/entry/data/batch_delete"
    _UPLOAD_TOKEN_PATH: Final[str] = "/api/v5/app/entry/file/get_upload_token"
    _WIDGET_KIND_BY_TYPE: Final[dict[str, FieldKind]] = {
        "text": FieldKind.TEXT,
        "textarea": FieldKind.TEXT,
        "number": FieldKind.NUMBER,
        "date": FieldKind.DATE,
        "datetime": FieldKind.DATETIME,
        "sn": FieldKind.SERIAL_NO,
        "address": FieldKind.ADDRESS,
        "location": FieldKind.LOCATION,
        "image": FieldKind.IMAGE,
        "file": FieldKind.FILE,
        "single_select": FieldKind.SELECT,
        "multiple_select": FieldKind.MULTI_SELECT,
        "checkbox": FieldKind.CHECKBOX,
        "radio": FieldKind.RADIO,
        "user": FieldKind.USER,
        "dept": FieldKind.DEPT,
        "subform": FieldKind.SUBFORM,
        "formula": FieldKind.FORMULA,
        "phone": FieldKind.PHONE,
    }

    def __init__(
        self,
        base_url: str = "https://api.jiandaoyun.com",
        request_timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the JianDaoYun adapter.

        Args:
            base_url: API origin, without the `/api` path prefix.
            request_timeout_seconds: HTTP request timeout in seconds.
            http_client: Optional preconfigured httpx client.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._base_url = normalized_base_url.rstrip("/")
        # Endpoint paths already carry the `/api` prefix.
        if self._base_url.endswith("/api"):
            self._base_url = self._base_url[: -len("/api")]
        self._http_client = http_client or httpx.Client(
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
        )

    def adapter_list_applications(self, app_key: str) -> tuple[ApplicationSummary, ...]:
        """List applications visible to one API key.

        Args:
            app_key: API key used as bearer credential.

        Returns:
            tuple[ApplicationSummary, ...]: Applications in listing order.

        Raises:
            JdyAdapterError: Raised on transport or API failures.
        """

        payload = self._adapter_post_json(app_key=app_key, path=self._APP_LIST_PATH, body={})
        raw_applications = self._adapter_extract_list(payload, candidate_keys=("apps", "data"))
        applications: list[ApplicationSummary] = []
        for raw_application in raw_applications:
            if not isinstance(raw_application, dict):
                continue
            application_id = domain_normalize_optional_text(raw_application.get("app_id"))
            if application_id is None:
                continue
            applications.append(
                ApplicationSummary(
                    application_id=application_id,
                    name=str(raw_application.get("name") or application_id),
                    description=domain_normalize_optional_text(raw_application.get("description")),
                    created_at=domain_parse_optional_timestamp(raw_application.get("created_time")),
                    updated_at=domain_parse_optional_timestamp(raw_application.get("updated_time")),
                )
            )
        return tuple(applications)

    def adapter_list_forms(self, app_key: str, app_id: str) -> tuple[FormSummary, ...]:
        """List forms owned by one application.

        Args:
            app_key: API key used as bearer credential.
            app_id: Application id.

        Returns:
            tuple[FormSummary, ...]: Forms in listing order.

        Raises:
            ValueError: Raised when app_id is blank.
            JdyAdapterError: Raised on transport or API failures.
        """

        normalized_app_id = app_id.strip()
        if not normalized_app_id:
            raise ValueError("app_id must not be blank")

        payload = self._adapter_post_json(
            app_key=app_key,
            path=self._FORM_LIST_PATH_TEMPLATE.format(app_id=normalized_app_id),
            body={},
        )
        raw_forms = self._adapter_extract_list(payload, candidate_keys=("forms", "entries", "data"))
        forms: list[FormSummary] = []
        for raw_form in raw_forms:
            if not isinstance(raw_form, dict):
                continue
            form_id = domain_normalize_optional_text(raw_form.get("entry_id")) or domain_normalize_optional_text(
                raw_form.get("_id")
            )
            if form_id is None:
                continue
            forms.append(
                FormSummary(
                    form_id=form_id,
                    name=domain_normalize_optional_text(raw_form.get("name")) or UNNAMED_FORM_LABEL,
                    description=domain_normalize_optional_text(raw_form.get("description")),
                    created_at=domain_parse_optional_timestamp(raw_form.get("created_time")),
                    updated_at=domain_parse_optional_timestamp(raw_form.get("updated_time")),
                )
            )
        return tuple(forms)

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

        payload = self._adapter_post_json(
            app_key=app_key,
            path=self._WIDGET_LIST_PATH,
            body={"app_id": app_id, "entry_id": form_id},
        )
        widgets = payload.get("widgets") if isinstance(payload, dict) else None
        if not isinstance(widgets, list):
            return ()
        return self._adapter_transform_widgets(widgets)

    def adapter_create_records(self, app_key: str, request: RecordCreateRequest) -> Any:
        """Create one record, or a batch when more than one record is given.

        Args:
            app_key: API key used as bearer credential.
            request: Create request with already formatted records.

        Returns:
            Any: Upstream `data` payload, or the whole body when absent.

        Raises:
            ValueError: Raised when no records are provided.
            JdyAdapterError: Raised on transport or API failures.
        """

        if not request.records:
            raise ValueError("records must not be empty")

        body: dict[str, Any] = {"app_id": request.app_id, "entry_id": request.form_id}
        if len(request.records) > 1:
            path = self._DATA_BATCH_CREATE_PATH
            body["data_list"] = list(request.records)
        else:
            path = self._DATA_CREATE_PATH
            body["data"] = request.records[0]
        if request.transaction_id:
            body["transaction_id"] = request.transaction_id
        if request.data_creator:
            body["data_creator"] = request.data_creator
        if request.is_start_workflow is not None:
            body["is_start_workflow"] = request.is_start_workflow
        if request.is_start_trigger is not None:
            body["is_start_trigger"] = request.is_start_trigger

        logger.debug("Creating %d record(s) in form %s", len(request.records), request.form_id)
        return self._adapter_unwrap_data(self._adapter_post_json(app_key=app_key, path=path, body=body))

    def adapter_get_record(self, app_key: str, app_id: str | None, form_id: str, data_id: str) -> Any:
        """Fetch one record by data id."""

        body = {"app_id": app_id, "entry_id": form_id, "data_id": data_id}
        return self._adapter_unwrap_data(self._adapter_post_json(app_key=app_key, path=self._DATA_GET_PATH, body=body))

    def adapter_query_records(self, app_key: str, request: RecordQueryRequest) -> Any:
        """List records matching an optional filter.

        Args:
            app_key: API key used as bearer credential.
            request: Query request.

        Returns:
            Any: Upstream response body (contains `data` rows).

        Raises:
            ValueError: Raised when the limit is outside 1..100.
            JdyAdapterError: Raised on transport or API failures.
        """

        if request.limit < 1 or request.limit > 100:
            raise ValueError("limit must be between 1 and 100")

        body: dict[str, Any] = {"app_id": request.app_id, "entry_id": request.form_id, "limit": request.limit}
        if request.data_id:
            body["data_id"] = request.data_id
        if request.fields:
            body["fields"] = list(request.fields)
        if request.filter:
            body["filter"] = request.filter
        return self._adapter_post_json(app_key=app_key, path=self._DATA_LIST_PATH, body=body)

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

        body: dict[str, Any] = {"app_id": app_id, "entry_id": form_id, "data_id": data_id, "data": record}
        if transaction_id:
            body["transaction_id"] = transaction_id
        if is_start_trigger is not None:
            body["is_start_trigger"] = is_start_trigger
        return self._adapter_unwrap_data(self._adapter_post_json(app_key=app_key, path=self._DATA_UPDATE_PATH, body=body))

    def adapter_delete_records(
        self,
        app_key: str,
        app_id: str | None,
        form_id: str,
        data_ids: tuple[str, ...],
        is_start_trigger: bool | None = None,
    ) -> Any:
        """Delete one record, or a batch when more than one id is given.

        Args:
            app_key: API key used as bearer credential.
            app_id: Owning application id.
            form_id: Form handle.
            data_ids: Record ids to delete.
            is_start_trigger: Optional data-trigger flag.

        Returns:
            Any: Upstream result payload.

        Raises:
            ValueError: Raised when no ids are provided.
            JdyAdapterError: Raised on transport or API failures.
        """

        if not data_ids:
            raise ValueError("data_ids must not be empty")

        body: dict[str, Any] = {"app_id": app_id, "entry_id": form_id}
        if len(data_ids) > 1:
            path = self._DATA_BATCH_DELETE_PATH
            body["data_ids"] = list(data_ids)
        else:
            path = self._DATA_DELETE_PATH
            body["data_id"] = data_ids[0]
        if is_start_trigger is not None:
            body["is_start_trigger"] = is_start_trigger
        return self._adapter_unwrap_data(self._adapter_post_json(app_key=app_key, path=path, body=body))

    def adapter_get_upload_token(self, app_key: str, app_id: str | None, form_id: str, transaction_id: str) -> Any:
        """Request file upload tokens bound to one transaction id."""

        body = {"app_id": app_id, "entry_id": form_id, "transaction_id": transaction_id}
        return self._adapter_unwrap_data(self._adapter_post_json(app_key=app_key, path=self._UPLOAD_TOKEN_PATH, body=body))

    def _adapter_post_json(self, app_key: str, path: str, body: dict[str, Any]) -> Any:
        """Execute one authenticated JSON POST and return the decoded body.

        Args:
            app_key: API key used as bearer credential.
            path: Endpoint path starting with `/api`.
            body: JSON request body.

        Returns:
            Any: Decoded JSON response body.

        Raises:
            ValueError: Raised when the API key is blank.
            JdyAdapterTimeoutError: Raised when the transport times out.
            JdyAdapterConnectionError: Raised for other transport failures.
            JdyApiError: Raised for HTTP error statuses or non-zero business codes.
            JdyResponseContractError: Raised when a success body is not JSON.
        """

        normalized_app_key = app_key.strip()
        if not normalized_app_key:
            raise ValueError("app_key must not be blank")

        url = f"{self._base_url}{path}"
        try:
            response = self._http_client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {normalized_app_key}"},
            )
        except httpx.TimeoutException as error:
            raise JdyAdapterTimeoutError(f"JianDaoYun request timed out: {path}") from error
        except httpx.HTTPError as error:
            raise JdyAdapterConnectionError(f"JianDaoYun transport request failed: {path}: {error}") from error

        payload = self._adapter_try_decode_json(response)
        api_code, api_message = self._adapter_extract_error(payload)

        if response.status_code >= 400:
            detail = api_message or response.reason_phrase or "request failed"
            raise JdyApiError(
                f"JianDaoYun API returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
                api_code=api_code,
                api_message=api_message,
                response_payload=payload,
            )

        if payload is None:
            raise JdyResponseContractError(
                f"JianDaoYun API returned a non-JSON body for {path}",
                status_code=response.status_code,
            )

        if api_code is not None and api_code != 0:
            raise JdyApiError(
                f"JianDaoYun API error {api_code}: {api_message or 'unknown error'}",
                status_code=response.status_code,
                api_code=api_code,
                api_message=api_message,
                response_payload=payload,
            )

        return payload

    def _adapter_try_decode_json(self, response: httpx.Response) -> Any:
        """Best-effort JSON decode; returns None for empty or non-JSON bodies."""

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _adapter_extract_error(self, payload: Any) -> tuple[int | None, str | None]:
        """Extract the business error code and message from a response body.

        Args:
            payload: Decoded response body.

        Returns:
            tuple[int | None, str | None]: Business code (when numeric) and message.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if not isinstance(payload, dict):
            return None, None

        raw_code = payload.get("code")
        api_code: int | None
        if isinstance(raw_code, bool) or raw_code is None:
            api_code = None
        else:
            try:
                api_code = int(raw_code)
            except (TypeError, ValueError, OverflowError):
                api_code = None

        raw_message = payload.get("msg")
        api_message = str(raw_message) if raw_message is not None else None
        return api_code, api_message

    def _adapter_extract_list(self, payload: Any, candidate_keys: tuple[str, ...]) -> list[Any]:
        """Return the first list found at the payload root or under candidate keys."""

        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            for candidate_key in candidate_keys:
                candidate_value = payload.get(candidate_key)
                if isinstance(candidate_value, list):
                    return candidate_value
        return []

    def _adapter_unwrap_data(self, payload: Any) -> Any:
        """Return `payload["data"]` when present, else the payload itself."""

        if isinstance(payload, dict) and payload.get("data") is not None:
            return payload["data"]
        return payload

    def _adapter_transform_widgets(self, widgets: list[Any]) -> tuple[FieldDescriptor, ...]:
        """Convert raw widget payloads into field descriptors, recursing into sub-forms.

        Args:
            widgets: Raw widget list from the widget endpoint.

        Returns:
            tuple[FieldDescriptor, ...]: Descriptors in declaration order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        descriptors: list[FieldDescriptor] = []
        for widget in widgets:
            if not isinstance(widget, dict):
                continue
            key = domain_normalize_optional_text(widget.get("name"))
            if key is None:
                continue
            widget_type = str(widget.get("type") or "")
            kind = self._WIDGET_KIND_BY_TYPE.get(widget_type, FieldKind.TEXT)
            sub_fields: tuple[FieldDescriptor, ...] = ()
            raw_items = widget.get("items")
            if kind is FieldKind.SUBFORM and isinstance(raw_items, list):
                sub_fields = self._adapter_transform_widgets(raw_items)
            descriptors.append(
                FieldDescriptor(
                    key=key,
                    label=str(widget.get("label") or ""),
                    kind=kind,
                    required=bool(widget.get("required", False)),
                    sub_fields=sub_fields,
                )
            )
        return tuple(descriptors)
