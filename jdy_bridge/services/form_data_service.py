"""Form data operations composed from resolution, mapping, and formatting."""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping, Sequence

from jdy_bridge.adapters import (
    JdyAdapterError,
    JianDaoYunAdapterPort,
    RecordCreateRequest,
    RecordQueryRequest,
)
from jdy_bridge.diagnostics import classifier_classify_error
from jdy_bridge.domain import (
    ApplicationSummary,
    FieldDescriptor,
    FormSummary,
    ResolvedForm,
    domain_build_stage_event,
    domain_normalize_optional_text,
)
from jdy_bridge.mapping import (
    FieldMappingError,
    FieldMatcherPort,
    formatter_format_record,
    formatter_validate_batch_size,
)
from jdy_bridge.resolution import (
    ApplicationCachePort,
    FormResolutionError,
    FormResolverPort,
    MetadataUnavailableError,
)

from .interfaces import FormOperationError, MissingCredentialError

logger = logging.getLogger(__name__)

QUERY_LIMIT_MAX: Final[int] = 100

_CLASSIFIABLE_FAILURES: Final[tuple[type[Exception], ...]] = (
    JdyAdapterError,
    FormResolutionError,
    FieldMappingError,
    MetadataUnavailableError,
)


class FormDataService:
    """Form data operations accepting loose identifiers and field names.

    Every operation resolves the caller's form identifier first. Mutating
    operations then rekey and format records before the remote call. Remote
    failures are classified once and never retried.
    """

    def __init__(
        self,
        adapter: JianDaoYunAdapterPort,
        form_resolver: FormResolverPort,
        field_matcher: FieldMatcherPort,
        application_cache: ApplicationCachePort,
        default_app_key: str | None = None,
        default_app_id: str | None = None,
    ):
        """Initialize service dependencies.

        Args:
            adapter: Remote API adapter.
            form_resolver: Identifier resolver.
            field_matcher: Field matcher for record rekeying.
            application_cache: Application listing cache shared with the resolver.
            default_app_key: API key used when a call omits one.
            default_app_id: Application id used when a call omits one.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if adapter is None:
            raise ValueError("adapter must not be None")
        if form_resolver is None:
            raise ValueError("form_resolver must not be None")
        if field_matcher is None:
            raise ValueError("field_matcher must not be None")
        if application_cache is None:
            raise ValueError("application_cache must not be None")

        self._adapter = adapter
        self._form_resolver = form_resolver
        self._field_matcher = field_matcher
        self._application_cache = application_cache
        self._default_app_key = domain_normalize_optional_text(default_app_key)
        self._default_app_id = domain_normalize_optional_text(default_app_id)

    def service_get_form_fields(
        self,
        form_id: str,
        app_id: str | None = None,
        app_key: str | None = None,
    ) -> dict[str, object]:
        """Return field definitions of the form named by `form_id`.

        Args:
            form_id: Form handle or application id.
            app_id: Optional application id override.
            app_key: Optional API key override.

        Returns:
            dict[str, object]: Field descriptor tree and resolution details.

        Raises:
            MissingCredentialError: Raised when credentials are missing.
            FormOperationError: Raised when resolution or the remote call fails.
        """

        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []
        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
            descriptors = self._adapter.adapter_list_fields(
                app_key=resolved_app_key,
                form_id=resolved.form_handle,
                app_id=resolved.application_id or resolved_app_id,
            )
        except _CLASSIFIABLE_FAILURES as error:
            raise _service_classified_failure(error, "Get form fields") from error

        payload: dict[str, object] = {
            "fields": [service_serialize_descriptor(descriptor) for descriptor in descriptors],
            "form_used": resolved.form_handle,
            "app_id": resolved.application_id or resolved_app_id,
            "diagnostics": timeline,
        }
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_submit_records(
        self,
        form_id: str,
        data: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        app_id: str | None = None,
        app_key: str | None = None,
        auto_match: bool = True,
        transaction_id: str | None = None,
        data_creator: str | None = None,
        is_start_workflow: bool | None = None,
        is_start_trigger: bool | None = None,
    ) -> dict[str, object]:
        """Submit one record or a batch of records.

        Failures after input validation are reported in the returned payload
        (`success: False`) instead of being raised.

        Args:
            form_id: Form handle or application id.
            data: One record or a list of records keyed by loose field names.
            app_id: Optional application id override.
            app_key: Optional API key override.
            auto_match: Whether to rekey fields through the field matcher.
            transaction_id: Optional transaction id binding uploaded files.
            data_creator: Optional creator user id.
            is_start_workflow: Optional workflow trigger flag.
            is_start_trigger: Optional data-trigger flag.

        Returns:
            dict[str, object]: Submission outcome payload.

        Raises:
            ValueError: Raised when `data` is not a record or a non-empty list of records.
            BatchLimitExceededError: Raised when more than 100 records are given.
            MissingCredentialError: Raised when credentials are missing.
        """

        records = service_normalize_records(data)
        formatter_validate_batch_size(records)
        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []

        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
        except (FormResolutionError, MetadataUnavailableError) as error:
            return {
                "success": False,
                "error": True,
                "message": f"Form id resolution failed: {error}",
                "form_used": None,
                "app_id": resolved_app_id,
                "original_data": data,
                "processed_data": None,
                "diagnostics": timeline,
            }

        effective_app_id = resolved.application_id or resolved_app_id
        processed_records: list[dict[str, object]] = [dict(record) for record in records]
        field_mapping: list[dict[str, object]] | None = None

        try:
            if auto_match:
                mapping_results = self._field_matcher.matcher_map_batch(
                    form_handle=resolved.form_handle,
                    records=records,
                    app_key=resolved_app_key,
                    application_id=effective_app_id,
                )
                processed_records = [mapping_result.mapped_record for mapping_result in mapping_results]
                field_mapping = [info.field_info_as_payload() for info in mapping_results[0].field_info]
                timeline.append(
                    domain_build_stage_event(
                        stage="mapping",
                        status="completed" if field_mapping else "degraded",
                        details={"record_count": len(processed_records), "field_count": len(field_mapping)},
                    )
                )

            formatted_records = tuple(formatter_format_record(record) for record in processed_records)
            result = self._adapter.adapter_create_records(
                app_key=resolved_app_key,
                request=RecordCreateRequest(
                    app_id=effective_app_id,
                    form_id=resolved.form_handle,
                    records=formatted_records,
                    transaction_id=transaction_id,
                    data_creator=data_creator,
                    is_start_workflow=is_start_workflow,
                    is_start_trigger=is_start_trigger,
                ),
            )
        except (JdyAdapterError, FieldMappingError) as error:
            classified = classifier_classify_error(error, "Submit form data")
            timeline.append(domain_build_stage_event(stage="submit", status="failed", details={"error": str(error)}))
            logger.warning("Form submission to %s failed: %s", resolved.form_handle, classified.message)
            failure_payload: dict[str, object] = {
                "success": False,
                "error": True,
                "message": classified.message,
                "form_used": resolved.form_handle,
                "app_id": effective_app_id,
                "original_data": data,
                "processed_data": _service_single_or_list(processed_records, data),
                "diagnostics": timeline,
            }
            if classified.suggestion is not None:
                failure_payload["suggestion"] = classified.suggestion
            api_error = _service_build_api_error(error)
            if api_error is not None:
                failure_payload["api_error"] = api_error
            return failure_payload

        timeline.append(
            domain_build_stage_event(stage="submit", status="completed", details={"record_count": len(records)})
        )
        message = f"Submitted {len(records)} record(s)"
        if resolved.resolved_is_ambiguous():
            message += "; multiple forms exist under the application, the first form was used"
        payload: dict[str, object] = {
            "success": True,
            "result": result,
            "message": message,
            "form_used": resolved.form_handle,
            "app_id": effective_app_id,
            "original_data": data,
            "processed_data": _service_single_or_list(processed_records, data),
            "field_mapping": field_mapping,
            "diagnostics": timeline,
        }
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_get_record(
        self,
        form_id: str,
        data_id: str,
        app_id: str | None = None,
        app_key: str | None = None,
    ) -> dict[str, object]:
        """Return one record by data id.

        Raises:
            ValueError: Raised when data_id is blank.
            MissingCredentialError: Raised when credentials are missing.
            FormOperationError: Raised when resolution or the remote call fails.
        """

        normalized_data_id = _service_require_text(data_id, "data_id")
        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []
        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
            record = self._adapter.adapter_get_record(
                app_key=resolved_app_key,
                app_id=resolved.application_id or resolved_app_id,
                form_id=resolved.form_handle,
                data_id=normalized_data_id,
            )
        except _CLASSIFIABLE_FAILURES as error:
            raise _service_classified_failure(error, "Get form data") from error

        payload: dict[str, object] = {
            "data": record,
            "form_used": resolved.form_handle,
            "app_id": resolved.application_id or resolved_app_id,
            "diagnostics": timeline,
        }
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_query_records(
        self,
        form_id: str,
        app_id: str | None = None,
        app_key: str | None = None,
        data_id: str | None = None,
        fields: Sequence[str] | None = None,
        filter: Mapping[str, Any] | None = None,
        limit: int = 10,
    ) -> dict[str, object]:
        """Query records of a form with optional field selection and filter.

        Args:
            form_id: Form handle or application id.
            app_id: Optional application id override.
            app_key: Optional API key override.
            data_id: Optional last data id for pagination.
            fields: Optional widget keys to return.
            filter: Optional filter object with `rel` and `cond`.
            limit: Page size in the range 1..100.

        Returns:
            dict[str, object]: Upstream rows merged with resolution details.

        Raises:
            ValueError: Raised when limit is out of range.
            MissingCredentialError: Raised when credentials are missing.
            FormOperationError: Raised when resolution or the remote call fails.
        """

        if limit < 1 or limit > QUERY_LIMIT_MAX:
            raise ValueError(f"limit must be between 1 and {QUERY_LIMIT_MAX}")
        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []
        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
            result = self._adapter.adapter_query_records(
                app_key=resolved_app_key,
                request=RecordQueryRequest(
                    app_id=resolved.application_id or resolved_app_id,
                    form_id=resolved.form_handle,
                    limit=limit,
                    data_id=domain_normalize_optional_text(data_id),
                    fields=tuple(fields) if fields else None,
                    filter=dict(filter) if filter else None,
                ),
            )
        except _CLASSIFIABLE_FAILURES as error:
            raise _service_classified_failure(error, "Query form data") from error

        payload: dict[str, object] = dict(result) if isinstance(result, Mapping) else {"data": result}
        payload.update(
            {
                "form_used": resolved.form_handle,
                "app_id": resolved.application_id or resolved_app_id,
                "diagnostics": timeline,
            }
        )
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_update_record(
        self,
        form_id: str,
        data_id: str,
        data: Mapping[str, Any],
        app_id: str | None = None,
        app_key: str | None = None,
        auto_match: bool = True,
        transaction_id: str | None = None,
        is_start_trigger: bool | None = None,
    ) -> dict[str, object]:
        """Update one record, rekeying and formatting the changed fields.

        Raises:
            ValueError: Raised when data_id is blank or data is not a record.
            MissingCredentialError: Raised when credentials are missing.
            FormOperationError: Raised when resolution, mapping, or the remote call fails.
        """

        normalized_data_id = _service_require_text(data_id, "data_id")
        if not isinstance(data, Mapping):
            raise ValueError("data must be a record object")
        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []
        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
            effective_app_id = resolved.application_id or resolved_app_id
            processed_record: dict[str, object] = dict(data)
            if auto_match:
                mapping_result = self._field_matcher.matcher_map_fields(
                    form_handle=resolved.form_handle,
                    record=data,
                    app_key=resolved_app_key,
                    application_id=effective_app_id,
                )
                processed_record = mapping_result.mapped_record
                timeline.append(
                    domain_build_stage_event(
                        stage="mapping",
                        status="completed" if mapping_result.field_info else "degraded",
                    )
                )
            result = self._adapter.adapter_update_record(
                app_key=resolved_app_key,
                app_id=effective_app_id,
                form_id=resolved.form_handle,
                data_id=normalized_data_id,
                record=formatter_format_record(processed_record),
                transaction_id=transaction_id,
                is_start_trigger=is_start_trigger,
            )
        except _CLASSIFIABLE_FAILURES as error:
            raise _service_classified_failure(error, "Update form data") from error

        payload: dict[str, object] = {
            "success": True,
            "result": result,
            "message": "Record updated",
            "form_used": resolved.form_handle,
            "app_id": effective_app_id,
            "processed_data": processed_record,
            "diagnostics": timeline,
        }
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_delete_records(
        self,
        form_id: str,
        data_ids: str | Sequence[str],
        app_id: str | None = None,
        app_key: str | None = None,
        is_start_trigger: bool | None = None,
    ) -> dict[str, object]:
        """Delete one record or a batch of records.

        Raises:
            ValueError: Raised when no usable data id is given.
            MissingCredentialError: Raised when credentials are missing.
            FormOperationError: Raised when resolution or the remote call fails.
        """

        raw_data_ids = [data_ids] if isinstance(data_ids, str) else list(data_ids)
        normalized_data_ids = tuple(
            normalized for normalized in (domain_normalize_optional_text(value) for value in raw_data_ids) if normalized
        )
        if not normalized_data_ids:
            raise ValueError("data_ids must contain at least one id")
        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []
        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
            result = self._adapter.adapter_delete_records(
                app_key=resolved_app_key,
                app_id=resolved.application_id or resolved_app_id,
                form_id=resolved.form_handle,
                data_ids=normalized_data_ids,
                is_start_trigger=is_start_trigger,
            )
        except _CLASSIFIABLE_FAILURES as error:
            raise _service_classified_failure(error, "Delete form data") from error

        payload: dict[str, object] = {
            "success": True,
            "result": result,
            "message": f"Deleted {len(normalized_data_ids)} record(s)",
            "form_used": resolved.form_handle,
            "app_id": resolved.application_id or resolved_app_id,
            "diagnostics": timeline,
        }
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_get_upload_token(
        self,
        form_id: str,
        transaction_id: str,
        app_id: str | None = None,
        app_key: str | None = None,
    ) -> dict[str, object]:
        """Request file upload tokens bound to a transaction id.

        Raises:
            ValueError: Raised when transaction_id is blank.
            MissingCredentialError: Raised when credentials are missing.
            FormOperationError: Raised when resolution or the remote call fails.
        """

        normalized_transaction_id = _service_require_text(transaction_id, "transaction_id")
        resolved_app_key, resolved_app_id = self._service_require_credentials(app_key, app_id)
        timeline: list[dict[str, object]] = []
        try:
            resolved = self._service_resolve_form(form_id, resolved_app_key, timeline)
            result = self._adapter.adapter_get_upload_token(
                app_key=resolved_app_key,
                app_id=resolved.application_id or resolved_app_id,
                form_id=resolved.form_handle,
                transaction_id=normalized_transaction_id,
            )
        except _CLASSIFIABLE_FAILURES as error:
            raise _service_classified_failure(error, "Get upload token") from error

        payload: dict[str, object] = {
            "success": True,
            "result": result,
            "form_used": resolved.form_handle,
            "app_id": resolved.application_id or resolved_app_id,
            "diagnostics": timeline,
        }
        _service_attach_ambiguity_notice(payload, resolved)
        return payload

    def service_list_apps_and_forms(
        self,
        app_id: str | None = None,
        app_key: str | None = None,
    ) -> dict[str, object]:
        """List forms of one application, or every visible application.

        Only an explicit `app_id` argument selects the form listing; the
        configured default application id is not used here.

        Args:
            app_id: Optional application id whose forms to list.
            app_key: Optional API key override.

        Returns:
            dict[str, object]: Forms of the application, or the application list.

        Raises:
            MissingCredentialError: Raised when the API key is missing.
            FormOperationError: Raised when a listing fails.
        """

        resolved_app_key = self._service_require_app_key(app_key)
        target_app_id = domain_normalize_optional_text(app_id)

        if target_app_id is not None:
            try:
                forms = self._adapter.adapter_list_forms(app_key=resolved_app_key, app_id=target_app_id)
            except JdyAdapterError as error:
                raise _service_classified_failure(error, f'List forms of application "{target_app_id}"') from error
            return {
                "app_id": target_app_id,
                "forms": [service_serialize_form(form) for form in forms],
                "total": len(forms),
            }

        try:
            applications = self._application_cache.cache_get_applications(app_key=resolved_app_key)
        except MetadataUnavailableError as error:
            raise _service_classified_failure(error, "List applications") from error
        return {
            "apps": [service_serialize_application(application) for application in applications],
            "total": len(applications),
            "message": "Call list_apps_and_forms with app_id to list the forms of one application",
        }

    def _service_resolve_form(
        self,
        form_id: str,
        app_key: str,
        timeline: list[dict[str, object]],
    ) -> ResolvedForm:
        normalized_form_id = _service_require_text(form_id, "form_id")
        try:
            resolved = self._form_resolver.resolver_resolve_form(identifier=normalized_form_id, app_key=app_key)
        except (FormResolutionError, MetadataUnavailableError) as error:
            timeline.append(domain_build_stage_event(stage="resolve", status="failed", details={"error": str(error)}))
            raise
        timeline.append(
            domain_build_stage_event(
                stage="resolve",
                status="completed",
                details={
                    "identifier": normalized_form_id,
                    "form_handle": resolved.form_handle,
                    "application_id": resolved.application_id,
                    "alternative_count": len(resolved.ambiguous_alternatives or ()),
                },
            )
        )
        return resolved

    def _service_require_app_key(self, app_key: str | None) -> str:
        resolved_app_key = domain_normalize_optional_text(app_key) or self._default_app_key
        if resolved_app_key is None:
            raise MissingCredentialError(
                "app_key is required. Set JIANDAOYUN_APP_KEY in the server configuration or pass app_key."
            )
        return resolved_app_key

    def _service_require_credentials(self, app_key: str | None, app_id: str | None) -> tuple[str, str]:
        resolved_app_key = self._service_require_app_key(app_key)
        resolved_app_id = domain_normalize_optional_text(app_id) or self._default_app_id
        if resolved_app_id is None:
            raise MissingCredentialError(
                "app_id is required. Pass app_id or set JIANDAOYUN_APP_ID in the server configuration."
            )
        return resolved_app_key, resolved_app_id


def service_normalize_records(data: object) -> list[Mapping[str, Any]]:
    """Normalize submission input into a non-empty list of records.

    Raises:
        ValueError: Raised when input is not a record or a non-empty list of records.
    """

    if isinstance(data, Mapping):
        return [data]
    if isinstance(data, (list, tuple)):
        if not data:
            raise ValueError("data must contain at least one record")
        if not all(isinstance(record, Mapping) for record in data):
            raise ValueError("every item in data must be a record object")
        return list(data)
    raise ValueError("data must be a record object or a list of record objects")


def service_serialize_descriptor(descriptor: FieldDescriptor) -> dict[str, object]:
    """Serialize a descriptor tree into JSON-compatible dictionaries."""

    payload: dict[str, object] = {
        "key": descriptor.key,
        "label": descriptor.label,
        "type": descriptor.kind.value,
        "required": descriptor.required,
    }
    if descriptor.sub_fields:
        payload["sub_fields"] = [service_serialize_descriptor(sub_field) for sub_field in descriptor.sub_fields]
    return payload


def service_serialize_application(application: ApplicationSummary) -> dict[str, object]:
    """Serialize one application summary."""

    return {
        "id": application.application_id,
        "name": application.name,
        "description": application.description,
        "created_time": application.created_at.isoformat() if application.created_at else None,
        "updated_time": application.updated_at.isoformat() if application.updated_at else None,
    }


def service_serialize_form(form: FormSummary) -> dict[str, object]:
    """Serialize one form summary."""

    return {
        "id": form.form_id,
        "name": form.name,
        "description": form.description,
        "created_time": form.created_at.isoformat() if form.created_at else None,
        "updated_time": form.updated_at.isoformat() if form.updated_at else None,
    }


def _service_classified_failure(error: BaseException, context: str) -> FormOperationError:
    classified = classifier_classify_error(error, context)
    logger.warning("%s", classified.message)
    return FormOperationError(classified)


def _service_attach_ambiguity_notice(payload: dict[str, object], resolved: ResolvedForm) -> None:
    if not resolved.resolved_is_ambiguous():
        return
    alternatives = list(resolved.ambiguous_alternatives or ())
    payload["alternatives"] = alternatives
    payload["notice"] = (
        "Multiple forms found under the application; the first form was used. "
        f"Available forms: {', '.join(alternatives)}"
    )


def _service_build_api_error(error: BaseException) -> dict[str, object] | None:
    api_code = getattr(error, "api_code", None)
    response_payload = getattr(error, "response_payload", None)
    if api_code is None and response_payload is None:
        return None
    return {
        "code": api_code,
        "message": getattr(error, "api_message", None),
        "details": response_payload,
    }


def _service_single_or_list(records: list[dict[str, object]], original: object) -> object:
    if isinstance(original, Mapping):
        return records[0]
    return records


def _service_require_text(value: str | None, field_name: str) -> str:
    normalized_value = domain_normalize_optional_text(value)
    if normalized_value is None:
        raise ValueError(f"{field_name} must not be blank")
    return normalized_value
