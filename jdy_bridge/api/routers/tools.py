"""Tool router exposing form data operations as named JSON tool calls."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from fastapi import APIRouter, Body, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from jdy_bridge.services import FormDataService, FormOperationError


class _ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")

    app_key: str | None = None


class GetFormFieldsArguments(_ToolArguments):
    """Arguments of `get_form_fields`."""

    form_id: str = Field(min_length=1)
    app_id: str | None = None


class SubmitFormDataArguments(_ToolArguments):
    """Arguments of `submit_form_data`."""

    form_id: str = Field(min_length=1)
    data: dict[str, Any] | list[dict[str, Any]]
    app_id: str | None = None
    auto_match: bool = True
    transaction_id: str | None = None
    data_creator: str | None = None
    is_start_workflow: bool | None = None
    is_start_trigger: bool | None = None


class GetFormDataArguments(_ToolArguments):
    """Arguments of `get_form_data`."""

    form_id: str = Field(min_length=1)
    data_id: str = Field(min_length=1)
    app_id: str | None = None


class QueryFormDataArguments(_ToolArguments):
    """Arguments of `query_form_data`."""

    form_id: str = Field(min_length=1)
    app_id: str | None = None
    data_id: str | None = None
    fields: list[str] | None = None
    filter: dict[str, Any] | None = None
    limit: int = Field(default=10, ge=1, le=100)


class UpdateFormDataArguments(_ToolArguments):
    """Arguments of `update_form_data`."""

    form_id: str = Field(min_length=1)
    data_id: str = Field(min_length=1)
    data: dict[str, Any]
    app_id: str | None = None
    auto_match: bool = True
    transaction_id: str | None = None
    is_start_trigger: bool | None = None


class DeleteFormDataArguments(_ToolArguments):
    """Arguments of `delete_form_data`."""

    form_id: str = Field(min_length=1)
    data_ids: str | list[str]
    app_id: str | None = None
    is_start_trigger: bool | None = None


class GetUploadTokenArguments(_ToolArguments):
    """Arguments of `get_upload_token`."""

    form_id: str = Field(min_length=1)
    transaction_id: str = Field(min_length=1)
    app_id: str | None = None


class ListAppsAndFormsArguments(_ToolArguments):
    """Arguments of `list_apps_and_forms`."""

    app_id: str | None = None


@dataclass(frozen=True)
class ToolDefinition:
    """One callable tool.

    Attributes:
        name: Tool name used in the request path.
        description: Human-readable tool summary.
        arguments_model: Pydantic model validating the argument object.
        handler: Function invoking the service with validated arguments.
    """

    name: str
    description: str
    arguments_model: type[_ToolArguments]
    handler: Callable[[FormDataService, Any], dict[str, object]]


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="get_form_fields",
        description="Get the field definitions of a form",
        arguments_model=GetFormFieldsArguments,
        handler=lambda service, arguments: service.service_get_form_fields(
            form_id=arguments.form_id,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
        ),
    ),
    ToolDefinition(
        name="submit_form_data",
        description="Submit one record or a batch of up to 100 records with automatic field matching",
        arguments_model=SubmitFormDataArguments,
        handler=lambda service, arguments: service.service_submit_records(
            form_id=arguments.form_id,
            data=arguments.data,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
            auto_match=arguments.auto_match,
            transaction_id=arguments.transaction_id,
            data_creator=arguments.data_creator,
            is_start_workflow=arguments.is_start_workflow,
            is_start_trigger=arguments.is_start_trigger,
        ),
    ),
    ToolDefinition(
        name="get_form_data",
        description="Get one record by data id",
        arguments_model=GetFormDataArguments,
        handler=lambda service, arguments: service.service_get_record(
            form_id=arguments.form_id,
            data_id=arguments.data_id,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
        ),
    ),
    ToolDefinition(
        name="query_form_data",
        description="Query records with optional field selection, filter, and pagination",
        arguments_model=QueryFormDataArguments,
        handler=lambda service, arguments: service.service_query_records(
            form_id=arguments.form_id,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
            data_id=arguments.data_id,
            fields=arguments.fields,
            filter=arguments.filter,
            limit=arguments.limit,
        ),
    ),
    ToolDefinition(
        name="update_form_data",
        description="Update one record",
        arguments_model=UpdateFormDataArguments,
        handler=lambda service, arguments: service.service_update_record(
            form_id=arguments.form_id,
            data_id=arguments.data_id,
            data=arguments.data,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
            auto_match=arguments.auto_match,
            transaction_id=arguments.transaction_id,
            is_start_trigger=arguments.is_start_trigger,
        ),
    ),
    ToolDefinition(
        name="delete_form_data",
        description="Delete one record or a batch of records",
        arguments_model=DeleteFormDataArguments,
        handler=lambda service, arguments: service.service_delete_records(
            form_id=arguments.form_id,
            data_ids=arguments.data_ids,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
            is_start_trigger=arguments.is_start_trigger,
        ),
    ),
    ToolDefinition(
        name="get_upload_token",
        description="Get file upload tokens bound to a transaction id",
        arguments_model=GetUploadTokenArguments,
        handler=lambda service, arguments: service.service_get_upload_token(
            form_id=arguments.form_id,
            transaction_id=arguments.transaction_id,
            app_id=arguments.app_id,
            app_key=arguments.app_key,
        ),
    ),
    ToolDefinition(
        name="list_apps_and_forms",
        description="List visible applications, or the forms of one application",
        arguments_model=ListAppsAndFormsArguments,
        handler=lambda service, arguments: service.service_list_apps_and_forms(
            app_id=arguments.app_id,
            app_key=arguments.app_key,
        ),
    ),
)


def api_create_tools_router(form_data_service: FormDataService) -> APIRouter:
    """Create tool router with catalog and invocation endpoints.

    Args:
        form_data_service: Service executing form data operations.

    Returns:
        APIRouter: Router exposing `/tools` APIs.

    Raises:
        ValueError: Raised when form_data_service is None.
    """

    if form_data_service is None:
        raise ValueError("form_data_service must not be None")

    tools_by_name = {definition.name: definition for definition in TOOL_DEFINITIONS}
    router = APIRouter(prefix="/tools", tags=["tools"])

    @router.get("")
    def api_tools_list() -> JSONResponse:
        """Return the tool catalog."""

        payload = {
            "tools": [
                {
                    "name": definition.name,
                    "description": definition.description,
                    "arguments_schema": definition.arguments_model.model_json_schema(),
                }
                for definition in TOOL_DEFINITIONS
            ]
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/{tool_name}")
    def api_tools_invoke(
        tool_name: str,
        arguments: dict[str, Any] | None = Body(default=None),
    ) -> JSONResponse:
        """Validate arguments and invoke one tool.

        Args:
            tool_name: Tool name from the catalog.
            arguments: JSON argument object.

        Returns:
            JSONResponse: Tool result, or an error payload with 400, 404, or 502 status.

        Raises:
            RuntimeError: Raised when the service fails unexpectedly.
        """

        definition = tools_by_name.get(tool_name)
        if definition is None:
            payload = {
                "status": "error",
                "message": f"unknown tool: {tool_name}",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)

        try:
            validated_arguments = definition.arguments_model.model_validate(arguments or {})
        except ValidationError as error:
            payload = {
                "status": "error",
                "code": "INVALID_ARGUMENTS",
                "message": f"invalid arguments for tool {tool_name}",
                "details": json.loads(error.json()),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        try:
            result = definition.handler(form_data_service, validated_arguments)
        except FormOperationError as error:
            payload = {
                "status": "error",
                "code": "OPERATION_FAILED",
                **error.classified.classified_as_payload(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_502_BAD_GATEWAY)
        except ValueError as error:
            payload = {
                "status": "error",
                "code": "INVALID_REQUEST",
                "message": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        return JSONResponse(content=jsonable_encoder(result), status_code=status.HTTP_200_OK)

    return router
