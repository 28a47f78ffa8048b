"""Classification of transport and API failures into actionable diagnoses."""

from __future__ import annotations

from typing import Final

from jdy_bridge.adapters import JDY_FORM_NOT_EXIST_MESSAGE, jdy_error_suggestion
from jdy_bridge.domain import ClassifiedError

_PERMISSION_DENIED_SUGGESTION: Final[str] = "Check the API key permissions and that the form id is correct."
_FORM_MISSING_SUGGESTION: Final[str] = "Check that the form id is correct."
_INVALID_PARAMETERS_SUGGESTION: Final[str] = "Check the request parameters and data format."
_NOT_FOUND_SUGGESTION: Final[str] = "Check that the application, form, and record ids exist."


def classifier_classify_error(error: BaseException, context: str) -> ClassifiedError:
    """Turn one failure into a single message with an optional suggestion.

    Inspection order: HTTP status (403, 400, 404), then the business error
    code table, then a generic fallback built from whatever detail exists.

    Args:
        error: Failure raised by the adapter or the core.
        context: Short description of the attempted operation, e.g. `Submit form data`.

    Returns:
        ClassifiedError: Diagnosis for presentation.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    operation = (context or "").strip() or "Operation"
    status_code = _classifier_optional_int(getattr(error, "status_code", None))
    api_code = _classifier_optional_int(getattr(error, "api_code", None))
    api_message = _classifier_optional_text(getattr(error, "api_message", None))

    if status_code == 403:
        return ClassifiedError(
            message=f"{operation} failed: permission denied",
            suggestion=_PERMISSION_DENIED_SUGGESTION,
        )
    if status_code == 400:
        if api_message == JDY_FORM_NOT_EXIST_MESSAGE:
            return ClassifiedError(
                message=f"{operation} failed: the form does not exist",
                suggestion=_FORM_MISSING_SUGGESTION,
            )
        return ClassifiedError(
            message=f"{operation} failed: {api_message or 'invalid request parameters'}",
            suggestion=jdy_error_suggestion(api_code) or _INVALID_PARAMETERS_SUGGESTION,
        )
    if status_code == 404:
        return ClassifiedError(
            message=f"{operation} failed: resource not found",
            suggestion=_NOT_FOUND_SUGGESTION,
        )

    if api_code is not None:
        suggestion = jdy_error_suggestion(api_code)
        if suggestion is not None:
            return ClassifiedError(
                message=f"{operation} failed: API error {api_code}: {api_message or 'unknown error'}",
                suggestion=suggestion,
            )

    detail = api_message or _classifier_optional_text(str(error)) or "unknown error"
    return ClassifiedError(message=f"{operation} failed: {detail}")


def _classifier_optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _classifier_optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
