"""Canonical JianDaoYun API error-code semantics for failure classification."""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class JdyErrorCode(IntEnum):
    """Known JianDaoYun business error codes with tailored remediation."""

    FORM_NOT_FOUND = 3000
    INVALID_PARAMETERS = 3005
    SUBMISSION_REJECTED = 4000


JDY_FORM_NOT_EXIST_MESSAGE: Final[str] = "The form does not exist."

JDY_ERROR_SUGGESTIONS: Final[dict[int, str]] = {
    JdyErrorCode.INVALID_PARAMETERS.value: (
        "Request parameters are invalid. Check the form id, field names, and data format."
    ),
    JdyErrorCode.FORM_NOT_FOUND.value: "The form does not exist. Check that the form id is correct.",
    JdyErrorCode.SUBMISSION_REJECTED.value: (
        "Data submission failed. Check that field values satisfy the form requirements."
    ),
}


def jdy_error_suggestion(api_code: int | None) -> str | None:
    """Return the remediation suggestion for a known API error code.

    Args:
        api_code: Upstream business error code.

    Returns:
        str | None: Suggestion for known codes, else None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if api_code is None:
        return None
    return JDY_ERROR_SUGGESTIONS.get(int(api_code))
