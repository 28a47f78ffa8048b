"""Regression tests for centralized JianDaoYun error-code semantics."""

from __future__ import annotations

from jdy_bridge.adapters.jdy_error_codes import (
    JDY_ERROR_SUGGESTIONS,
    JdyErrorCode,
    jdy_error_suggestion,
)


def test_adapters_jdy_error_codes_every_known_code_has_suggestion() -> None:
    """Ensure each enumerated code owns a remediation suggestion.

    Args:
        None: This test uses module-level constants only.

    Returns:
        None: Assertions validate suggestion table coverage.

    Raises:
        AssertionError: Raised when a known code lacks a suggestion.
    """

    assert set(JDY_ERROR_SUGGESTIONS) == {error_code.value for error_code in JdyErrorCode}


def test_adapters_jdy_error_codes_known_suggestion_and_unknown_fallback() -> None:
    """Resolve suggestions for known codes and None for unknown or absent codes."""

    assert jdy_error_suggestion(3005) is not None
    assert "form id" in (jdy_error_suggestion(3000) or "")
    assert jdy_error_suggestion(JdyErrorCode.SUBMISSION_REJECTED) is not None
    assert jdy_error_suggestion(9999) is None
    assert jdy_error_suggestion(None) is None
