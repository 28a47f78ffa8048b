"""Project-native typed exceptions for JianDaoYun adapter failures."""

from __future__ import annotations

from typing import Any


class JdyAdapterError(Exception):
    """Base exception for adapter-level JianDaoYun failures.

    Attributes:
        status_code: Optional HTTP status code returned by the upstream API.
        api_code: Optional numeric business error code from the response body.
        api_message: Optional upstream error message (`msg`).
        response_payload: Optional decoded response body for diagnostics.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        api_code: int | None = None,
        api_message: str | None = None,
        response_payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.api_code = api_code
        self.api_message = api_message
        self.response_payload = response_payload


class JdyAdapterConnectionError(JdyAdapterError, ConnectionError):
    """Transport-level connectivity failure during API communication."""


class JdyAdapterTimeoutError(JdyAdapterError, TimeoutError):
    """Transport timeout while waiting for an API response."""


class JdyApiError(JdyAdapterError, RuntimeError):
    """Upstream rejected the request via HTTP status or business error code."""


class JdyResponseContractError(JdyAdapterError, ValueError):
    """Upstream response body did not match the expected JSON contract."""
