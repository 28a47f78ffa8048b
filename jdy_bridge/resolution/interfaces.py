"""Typed interfaces for identifier-resolution responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from jdy_bridge.domain import ApplicationSummary, ResolvedForm


class MetadataFailurePolicy(str, Enum):
    """How metadata lookups (application list, field descriptors) degrade on failure."""

    PASSTHROUGH = "passthrough"
    FAIL = "fail"


class FormResolutionError(RuntimeError):
    """Raised when an identifier named an application whose forms could not be resolved.

    Attributes:
        application_id: Matched application id.
        application_name: Matched application display name.
    """

    def __init__(self, message: str, application_id: str, application_name: str):
        super().__init__(message)
        self.application_id = application_id
        self.application_name = application_name


class MetadataUnavailableError(RuntimeError):
    """Raised under the `fail` policy when a metadata lookup cannot be completed."""


@dataclass(frozen=True)
class CacheEntry:
    """One immutable application-list snapshot.

    Attributes:
        applications: Cached applications in listing order.
        fetched_at: Clock reading taken when the snapshot was stored.
        credential_fingerprint: Digest of the API key the snapshot belongs to.
    """

    applications: tuple[ApplicationSummary, ...]
    fetched_at: float
    credential_fingerprint: str


class ApplicationCachePort(Protocol):
    """Port definition for time-bounded application listings."""

    def cache_get_applications(self, app_key: str) -> tuple[ApplicationSummary, ...]:
        """Return applications for an API key, refreshing when absent or expired.

        Args:
            app_key: API key used as bearer credential.

        Returns:
            tuple[ApplicationSummary, ...]: Applications in listing order.

        Raises:
            MetadataUnavailableError: Raised only under the `fail` policy.
        """


class FormResolverPort(Protocol):
    """Port definition for turning loose identifiers into exact form handles."""

    def resolver_resolve_form(self, identifier: str, app_key: str) -> ResolvedForm:
        """Resolve an application id or form handle to a form handle.

        Args:
            identifier: Caller-supplied application id or form handle.
            app_key: API key used as bearer credential.

        Returns:
            ResolvedForm: Resolved handle with optional ambiguity notice.

        Raises:
            FormResolutionError: Raised when a matched application has no usable forms.
        """
