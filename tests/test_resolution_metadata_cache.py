"""Regression tests for the time-bounded application-list cache."""

from __future__ import annotations

import pytest

from jdy_bridge.adapters import JdyAdapterConnectionError
from jdy_bridge.domain import ApplicationSummary
from jdy_bridge.resolution import (
    APPLICATION_CACHE_TTL_SECONDS,
    ApplicationListCache,
    MetadataFailurePolicy,
    MetadataUnavailableError,
)


class _FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class _ApplicationListingAdapterStub:
    """Adapter stub counting application-list calls."""

    def __init__(self, applications: tuple[ApplicationSummary, ...], fail: bool = False):
        """Initialize adapter stub.

        Args:
            applications: Applications returned on each call.
            fail: Whether every call raises a connection error.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: This stub does not raise value errors.
        """

        self.applications = applications
        self.fail = fail
        self.calls: list[str] = []

    def adapter_list_applications(self, app_key: str) -> tuple[ApplicationSummary, ...]:
        """Return configured applications or raise the configured failure.

        Args:
            app_key: API key.

        Returns:
            tuple[ApplicationSummary, ...]: Configured applications.

        Raises:
            JdyAdapterConnectionError: Raised when the stub is configured to fail.
        """

        self.calls.append(app_key)
        if self.fail:
            raise JdyAdapterConnectionError("connection refused")
        return self.applications


_APPLICATIONS = (ApplicationSummary(application_id="app-1", name="CRM"),)


def test_resolution_cache_serves_repeat_lookups_within_ttl() -> None:
    """Fetch once and serve repeat lookups from cache until the TTL elapses.

    Returns:
        None: Assertions validate fetch counts around the TTL boundary.

    Raises:
        AssertionError: Raised when cache freshness handling regresses.
    """

    clock = _FakeClock()
    adapter = _ApplicationListingAdapterStub(_APPLICATIONS)
    cache = ApplicationListCache(adapter=adapter, clock=clock)

    assert cache.cache_get_applications(app_key="key") == _APPLICATIONS
    clock.now += APPLICATION_CACHE_TTL_SECONDS - 1
    assert cache.cache_get_applications(app_key="key") == _APPLICATIONS
    assert len(adapter.calls) == 1

    clock.now += 1
    cache.cache_get_applications(app_key="key")
    assert len(adapter.calls) == 2


def test_resolution_cache_misses_for_a_different_credential() -> None:
    """Treat a lookup with another API key as a miss."""

    adapter = _ApplicationListingAdapterStub(_APPLICATIONS)
    cache = ApplicationListCache(adapter=adapter, clock=_FakeClock())

    cache.cache_get_applications(app_key="key-a")
    cache.cache_get_applications(app_key="key-b")

    assert adapter.calls == ["key-a", "key-b"]


def test_resolution_cache_invalidate_forces_refetch() -> None:
    """Refetch after explicit invalidation."""

    adapter = _ApplicationListingAdapterStub(_APPLICATIONS)
    cache = ApplicationListCache(adapter=adapter, clock=_FakeClock())

    cache.cache_get_applications(app_key="key")
    cache.cache_invalidate()
    cache.cache_get_applications(app_key="key")

    assert len(adapter.calls) == 2


def test_resolution_cache_passthrough_policy_returns_empty_and_keeps_slot_empty() -> None:
    """Return an empty listing on failure and retry on the next lookup.

    Returns:
        None: Assertions validate degraded behavior without caching failures.

    Raises:
        AssertionError: Raised when failures are cached or raised.
    """

    adapter = _ApplicationListingAdapterStub(_APPLICATIONS, fail=True)
    cache = ApplicationListCache(adapter=adapter, clock=_FakeClock())

    assert cache.cache_get_applications(app_key="key") == ()
    adapter.fail = False
    assert cache.cache_get_applications(app_key="key") == _APPLICATIONS
    assert len(adapter.calls) == 2


def test_resolution_cache_fail_policy_raises_metadata_unavailable() -> None:
    """Raise MetadataUnavailableError on failure under the `fail` policy."""

    adapter = _ApplicationListingAdapterStub(_APPLICATIONS, fail=True)
    cache = ApplicationListCache(adapter=adapter, failure_policy=MetadataFailurePolicy.FAIL, clock=_FakeClock())

    with pytest.raises(MetadataUnavailableError, match="connection refused"):
        cache.cache_get_applications(app_key="key")
