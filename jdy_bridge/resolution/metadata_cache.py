"""Time-bounded in-memory cache of application listings."""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Callable, Final

from jdy_bridge.adapters import JdyAdapterError, JianDaoYunAdapterPort
from jdy_bridge.domain import ApplicationSummary

from .interfaces import ApplicationCachePort, CacheEntry, MetadataFailurePolicy, MetadataUnavailableError

logger = logging.getLogger(__name__)

APPLICATION_CACHE_TTL_SECONDS: Final[float] = 300.0


class ApplicationListCache(ApplicationCachePort):
    """Single-slot application-list cache with a fixed five-minute TTL.

    The slot holds one `CacheEntry` that is replaced wholesale on refresh.
    There is no locking: concurrent misses may each fetch, and the last
    writer wins.
    """

    def __init__(
        self,
        adapter: JianDaoYunAdapterPort,
        failure_policy: MetadataFailurePolicy = MetadataFailurePolicy.PASSTHROUGH,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize the application cache.

        Args:
            adapter: Remote API adapter used on cache misses.
            failure_policy: Behavior when the application listing fails.
            clock: Optional monotonic clock provider returning seconds.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when adapter is None.
        """

        if adapter is None:
            raise ValueError("adapter must not be None")

        self._adapter = adapter
        self._failure_policy = MetadataFailurePolicy(failure_policy)
        self._clock = clock or time.monotonic
        self._entry: CacheEntry | None = None

    def cache_get_applications(self, app_key: str) -> tuple[ApplicationSummary, ...]:
        """Return cached applications, fetching once on a miss or after expiry.

        Args:
            app_key: API key used as bearer credential.

        Returns:
            tuple[ApplicationSummary, ...]: Applications in listing order; empty
            when the listing failed under the `passthrough` policy.

        Raises:
            MetadataUnavailableError: Raised when the listing failed under the `fail` policy.
        """

        fingerprint = _cache_fingerprint_credential(app_key)
        now = self._clock()
        entry = self._entry
        if entry is not None and entry.credential_fingerprint == fingerprint:
            if now - entry.fetched_at < APPLICATION_CACHE_TTL_SECONDS:
                return entry.applications

        try:
            applications = self._adapter.adapter_list_applications(app_key=app_key)
        except JdyAdapterError as error:
            if self._failure_policy is MetadataFailurePolicy.FAIL:
                raise MetadataUnavailableError(f"Failed to fetch application list: {error}") from error
            logger.warning("Failed to fetch application list; continuing without it: %s", error)
            return ()

        self._entry = CacheEntry(applications=applications, fetched_at=now, credential_fingerprint=fingerprint)
        logger.info("Application list cache refreshed with %d application(s)", len(applications))
        return applications

    def cache_invalidate(self) -> None:
        """Drop the cached entry so the next lookup fetches again."""

        self._entry = None


def _cache_fingerprint_credential(app_key: str) -> str:
    return hashlib.sha256(app_key.strip().encode("utf-8")).hexdigest()
