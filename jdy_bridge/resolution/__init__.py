"""Resolution layer package for application and form identifier lookups."""

from .form_resolver import FORM_HANDLE_PATTERN, FormResolver, resolver_looks_like_form_handle
from .interfaces import (
	ApplicationCachePort,
	CacheEntry,
	FormResolutionError,
	FormResolverPort,
	MetadataFailurePolicy,
	MetadataUnavailableError,
)
from .metadata_cache import APPLICATION_CACHE_TTL_SECONDS, ApplicationListCache

__all__ = [
	"APPLICATION_CACHE_TTL_SECONDS",
	"ApplicationCachePort",
	"ApplicationListCache",
	"CacheEntry",
	"FORM_HANDLE_PATTERN",
	"FormResolutionError",
	"FormResolver",
	"FormResolverPort",
	"MetadataFailurePolicy",
	"MetadataUnavailableError",
	"resolver_looks_like_form_handle",
]
