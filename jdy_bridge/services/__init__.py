"""Service layer package for form data operations."""

from .form_data_service import QUERY_LIMIT_MAX, FormDataService, service_normalize_records
from .interfaces import FormOperationError, MissingCredentialError

__all__ = [
	"FormDataService",
	"FormOperationError",
	"MissingCredentialError",
	"QUERY_LIMIT_MAX",
	"service_normalize_records",
]
