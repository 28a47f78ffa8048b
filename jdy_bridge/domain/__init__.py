"""Domain models used across application layer boundaries."""

from .models import (
	ApplicationSummary,
	ClassifiedError,
	FieldDescriptor,
	FieldInfo,
	FieldKind,
	FormSummary,
	MappingResult,
	ResolvedForm,
)
from .timeline import domain_build_stage_event, domain_normalize_optional_text, domain_parse_optional_timestamp

__all__ = [
	"ApplicationSummary",
	"ClassifiedError",
	"FieldDescriptor",
	"FieldInfo",
	"FieldKind",
	"FormSummary",
	"MappingResult",
	"ResolvedForm",
	"domain_build_stage_event",
	"domain_normalize_optional_text",
	"domain_parse_optional_timestamp",
]
