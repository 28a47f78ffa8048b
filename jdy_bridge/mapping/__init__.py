"""Mapping layer package for field rekeying and submission formatting."""

from .field_matcher import (
	DEFAULT_MATCHER_STRATEGIES,
	FIELD_SYNONYMS,
	FieldMatcher,
	MatcherStrategy,
	matcher_find_field,
	matcher_flatten_field_info,
	matcher_match_exact_key,
	matcher_match_exact_label,
	matcher_match_label_containment,
	matcher_match_synonym,
)
from .formatter import (
	SUBMISSION_BATCH_LIMIT,
	BatchLimitExceededError,
	formatter_classify_value,
	formatter_format_date,
	formatter_format_record,
	formatter_format_value,
	formatter_validate_batch_size,
)
from .interfaces import (
	DateValue,
	FieldMappingError,
	FieldMatcherPort,
	FieldValue,
	NestedRecordListValue,
	NestedRecordValue,
	ScalarValue,
	WrappedValue,
)

__all__ = [
	"BatchLimitExceededError",
	"DEFAULT_MATCHER_STRATEGIES",
	"DateValue",
	"FIELD_SYNONYMS",
	"FieldMappingError",
	"FieldMatcher",
	"FieldMatcherPort",
	"FieldValue",
	"MatcherStrategy",
	"NestedRecordListValue",
	"NestedRecordValue",
	"SUBMISSION_BATCH_LIMIT",
	"ScalarValue",
	"WrappedValue",
	"formatter_classify_value",
	"formatter_format_date",
	"formatter_format_record",
	"formatter_format_value",
	"formatter_validate_batch_size",
	"matcher_find_field",
	"matcher_flatten_field_info",
	"matcher_match_exact_key",
	"matcher_match_exact_label",
	"matcher_match_label_containment",
	"matcher_match_synonym",
]
