"""Heuristic mapping of caller field names onto backend field keys."""

from __future__ import annotations

import logging
from typing import Any, Callable, Final, Mapping, Sequence

from jdy_bridge.adapters import JdyAdapterError, JianDaoYunAdapterPort
from jdy_bridge.domain import FieldDescriptor, FieldInfo, FieldKind, MappingResult
from jdy_bridge.resolution import MetadataFailurePolicy

from .interfaces import FieldMappingError

logger = logging.getLogger(__name__)

MatcherStrategy = Callable[[str, Sequence[FieldDescriptor]], FieldDescriptor | None]

FIELD_SYNONYMS: Final[dict[str, tuple[str, ...]]] = {
    "name": ("name", "username", "用户名", "姓名"),
    "phone": ("phone", "tel", "mobile", "手机", "电话"),
    "email": ("email", "mail", "邮件", "邮箱"),
    "address": ("address", "地址", "住址"),
    "remark": ("remark", "note", "comment", "备注", "说明"),
}


def matcher_match_exact_label(key: str, descriptors: Sequence[FieldDescriptor]) -> FieldDescriptor | None:
    """Return the first field whose label equals the key."""

    return next((descriptor for descriptor in descriptors if descriptor.label == key), None)


def matcher_match_label_containment(key: str, descriptors: Sequence[FieldDescriptor]) -> FieldDescriptor | None:
    """Return the first field whose label contains the key or is contained in it.

    Blank keys and blank labels never qualify.
    """

    if not key:
        return None
    for descriptor in descriptors:
        if not descriptor.label:
            continue
        if key in descriptor.label or descriptor.label in key:
            return descriptor
    return None


def matcher_match_exact_key(key: str, descriptors: Sequence[FieldDescriptor]) -> FieldDescriptor | None:
    """Return the first field whose backend key equals the key."""

    return next((descriptor for descriptor in descriptors if descriptor.key == key), None)


def matcher_match_synonym(key: str, descriptors: Sequence[FieldDescriptor]) -> FieldDescriptor | None:
    """Match through the bilingual synonym table.

    When the key names a concept (or one of its spellings), the first field
    whose label or key contains any spelling of that concept wins. Comparison
    is case-insensitive.

    Args:
        key: Caller-supplied field name.
        descriptors: Target form descriptors in declaration order.

    Returns:
        FieldDescriptor | None: Matched field, else None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    folded_key = key.casefold()
    for concept, spellings in FIELD_SYNONYMS.items():
        folded_spellings = tuple(spelling.casefold() for spelling in spellings)
        if folded_key != concept and folded_key not in folded_spellings:
            continue
        for descriptor in descriptors:
            folded_label = descriptor.label.casefold()
            folded_field_key = descriptor.key.casefold()
            if any(spelling in folded_label or spelling in folded_field_key for spelling in folded_spellings):
                return descriptor
    return None


DEFAULT_MATCHER_STRATEGIES: Final[tuple[MatcherStrategy, ...]] = (
    matcher_match_exact_label,
    matcher_match_label_containment,
    matcher_match_exact_key,
    matcher_match_synonym,
)


def matcher_find_field(
    key: str,
    descriptors: Sequence[FieldDescriptor],
    strategies: Sequence[MatcherStrategy] = DEFAULT_MATCHER_STRATEGIES,
) -> FieldDescriptor | None:
    """Run the strategy cascade and return the first match.

    Args:
        key: Caller-supplied field name.
        descriptors: Target form descriptors in declaration order.
        strategies: Ordered matcher strategies.

    Returns:
        FieldDescriptor | None: Field chosen by the first strategy that matched.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for strategy in strategies:
        matched_descriptor = strategy(key, descriptors)
        if matched_descriptor is not None:
            return matched_descriptor
    return None


def matcher_flatten_field_info(descriptors: Sequence[FieldDescriptor]) -> tuple[FieldInfo, ...]:
    """Flatten a descriptor tree depth-first, sub-form fields after their parent."""

    field_info: list[FieldInfo] = []
    for descriptor in descriptors:
        field_info.append(
            FieldInfo(
                key=descriptor.key,
                label=descriptor.label,
                kind=descriptor.kind,
                required=descriptor.required,
            )
        )
        field_info.extend(matcher_flatten_field_info(descriptor.sub_fields))
    return tuple(field_info)


class FieldMatcher:
    """Rekey caller records onto backend field keys for one form."""

    def __init__(
        self,
        adapter: JianDaoYunAdapterPort,
        failure_policy: MetadataFailurePolicy = MetadataFailurePolicy.PASSTHROUGH,
        strategies: Sequence[MatcherStrategy] = DEFAULT_MATCHER_STRATEGIES,
    ):
        """Initialize field matcher dependencies.

        Args:
            adapter: Remote API adapter used for descriptor fetches.
            failure_policy: Behavior when descriptors cannot be fetched.
            strategies: Ordered matcher strategies.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when adapter is None or no strategies are configured.
        """

        if adapter is None:
            raise ValueError("adapter must not be None")
        if not strategies:
            raise ValueError("strategies must not be empty")

        self._adapter = adapter
        self._failure_policy = MetadataFailurePolicy(failure_policy)
        self._strategies = tuple(strategies)

    def matcher_fetch_descriptors(
        self,
        form_handle: str,
        app_key: str,
        application_id: str | None = None,
    ) -> tuple[FieldDescriptor, ...]:
        """Fetch descriptors for one form; never cached.

        Raises:
            JdyAdapterError: Raised on transport or API failures.
        """

        return self._adapter.adapter_list_fields(app_key=app_key, form_id=form_handle, app_id=application_id)

    def matcher_map_fields(
        self,
        form_handle: str,
        record: Mapping[str, Any],
        app_key: str,
        application_id: str | None = None,
    ) -> MappingResult:
        """Map one caller record onto backend field keys.

        Args:
            form_handle: Resolved form handle.
            record: Caller record keyed by loose field names.
            app_key: API key used as bearer credential.
            application_id: Optional owning application id.

        Returns:
            MappingResult: Rekeyed record and flat field summary. When the
            descriptor fetch fails under the `passthrough` policy, the original
            record and an empty summary.

        Raises:
            FieldMappingError: Raised when descriptors cannot be fetched under the `fail` policy.
        """

        return self.matcher_map_batch(
            form_handle=form_handle,
            records=[record],
            app_key=app_key,
            application_id=application_id,
        )[0]

    def matcher_map_batch(
        self,
        form_handle: str,
        records: Sequence[Mapping[str, Any]],
        app_key: str,
        application_id: str | None = None,
    ) -> tuple[MappingResult, ...]:
        """Map several records of one submission with a single descriptor fetch.

        Args:
            form_handle: Resolved form handle.
            records: Caller records keyed by loose field names.
            app_key: API key used as bearer credential.
            application_id: Optional owning application id.

        Returns:
            tuple[MappingResult, ...]: One result per record, in input order.

        Raises:
            FieldMappingError: Raised when descriptors cannot be fetched under the `fail` policy.
        """

        try:
            descriptors = self.matcher_fetch_descriptors(
                form_handle=form_handle,
                app_key=app_key,
                application_id=application_id,
            )
        except JdyAdapterError as error:
            if self._failure_policy is MetadataFailurePolicy.FAIL:
                raise FieldMappingError(f"Failed to fetch fields of form {form_handle}: {error}") from error
            logger.warning("Field mapping skipped for form %s; using original keys: %s", form_handle, error)
            return tuple(MappingResult(mapped_record=dict(record), field_info=()) for record in records)

        field_info = matcher_flatten_field_info(descriptors)
        return tuple(
            MappingResult(mapped_record=self.matcher_rekey_record(record, descriptors), field_info=field_info)
            for record in records
        )

    def matcher_rekey_record(
        self,
        record: Mapping[str, Any],
        descriptors: Sequence[FieldDescriptor],
    ) -> dict[str, object]:
        """Rekey a record against already fetched descriptors.

        Sub-form rows are rekeyed against the matched sub-form's own fields.
        Unmatched keys are kept as-is.

        Args:
            record: Caller record keyed by loose field names.
            descriptors: Descriptors to match against, in declaration order.

        Returns:
            dict[str, object]: Rekeyed record.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        mapped_record: dict[str, object] = {}
        for user_key, value in record.items():
            matched_descriptor = matcher_find_field(user_key, descriptors, self._strategies)
            if matched_descriptor is None:
                logger.debug('Field "%s" not mapped; keeping original key', user_key)
                mapped_record[user_key] = value
                continue

            logger.debug(
                'Field "%s" mapped to "%s" (%s)',
                user_key,
                matched_descriptor.key,
                matched_descriptor.label,
            )
            mapped_record[matched_descriptor.key] = self._matcher_rekey_sub_rows(matched_descriptor, value)
        return mapped_record

    def _matcher_rekey_sub_rows(self, descriptor: FieldDescriptor, value: Any) -> Any:
        if descriptor.kind is not FieldKind.SUBFORM or not descriptor.sub_fields:
            return value
        if not isinstance(value, list) or not value or not isinstance(value[0], Mapping):
            return value
        return [
            self.matcher_rekey_record(row, descriptor.sub_fields) if isinstance(row, Mapping) else row
            for row in value
        ]
