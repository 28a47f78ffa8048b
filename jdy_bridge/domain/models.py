"""Typed domain models shared across runtime layers.

These value objects carry form-platform metadata and resolution outcomes
between the adapter, resolution, mapping, and service layers. All of them
are frozen; nothing here is mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class FieldKind(str, Enum):
    """Normalized field kinds exposed for form widgets."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    SERIAL_NO = "serial_no"
    ADDRESS = "address"
    LOCATION = "location"
    IMAGE = "image"
    FILE = "file"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    USER = "user"
    DEPT = "dept"
    SUBFORM = "subform"
    FORMULA = "formula"
    PHONE = "phone"


@dataclass(frozen=True)
class ApplicationSummary:
    """Read-only snapshot of one remote application.

    Attributes:
        application_id: Backend application identifier.
        name: Application display name.
        description: Optional application description.
        created_at: Optional creation timestamp.
        updated_at: Optional last-update timestamp.
    """

    application_id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class FormSummary:
    """Read-only snapshot of one form listed under an application.

    Attributes:
        form_id: Backend form handle.
        name: Form display name.
        description: Optional form description.
        created_at: Optional creation timestamp.
        updated_at: Optional last-update timestamp.
    """

    form_id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def form_display_label(self) -> str:
        """Return the `name (id)` label used in ambiguity notices."""

        return f"{self.name} ({self.form_id})"


@dataclass(frozen=True)
class FieldDescriptor:
    """Backend metadata for one form field.

    Sub-form descriptors carry their child fields in `sub_fields`, which makes
    this type a tree mirroring the nested form structure.

    Attributes:
        key: Backend field key (widget name).
        label: Human-facing field label.
        kind: Normalized field kind.
        required: Whether the backend marks this field as required.
        sub_fields: Child descriptors for sub-form fields, else empty.
    """

    key: str
    label: str
    kind: FieldKind
    required: bool = False
    sub_fields: tuple[FieldDescriptor, ...] = ()


@dataclass(frozen=True)
class ResolvedForm:
    """Result contract of form identifier resolution.

    Attributes:
        form_handle: Exact backend form handle to use for data operations.
        application_id: Application id when the identifier named an application.
        ambiguous_alternatives: `name (id)` labels of every form under the
            application when more than one exists, in listing order.
    """

    form_handle: str
    application_id: str | None = None
    ambiguous_alternatives: tuple[str, ...] | None = None

    def resolved_is_ambiguous(self) -> bool:
        """Return whether resolution picked a default among several forms."""

        return bool(self.ambiguous_alternatives)


@dataclass(frozen=True)
class FieldInfo:
    """Flat field summary returned for caller-side introspection.

    Attributes:
        key: Backend field key.
        label: Field label.
        kind: Normalized field kind.
        required: Required flag.
    """

    key: str
    label: str
    kind: FieldKind
    required: bool

    def field_info_as_payload(self) -> dict[str, object]:
        """Serialize into a JSON-compatible dictionary."""

        return {"key": self.key, "label": self.label, "type": self.kind.value, "required": self.required}


@dataclass(frozen=True)
class MappingResult:
    """Output of one field-mapping call.

    Attributes:
        mapped_record: Record rekeyed to backend field keys where a match was found.
        field_info: Flat summary of every descriptor of the target form.
    """

    mapped_record: dict[str, object]
    field_info: tuple[FieldInfo, ...]


@dataclass(frozen=True)
class ClassifiedError:
    """Human-readable failure diagnosis.

    Attributes:
        message: Diagnosis text.
        suggestion: Optional remediation hint.
    """

    message: str
    suggestion: str | None = None

    def classified_as_payload(self) -> dict[str, object]:
        """Serialize into a JSON-compatible dictionary."""

        payload: dict[str, object] = {"message": self.message}
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion
        return payload
