"""Typed interfaces for form data operation services."""

from __future__ import annotations

from jdy_bridge.domain import ClassifiedError


class FormOperationError(RuntimeError):
    """Classified failure of one form data operation.

    Attributes:
        classified: Diagnosis with message and optional suggestion.
    """

    def __init__(self, classified: ClassifiedError):
        super().__init__(classified.message)
        self.classified = classified


class MissingCredentialError(ValueError):
    """Raised when neither the call nor the settings provide a required credential."""
