"""Diagnostics package for failure classification."""

from .error_classifier import classifier_classify_error

__all__ = ["classifier_classify_error"]
