"""Form identifier resolution for application ids and form handles."""

from __future__ import annotations

import logging
import re
from typing import Final

from jdy_bridge.adapters import JdyAdapterError, JianDaoYunAdapterPort
from jdy_bridge.domain import ResolvedForm

from .interfaces import ApplicationCachePort, FormResolutionError, FormResolverPort

logger = logging.getLogger(__name__)

FORM_HANDLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[0-9a-fA-F]{24}$")


def resolver_looks_like_form_handle(identifier: str) -> bool:
    """Return whether an identifier has the lexical shape of a backend form handle.

    Args:
        identifier: Candidate identifier.

    Returns:
        bool: True for 24-character hexadecimal strings.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return FORM_HANDLE_PATTERN.fullmatch(identifier) is not None


class FormResolver(FormResolverPort):
    """Resolve caller identifiers to exact form handles.

    Identifiers shaped like form handles are trusted as-is. Anything else is
    looked up as an application id; a matched application contributes its
    first listed form, with the full listing reported as alternatives when
    it owns more than one. Unknown identifiers pass through unchanged so the
    data call itself reports the problem.
    """

    def __init__(
        self,
        adapter: JianDaoYunAdapterPort,
        application_cache: ApplicationCachePort,
        form_handle_fast_path_enabled: bool = True,
    ):
        """Initialize form resolver dependencies.

        Args:
            adapter: Remote API adapter used for form listings.
            application_cache: Cache consulted for application listings.
            form_handle_fast_path_enabled: Whether handle-shaped identifiers skip remote lookups.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if adapter is None:
            raise ValueError("adapter must not be None")
        if application_cache is None:
            raise ValueError("application_cache must not be None")

        self._adapter = adapter
        self._application_cache = application_cache
        self._form_handle_fast_path_enabled = form_handle_fast_path_enabled

    def resolver_resolve_form(self, identifier: str, app_key: str) -> ResolvedForm:
        """Resolve an application id or form handle to a form handle.

        Args:
            identifier: Caller-supplied application id or form handle.
            app_key: API key used as bearer credential.

        Returns:
            ResolvedForm: Resolved handle with optional application id and alternatives.

        Raises:
            ValueError: Raised when identifier is blank.
            FormResolutionError: Raised when a matched application has no forms or
                its form listing could not be fetched.
        """

        normalized_identifier = identifier.strip()
        if not normalized_identifier:
            raise ValueError("identifier must not be blank")

        if self._form_handle_fast_path_enabled and resolver_looks_like_form_handle(normalized_identifier):
            return ResolvedForm(form_handle=normalized_identifier)

        applications = self._application_cache.cache_get_applications(app_key=app_key)
        matched_application = next(
            (application for application in applications if application.application_id == normalized_identifier),
            None,
        )
        if matched_application is None:
            logger.debug("Identifier %s is not a known application; using it as a form handle", normalized_identifier)
            return ResolvedForm(form_handle=identifier)

        try:
            forms = self._adapter.adapter_list_forms(app_key=app_key, app_id=matched_application.application_id)
        except JdyAdapterError as error:
            raise FormResolutionError(
                f'Unable to list forms of application "{matched_application.name}": {error}',
                application_id=matched_application.application_id,
                application_name=matched_application.name,
            ) from error

        if not forms:
            raise FormResolutionError(
                f'Application "{matched_application.name}" has no available forms',
                application_id=matched_application.application_id,
                application_name=matched_application.name,
            )

        if len(forms) == 1:
            return ResolvedForm(form_handle=forms[0].form_id, application_id=matched_application.application_id)

        alternatives = tuple(form.form_display_label() for form in forms)
        logger.info(
            "Application %s owns %d forms; defaulting to %s",
            matched_application.application_id,
            len(forms),
            forms[0].form_id,
        )
        return ResolvedForm(
            form_handle=forms[0].form_id,
            application_id=matched_application.application_id,
            ambiguous_alternatives=alternatives,
        )
