"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from jdy_bridge.adapters import JianDaoYunWebServiceAdapter
from jdy_bridge.api import create_api_application
from jdy_bridge.config import AppSettings, config_load_settings
from jdy_bridge.mapping import FieldMatcher
from jdy_bridge.resolution import ApplicationListCache, FormResolver, MetadataFailurePolicy
from jdy_bridge.services import FormDataService


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional preloaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    return create_api_application(
        settings=resolved_settings,
        form_data_service=bootstrap_create_form_data_service(settings=resolved_settings),
    )


def bootstrap_create_form_data_service(settings: AppSettings | None = None) -> FormDataService:
    """Build the form data service for HTTP and command-line surfaces.

    Returns:
        FormDataService: Fully wired service instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    failure_policy = MetadataFailurePolicy(resolved_settings.metadata_failure_policy)
    adapter = JianDaoYunWebServiceAdapter(
        base_url=resolved_settings.jiandaoyun_base_url,
        request_timeout_seconds=resolved_settings.jiandaoyun_request_timeout_seconds,
    )
    application_cache = ApplicationListCache(adapter=adapter, failure_policy=failure_policy)
    form_resolver = FormResolver(
        adapter=adapter,
        application_cache=application_cache,
        form_handle_fast_path_enabled=resolved_settings.form_handle_fast_path_enabled,
    )
    field_matcher = FieldMatcher(adapter=adapter, failure_policy=failure_policy)
    return FormDataService(
        adapter=adapter,
        form_resolver=form_resolver,
        field_matcher=field_matcher,
        application_cache=application_cache,
        default_app_key=resolved_settings.jiandaoyun_app_key,
        default_app_id=resolved_settings.jiandaoyun_app_id,
    )


def bootstrap_create_form_resolver(settings: AppSettings | None = None) -> FormResolver:
    """Build a standalone form resolver for command-line lookups.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    adapter = JianDaoYunWebServiceAdapter(
        base_url=resolved_settings.jiandaoyun_base_url,
        request_timeout_seconds=resolved_settings.jiandaoyun_request_timeout_seconds,
    )
    return FormResolver(
        adapter=adapter,
        application_cache=ApplicationListCache(
            adapter=adapter,
            failure_policy=MetadataFailurePolicy(resolved_settings.metadata_failure_policy),
        ),
        form_handle_fast_path_enabled=resolved_settings.form_handle_fast_path_enabled,
    )
