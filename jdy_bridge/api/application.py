"""FastAPI application factory for the form bridge."""

from fastapi import FastAPI

from jdy_bridge.config import AppSettings
from jdy_bridge.services import FormDataService

from .routers import api_create_health_router, api_create_tools_router


def create_api_application(
    settings: AppSettings,
    form_data_service: FormDataService,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        form_data_service: Service executing form data operations.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when form_data_service is None.
    """

    if form_data_service is None:
        raise ValueError("form_data_service must not be None")

    application = FastAPI(title="JianDaoYun Form Bridge")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service metadata."""

        return {
            "service": "jiandaoyun-bridge",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(settings=settings))
    application.include_router(api_create_tools_router(form_data_service=form_data_service))

    return application
