"""Health endpoint router composition."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from jdy_bridge.config import AppSettings


def api_create_health_router(settings: AppSettings) -> APIRouter:
    """Create health-check router reporting liveness and credential readiness.

    Args:
        settings: Validated application settings.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when settings is None.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application liveness; no remote call is made."""

        payload = {
            "status": "ok",
            "app": "up",
            "default_app_key_configured": settings.jiandaoyun_app_key is not None,
            "default_app_id_configured": settings.jiandaoyun_app_id is not None,
            "target": settings.jiandaoyun_base_url,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
