from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from typing import Dict, Any

from chaktrang.core.exceptions.base import StorageUnavailableError
from chaktrang.core.logger.logger import logger
from chaktrang.infra.config.settings import settings

router = APIRouter(tags=["Health"])


async def check_storage_health(request: Request) -> Dict[str, Any]:
    """Check account store connectivity."""
    store = request.app.state.account_store
    try:
        await store.ping()
        return {"status": "healthy", "backend": store.backend_name}
    except StorageUnavailableError as e:
        logger.warning("Storage health check failed", extra={"backend": store.backend_name})
        return {"status": "unhealthy", "backend": store.backend_name, "message": e.context.get("reason")}


def check_security(request: Request) -> Dict[str, Any]:
    """Flag configuration that is unsafe to run in production."""
    uses_default_key = request.app.state.session_issuer.uses_default_key
    security = {"default_signing_key": uses_default_key}
    if uses_default_key:
        security["warning"] = "JWT_SECRET_KEY is not set; tokens are signed with the public default key"
    return security


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint.
    Answers 503 when the account store cannot be reached.
    """
    storage = await check_storage_health(request)
    overall = "ok" if storage["status"] == "healthy" else "degraded"

    body = {
        "status": overall,
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "services": {"storage": storage},
        "security": check_security(request),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
    code = status.HTTP_200_OK if overall == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
