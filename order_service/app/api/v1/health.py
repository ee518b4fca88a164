from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from ...core.events import health_check_events
from ...core.setting import get_settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Database is required; the event bus may run degraded"""
    settings = get_settings()
    checks: Dict[str, str] = {}

    try:
        async with request.app.state.database_manager.async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"error: {e}"

    events_ok = await health_check_events(request.app)
    checks["event_bus"] = "healthy" if events_ok else "unhealthy"

    if checks["database"] != "healthy":
        overall = "unhealthy"
    elif not events_ok:
        overall = "degraded"
    else:
        overall = "healthy"

    report = {
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "status": overall,
        "checks": checks,
    }
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=report)
    return report
