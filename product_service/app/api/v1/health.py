from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from ...core.event_management import health_check_events
from ...core.setting import get_settings
from ...utils.service_health import ProductServiceHealthChecker

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health check for the product service database and event bus"""
    settings = get_settings()
    app = request.app

    async def database_check() -> bool:
        async with app.state.database_manager.async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        return True

    async def event_bus_check() -> bool:
        return await health_check_events(app)

    checker = ProductServiceHealthChecker(settings.SERVICE_NAME, settings.APP_VERSION)
    checker.add_check("database", database_check)
    checker.add_check("event_bus", event_bus_check, required=False)
    report = await checker.run_checks()

    if report["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=report)
    return report
