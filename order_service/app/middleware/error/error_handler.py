"""
Error handling middleware for Order Service.

Every error is answered as ``{"error": {"type", "message", "timestamp",
"path", "method", "details"?}}``. Errors raised by the order endpoints carry
an order-specific ``type``:

- 400 ``invalid_order``: too many lines or a line quantity over the limit
- 404 ``order_not_found``: no order with the requested id
- 500 ``order_persistence_error``: the order could not be stored; nothing
  was published

Other HTTP errors use ``http_error``, malformed request bodies
``validation_error`` (422) and unexpected exceptions ``internal_server_error``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...utils.logging import setup_order_logging

logger = setup_order_logging("order_service.error_handler")

ORDER_ROUTES_PREFIX = "/api/v1/orders"

ORDER_ERROR_TYPES: Dict[int, str] = {
    400: "invalid_order",
    404: "order_not_found",
    500: "order_persistence_error",
}


class OrderServiceErrorHandler:
    """Centralized error handling for Order Service."""

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            return OrderServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type=OrderServiceErrorHandler._http_error_type(request, exc),
                message=str(exc.detail),
            )

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(
            request: Request, exc: RequestValidationError
        ) -> JSONResponse:
            error_details = [
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
                for error in exc.errors()
            ]
            return OrderServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="validation_error",
                message="Request validation failed",
                details={"validation_errors": error_details},
            )

        @app.exception_handler(Exception)
        async def unhandled_exception_handler(
            request: Request, exc: Exception
        ) -> JSONResponse:
            logger.error(
                "Unhandled exception occurred",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                    "operation": "unhandled_exception",
                },
                exc_info=True,
            )
            return OrderServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="internal_server_error",
                message="An internal server error occurred",
                details={"exception_type": type(exc).__name__},
            )

    @staticmethod
    def _http_error_type(request: Request, exc: StarletteHTTPException) -> str:
        if request.url.path.startswith(ORDER_ROUTES_PREFIX):
            return ORDER_ERROR_TYPES.get(exc.status_code, "http_error")
        return "http_error"

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        error_response: Dict[str, Any] = {
            "error": {
                "type": error_type,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        }
        if details:
            error_response["error"]["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "status_code": status_code,
                    "error_type": error_type,
                    "path": request.url.path,
                    "method": request.method,
                    "operation": "client_error",
                },
            )

        return JSONResponse(status_code=status_code, content=error_response)


def setup_order_error_handling(app: FastAPI) -> None:
    """Install the Order Service exception handlers on ``app``"""
    OrderServiceErrorHandler.setup_error_handlers(app)
