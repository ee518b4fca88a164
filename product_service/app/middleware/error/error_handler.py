"""
Error handling middleware for Product Service.
Maps inventory domain exceptions onto standardized JSON error responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.exceptions import (
    AlertNotFound,
    DuplicateAdjustment,
    InventoryError,
    PersistenceError,
    ProductNotFound,
)
from ...utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.error_handler")


class ProductServiceErrorHandler:
    """
    Centralized error handling for Product Service.

    ``ProductNotFound`` and ``AlertNotFound`` become 404, a repeated order
    line 409, storage failures 503; anything else unexpected is logged with
    its traceback and answered with 500.
    """

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type="http_error",
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
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="validation_error",
                message="Request validation failed",
                details={"validation_errors": error_details},
            )

        @app.exception_handler(ProductNotFound)
        async def product_not_found_handler(
            request: Request, exc: ProductNotFound
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=404,
                error_type="product_not_found",
                message=str(exc),
                details={"product_id": exc.product_id},
            )

        @app.exception_handler(AlertNotFound)
        async def alert_not_found_handler(
            request: Request, exc: AlertNotFound
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=404,
                error_type="alert_not_found",
                message=str(exc),
                details={"alert_id": exc.alert_id},
            )

        @app.exception_handler(DuplicateAdjustment)
        async def duplicate_adjustment_handler(
            request: Request, exc: DuplicateAdjustment
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=409,
                error_type="duplicate_adjustment",
                message=str(exc),
            )

        @app.exception_handler(PersistenceError)
        async def persistence_error_handler(
            request: Request, exc: PersistenceError
        ) -> JSONResponse:
            logger.error(
                "Inventory storage failure",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(exc),
                    "operation": "persistence_error",
                },
            )
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=503,
                error_type="persistence_error",
                message="Inventory storage is temporarily unavailable",
            )

        @app.exception_handler(InventoryError)
        async def inventory_error_handler(
            request: Request, exc: InventoryError
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=400,
                error_type="inventory_error",
                message=str(exc),
                details={"exception_type": type(exc).__name__},
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
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="internal_server_error",
                message="An internal server error occurred",
                details={"exception_type": type(exc).__name__},
            )

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


def setup_product_error_handling(app: FastAPI) -> None:
    """Install the Product Service exception handlers on ``app``"""
    ProductServiceErrorHandler.setup_error_handlers(app)
    logger.info(
        "Product Service error handling configured",
        extra={"operation": "error_handler_setup"},
    )
