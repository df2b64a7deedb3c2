"""Трансляция исключений в единый формат ответа {success: false, ...}."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from product_catalog.core.exceptions import ProductCatalogError

logger = logging.getLogger(__name__)


def _error_field(location: tuple[int | str, ...]) -> str:
    # ("body", "price") -> "price", ("path", "product_id") -> "product_id"
    parts = [str(part) for part in location if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI, expose_errors: bool) -> None:
    """
    Регистрирует обработчики ошибок приложения.

    Args:
        app: Приложение FastAPI.
        expose_errors: Отдавать ли текст внутренних ошибок клиенту
                       (только в режиме разработки).
    """

    @app.exception_handler(ProductCatalogError)
    async def handle_catalog_error(
        request: Request, exc: ProductCatalogError
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"field": _error_field(tuple(error["loc"])), "message": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                {"success": False, "message": "Invalid request", "errors": errors}
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Неизвестный путь и неподдерживаемый метод отвечают одинаково
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND,
            status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"success": False, "message": "Route not found"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        # 🛡️ Логируем полную информацию об ошибке, клиенту - только общий текст
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path
        )
        content = {"success": False, "message": "Internal server error"}
        if expose_errors:
            content["error"] = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
        )
