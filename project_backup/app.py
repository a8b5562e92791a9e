"""
FastAPI application entry point for the project backup API.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from project_backup.config import get_settings
from project_backup.errors import BackupRequestError
from project_backup.routes import project_method_not_allowed, router
from project_backup.schemas import ErrorResponse

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
SERVER_ERROR_MESSAGE = "서버 오류가 발생했습니다."
INVALID_REQUEST_MESSAGE = "잘못된 요청 형식입니다."


def install_cors_and_error_handling(app: FastAPI) -> None:
    """
    Attach CORS headers to every response and turn unexpected exceptions
    into a generic 500 body.
    """

    @app.middleware("http")
    async def cors_and_server_errors(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error on %s %s", request.method, request.url.path
            )
            response = JSONResponse(
                status_code=500,
                content=ErrorResponse(error=SERVER_ERROR_MESSAGE).model_dump(),
            )
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Project Backup API", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)

    @app.exception_handler(BackupRequestError)
    async def handle_backup_request_error(request: Request, exc: BackupRequestError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message).model_dump(),
        )

    project_path = f"{settings.api_prefix}/project"

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405 and request.url.path == project_path:
            return project_method_not_allowed(request)
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.info("Invalid request on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=INVALID_REQUEST_MESSAGE).model_dump(),
        )

    install_cors_and_error_handling(app)
    return app


app = create_app()


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )
    logger.info("Serving project backup API on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
