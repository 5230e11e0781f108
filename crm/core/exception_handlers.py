"""Register exception handlers that render every error as {statusCode, message, error}."""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from crm.core.exceptions import ApiError, InfrastructureError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error_body(status_code: int, message: str | list[str], error: str | None = None) -> dict:
    return {
        "statusCode": status_code,
        "message": message,
        "error": error or HTTPStatus(status_code).phrase,
    }


def format_validation_errors(errors: list[dict]) -> list[str]:
    """Turn pydantic error dicts into 'field: reason' strings."""
    messages = []
    for error in errors:
        # Drop the leading "body"/"query"/"path" location segment.
        loc = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(loc) if loc else str(error.get("loc", ("request",))[0])
        messages.append(f"{field}: {error.get('msg', 'Invalid value')}")
    return messages


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.message, exc.error),
        headers=headers,
    )


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=_error_body(400, format_validation_errors(list(exc.errors()))),
    )


async def http_error_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def infrastructure_error_handler(
    request: Request,
    exc: InfrastructureError,
) -> JSONResponse:
    logger.error(
        "Infrastructure failure on %s %s: %s",
        request.method,
        request.url.path,
        exc.message,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=_error_body(500, INTERNAL_ERROR_MESSAGE))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=_error_body(500, INTERNAL_ERROR_MESSAGE))


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
