"""
Exception handlers that turn errors into the JSON error body
``{"detail", "code", "errors"?}``.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookburst.core.exceptions import APIException
from bookburst.logging.setup import get_logger

logger = get_logger("bookburst.errors")

_DEFAULT_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle HTTP exceptions, including the application's APIException family.
    """
    if isinstance(exc, APIException):
        content = exc.to_response()
    else:
        content = {
            "detail": str(exc.detail),
            "code": _DEFAULT_CODES.get(exc.status_code, "http_error"),
        }

    log_data = {
        "path": request.url.path,
        "method": request.method,
        "status_code": exc.status_code,
    }
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} Error: {content['detail']}", extra=log_data)
    else:
        logger.warning(
            f"HTTP {exc.status_code} Error: {content['detail']}", extra=log_data
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None) or {},
    )


def _field_name(loc) -> str:
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(parts)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Report request validation failures as 400 with one entry per bad field.
    """
    errors = [
        {
            "field": _field_name(error["loc"]) if error.get("loc") else None,
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    content = {"detail": "Validation error", "code": "validation_error", "errors": errors}

    logger.warning(
        f"Validation Error on {request.method} {request.url.path}: "
        f"{[e['field'] for e in errors]}",
        extra={"path": request.url.path, "method": request.method},
    )

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler: log the traceback, never leak internals to the client.
    """
    logger.exception(
        f"Server Error ({type(exc).__name__}): {exc}",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "server_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, server_error_handler)
