"""Error taxonomy and the exception handlers that render it.

Services raise AppError subclasses; the handlers installed by
install_exception_handlers() turn them into JSON bodies of the form
{"message": ..., "code": ...}. The code is stable and meant for
programmatic handling; the message is for humans.

Request validation failures (pydantic) are rendered as
{"errors": [{"msg", "param", "location", "type"}]} with status 400.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from greenlands.config import settings

logger = structlog.get_logger()


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    code = "SERVER_ERROR"
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class Unauthenticated(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "No token, authorization denied"


class InvalidToken(AppError):
    status_code = 401
    code = "INVALID_TOKEN"
    default_message = "Token is not valid"


class InvalidCredentials(AppError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Not authorized"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class DuplicateEmail(Conflict):
    code = "DUPLICATE_EMAIL"
    default_message = "User already exists"


class ServerError(AppError):
    pass


_AUTH_HEADERS = {"WWW-Authenticate": "Bearer"}


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = _AUTH_HEADERS if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code},
        headers=headers,
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        errors.append({
            "msg": err.get("msg", "Invalid value"),
            "param": ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc),
            "location": loc[0] if loc else None,
            "type": err.get("type"),
        })
    return JSONResponse(status_code=400, content={"errors": errors})


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("greenlands.unhandled_error", path=request.url.path)
    content = {"message": ServerError.default_message, "code": ServerError.code}
    if settings.debug:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def install_exception_handlers(app: FastAPI) -> None:
    """Register the error taxonomy on a FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
