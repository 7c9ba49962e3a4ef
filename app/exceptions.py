"""Application errors and the handlers that turn them into JSON responses."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."


class StoreError(Exception):
    """Raised when the persistence layer fails (connectivity, constraints, etc.)."""

    pass


REQUEST_PARTS = ("body", "query", "path", "header", "cookie")


def _format_location(loc: tuple) -> str:
    # Drop the request part; errors on the whole body have no field
    if loc and loc[0] in REQUEST_PARTS:
        loc = loc[1:]
    return ".".join(str(part) for part in loc)


def _strip_prefix(message: str) -> str:
    # pydantic prefixes messages raised from validators with "Value error, "
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report every violated constraint together as a 400."""
    errors = [
        {"field": _format_location(tuple(error.get("loc", ()))), "message": _strip_prefix(error["msg"])}
        for error in exc.errors()
    ]
    message = "; ".join(
        f"{error['field']}: {error['message']}" if error["field"] else error["message"]
        for error in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors with a ``message`` key."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
