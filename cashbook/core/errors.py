"""Error types raised by the data layer and their HTTP translations.

Write failures surface to the caller as a transient notification payload
(title / description / variant) mirroring what the client shows as a toast.
Nothing here retries.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("cashbook.errors")


class BackendError(Exception):
    """A store or auth operation failed."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "backend_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BackendError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"


class AuthError(BackendError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "unauthorized"


class ConflictError(BackendError):
    status_code = status.HTTP_409_CONFLICT
    error = "conflict"


def notification(description: str, title: str = "Error", variant: str = "destructive") -> dict:
    return {"title": title, "description": description, "variant": variant}


def backend_error_handler(request: Request, exc: BackendError):  # type: ignore
    logger.info("write failed: %s %s -> %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error,
            "detail": exc.message,
            "notification": notification(exc.message),
        },
        headers=headers,
    )


def http_error_handler(request: Request, exc):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in exc.errors()
            ],
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
