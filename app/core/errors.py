from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.core.exceptions import UserDirectoryError, AuthenticationError
from app.core.config import settings
from app.schemas.xml import error_response

logger = logging.getLogger(__name__)


def describe_request_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p not in ("path", "query", "header", "body")]
        field = ".".join(loc) or "request"
        parts.append(f"{field}: {error.get('msg')}")
    return "; ".join(parts) or "Input validation failed"


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    Every error leaves as an XML <response> envelope.
    """
    @app.exception_handler(UserDirectoryError)
    async def user_directory_exception_handler(request: Request, exc: UserDirectoryError):
        headers = {"WWW-Authenticate": "Basic"} if isinstance(exc, AuthenticationError) else None
        return error_response(exc.message, exc.status_code, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return error_response(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles path/query parameter validation errors.
        """
        return error_response(describe_request_errors(exc), 422)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else "unknown"
            },
            exc_info=True
        )

        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)
        return error_response(message, 500)
