from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import error_response

logger = get_logger("exceptions")

MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Invalid JSON body"
    if any(error.get("type") in MISSING_ERROR_TYPES for error in errors):
        return "Missing required fields"

    first = errors[0] if errors else {}
    field = first.get("loc", ["request"])[-1]
    return f"Invalid value for '{field}'"


def add_exception_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail) if exc.detail else "Error"
        if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
            message = "Not found"
        return error_response(message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Missing or malformed input is a plain 400 here, not the framework's 422
        return error_response(_validation_message(exc), status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Data store error on {request.method} {request.url.path}: {exc}")
        return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
