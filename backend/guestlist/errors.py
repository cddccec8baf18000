"""Domain error taxonomy and its HTTP rendering."""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class GoneError(AppError):
    status_code = status.HTTP_410_GONE


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def map_store_error(exc: SQLAlchemyError, message: str) -> AppError:
    """Translate a store failure into the taxonomy.

    Constraint violations become ConflictError; everything else is internal.
    """
    if isinstance(exc, IntegrityError):
        logger.warning("Constraint violation: %s", exc.orig)
        return ConflictError("הרשומה כבר קיימת")
    logger.exception("Store failure: %s", exc)
    return InternalError(message)


async def handle_app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("Server error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": "שגיאת שרת"})
    logger.warning("Client error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    logger.warning("Rejected payload on %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "נתונים לא תקינים", "details": details},
    )
