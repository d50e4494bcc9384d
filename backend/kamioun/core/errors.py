"""
Error types and exception handlers.

Routers raise HTTPException directly for request-level problems. Services
raise BusinessError subclasses, which carry a machine-readable code and are
turned into JSON responses here. Anything else is logged with its
traceback and answered with a generic 500.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BusinessError(Exception):
    """A rule of the marketplace was violated (answered with 400)"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code}


class NotFoundError(BusinessError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BusinessError):
    status_code = status.HTTP_409_CONFLICT


def check_relations(lookups) -> None:
    """
    Raise RELATION_NOT_FOUND for referenced ids that do not exist

    Args:
        lookups: (label, id, finder) triples; ids that are empty are skipped
    """
    missing = [f"{label} ({value})" for label, value, find in lookups if value and find(value) is None]
    if missing:
        raise NotFoundError("RELATION_NOT_FOUND", f"Relations not found: {' '.join(missing)}")


async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} rejected: {exc.code} - {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed fields are a client error: answer 400, not 422"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log any unhandled exception with request context and answer 500"""
    error_id = id(exc)
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error_id": error_id},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BusinessError, business_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
