from fastapi import Request, status
from fastapi.responses import JSONResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base class for expected, per-request failures of the social services."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "service_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidOperationError(ServiceError):
    """The request makes no sense for the acting user (e.g. befriending yourself)."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "invalid_operation"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"


class ConflictError(ServiceError):
    """Duplicate request, existing friendship, or a disallowed status change."""
    status_code = status.HTTP_409_CONFLICT
    error = "conflict"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} rejected ({exc.error}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error},
    )
