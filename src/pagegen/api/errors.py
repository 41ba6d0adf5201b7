"""Map pagegen error kinds to HTTP responses."""

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from pagegen.common.errors import InvalidInput, PageGenError, PersistenceError, TemplateNotFound, Unauthorized

logger = structlog.get_logger()

ERROR_STATUS: dict[type[PageGenError], int] = {
    InvalidInput: 400,
    Unauthorized: 403,
    TemplateNotFound: 404,
    PersistenceError: 500,
}


def status_for_error(exc: PageGenError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


async def pagegen_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Single summary message per failed operation."""
    status_code = status_for_error(exc) if isinstance(exc, PageGenError) else 500
    logger.warning("request_failed", path=request.url.path, status_code=status_code, error=str(exc))
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})
