"""Exception handlers producing structured error responses."""

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..exceptions import ErrorCode, MediaException

logger = logging.getLogger(__name__)


async def media_exception_handler(request: Request, exc: MediaException) -> JSONResponse:
    """Log a MediaException and render it as ``{"error", "message", "details"}``."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"MediaException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's 422 body in the same shape as every other error."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"

    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "errors": len(errors)},
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": message,
            "details": {"errors": [
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")} for e in errors
            ]},
        },
    )
