"""Exception handler for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import GatewayException

logger = logging.getLogger(__name__)


async def gateway_exception_handler(request: Request, exc: GatewayException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Client errors (4xx) are logged as warnings, server errors as errors.

    Args:
        request: FastAPI request object
        exc: GatewayException instance

    Returns:
        JSONResponse with error details
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    extra = {
        "error_code": exc.error_code.value,
        "path": request.url.path,
        "method": request.method,
        "details": exc.details,
        "status_code": exc.status_code
    }
    # Driver errors go to the log only.
    original = getattr(exc, "original_error", None)
    if original is not None:
        extra["original_error"] = str(original)
    logger.log(level, f"GatewayException: {exc.error_code.value}", extra=extra)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
