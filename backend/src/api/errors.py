"""Translate identity errors into HTTP responses."""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.exceptions import ErrorKind, IdentityError, ValidationFailedError

logger = logging.getLogger(__name__)

# Duplicate email deliberately maps to 400 rather than 409.
ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
    """Return the safe message for an identity error and log the full cause."""
    status_code = ERROR_STATUS[exc.kind]
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "request_failed method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc.__cause__ or exc,
        )
    else:
        logger.info(
            "request_rejected method=%s path=%s kind=%s error=%s",
            request.method,
            request.url.path,
            exc.kind,
            exc,
        )

    content: dict = {"detail": exc.message}
    if isinstance(exc, ValidationFailedError):
        content["violations"] = [
            {"field": v.field, "message": v.message} for v in exc.violations
        ]
    headers = (
        {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHORIZED else None
    )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def request_validation_error_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed request bodies and parameters as 400 with field violations."""
    violations = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "violations": violations},
    )


async def timeout_error_handler(request: Request, _exc: TimeoutError) -> JSONResponse:
    """A dependency did not answer within the request deadline."""
    logger.warning("request_timeout method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={"detail": "Request timed out"},
    )
