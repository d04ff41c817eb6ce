"""Global exception handlers for FastAPI.

Expected domain outcomes map straight to a status code and are not
logged as errors. Dependency failures and anything untyped are logged
with the traceback and masked behind a generic message.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, get_request_id, ErrorCodes
from auth.exceptions import ForbiddenError, RateLimitedError, SessionExpiredError, UnauthorizedError
from core.exceptions import (
    DependencyFailureError,
    DispatchError,
    LinkAlreadyUsedError,
    LinkExpiredError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def _error(request: Request, status_code: int, code: str, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=error_response(
            code,
            message,
            request_id=get_request_id(request),
        ).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValidationFailedError)
    async def domain_validation_handler(request: Request, exc: ValidationFailedError):
        return _error(request, 400, ErrorCodes.VALIDATION_ERROR, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(request, 404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(LinkExpiredError)
    async def link_expired_handler(request: Request, exc: LinkExpiredError):
        return _error(request, 410, ErrorCodes.TOKEN_EXPIRED, str(exc))

    @app.exception_handler(LinkAlreadyUsedError)
    async def link_used_handler(request: Request, exc: LinkAlreadyUsedError):
        return _error(request, 410, ErrorCodes.TOKEN_ALREADY_USED, str(exc))

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        code = ErrorCodes.SESSION_EXPIRED if isinstance(exc, SessionExpiredError) else ErrorCodes.NOT_AUTHENTICATED
        return _error(request, 401, code, str(exc))

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(request: Request, exc: ForbiddenError):
        return _error(request, 403, ErrorCodes.FORBIDDEN, str(exc))

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return _error(
            request,
            429,
            ErrorCodes.RATE_LIMITED,
            f"Too many requests. Please wait {exc.retry_after_seconds} seconds.",
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )

    @app.exception_handler(DependencyFailureError)
    async def dependency_failure_handler(request: Request, exc: DependencyFailureError):
        logger.exception("Dependency failure", exc_info=exc)
        if isinstance(exc, DispatchError):
            return _error(
                request,
                500,
                ErrorCodes.EMAIL_DELIVERY_FAILED,
                "Failed to send access link. Please try again later.",
            )
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception", exc_info=exc)
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
