import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .custom import (
    AuthenticationError,
    BookingError,
    IdentityProviderError,
    PaymentGatewayError,
    PermissionDeniedError,
    WebhookError,
)

logger = logging.getLogger(__name__)


def _failure(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _failure(exc.message)


async def request_validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {field} {first.get('msg', '')}".strip()
    else:
        message = "Invalid request"
    return _failure(message)


async def authentication_error_handler(
    _request: Request, exc: AuthenticationError
) -> JSONResponse:
    logger.warning("Authentication failed: %s", exc.message)
    return _failure(exc.message, status_code=401)


async def permission_denied_handler(
    _request: Request, exc: PermissionDeniedError
) -> JSONResponse:
    return _failure(exc.message, status_code=403)


async def webhook_error_handler(_request: Request, exc: WebhookError) -> JSONResponse:
    logger.warning("Rejected webhook: %s", exc.message)
    return _failure(exc.message, status_code=400)


async def identity_provider_error_handler(
    _request: Request, exc: IdentityProviderError
) -> JSONResponse:
    logger.error("Identity provider error: %s (status=%s)", exc.message, exc.status_code)
    return _failure("Identity provider unavailable")


async def payment_gateway_error_handler(
    _request: Request, exc: PaymentGatewayError
) -> JSONResponse:
    logger.error("Payment gateway error: %s (status=%s)", exc.message, exc.status_code)
    return _failure(f"Failed to process payment: {exc.message}")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _failure("Internal server error")
