import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from quickstay.config import Settings
from quickstay.database import create_engine, create_session_factory, init_models
from quickstay.exceptions.custom import (
    AuthenticationError,
    BookingError,
    IdentityProviderError,
    PaymentGatewayError,
    PermissionDeniedError,
    WebhookError,
)
from quickstay.exceptions.handlers import (
    authentication_error_handler,
    booking_error_handler,
    identity_provider_error_handler,
    payment_gateway_error_handler,
    permission_denied_handler,
    request_validation_error_handler,
    unhandled_error_handler,
    webhook_error_handler,
)
from quickstay.notifications import NotificationQueue
from quickstay.routers.bookings import router as bookings_router
from quickstay.routers.inventory import hotels_router, rooms_router
from quickstay.routers.stripe_webhook import router as stripe_webhook_router
from quickstay.routers.users import router as users_router
from quickstay.services.bookings import BookingService
from quickstay.services.identity import IdentityService
from quickstay.services.inventory import InventoryService
from quickstay.services.mailer import SmtpMailer
from quickstay.services.payments import PaymentService
from quickstay.services.users import UserService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    engine = create_engine(settings.database_url)
    await init_models(engine)
    sessions = create_session_factory(engine)

    mailer = SmtpMailer(
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_username,
        settings.smtp_password,
        settings.sender_email,
    )
    notifications = NotificationQueue(
        mailer,
        max_retries=settings.email_max_retries,
        retry_delay=settings.email_retry_delay,
    )
    notifications.start()

    async with httpx.AsyncClient(timeout=30.0) as client:
        identity = IdentityService(
            client,
            settings.clerk_jwks_url,
            settings.clerk_secret_key,
            api_url=settings.clerk_api_url,
            issuer=settings.clerk_issuer,
            algorithms=settings.jwt_algorithms,
            jwks_refresh_interval=settings.jwks_refresh_interval,
        )

        app.state.settings = settings
        app.state.sessions = sessions
        app.state.notifications = notifications
        app.state.identity_service = identity
        app.state.user_service = UserService(
            sessions, identity, profile_retry_delay=settings.profile_retry_delay,
        )
        app.state.inventory_service = InventoryService(sessions)
        app.state.booking_service = BookingService(
            sessions, notifications, currency_symbol=settings.currency_symbol,
        )
        app.state.payment_service = PaymentService(
            sessions,
            settings.stripe_secret_key,
            settings.stripe_webhook_secret,
            currency=settings.currency,
            default_origin=settings.frontend_url,
        )

        try:
            yield
        finally:
            await notifications.stop()
            await engine.dispose()


app = FastAPI(title="QuickStay", lifespan=lifespan)

app.add_exception_handler(BookingError, booking_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(AuthenticationError, authentication_error_handler)
app.add_exception_handler(PermissionDeniedError, permission_denied_handler)
app.add_exception_handler(WebhookError, webhook_error_handler)
app.add_exception_handler(IdentityProviderError, identity_provider_error_handler)
app.add_exception_handler(PaymentGatewayError, payment_gateway_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(bookings_router)
app.include_router(stripe_webhook_router)
app.include_router(hotels_router)
app.include_router(rooms_router)
app.include_router(users_router)


@app.get("/", response_class=PlainTextResponse)
async def health() -> str:
    return "API is working"
