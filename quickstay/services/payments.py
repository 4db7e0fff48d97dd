import asyncio
import logging

import stripe
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.orm import selectinload

from quickstay.database import SessionFactory
from quickstay.exceptions.custom import NotFoundError, PaymentGatewayError, WebhookError
from quickstay.mappers.stay import to_minor_units
from quickstay.models import Booking, Room
from quickstay.schemas.stripe import CHECKOUT_SESSION_COMPLETED, StripeEvent

logger = logging.getLogger(__name__)

STRIPE_PAYMENT_METHOD = "Stripe"
BOOKING_ID_METADATA_KEY = "bookingId"


def build_checkout_params(
    *,
    booking_id: str,
    hotel_name: str,
    total_price: float,
    currency: str,
    origin: str,
) -> dict:
    origin = origin.rstrip("/")
    return {
        "mode": "payment",
        "line_items": [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": hotel_name},
                    "unit_amount": to_minor_units(total_price),
                },
                "quantity": 1,
            }
        ],
        "success_url": f"{origin}/loader/my-bookings",
        "cancel_url": f"{origin}/my-bookings",
        "metadata": {BOOKING_ID_METADATA_KEY: booking_id},
    }


class PaymentService:
    """Stripe hosted checkout and settlement of its webhook events."""

    def __init__(
        self,
        sessions: SessionFactory,
        secret_key: str,
        webhook_secret: str,
        *,
        currency: str = "usd",
        default_origin: str = "http://localhost:5173",
    ) -> None:
        self._sessions = sessions
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._currency = currency
        self._default_origin = default_origin

    async def create_checkout_session(self, booking_id: str, origin: str | None = None) -> str:
        """Create a hosted checkout page for a booking and return its URL."""
        async with self._sessions() as session:
            booking = await session.get(Booking, booking_id)
            if booking is None:
                raise NotFoundError("Booking not found")
            room = await session.get(Room, booking.room_id, options=[selectinload(Room.hotel)])
        if room is None or room.hotel is None:
            raise NotFoundError("Room or hotel not found")

        params = build_checkout_params(
            booking_id=booking.id,
            hotel_name=room.hotel.name,
            total_price=booking.total_price,
            currency=self._currency,
            origin=origin or self._default_origin,
        )
        try:
            checkout = await asyncio.to_thread(
                stripe.checkout.Session.create, api_key=self._secret_key, **params
            )
        except stripe.StripeError as exc:
            raise PaymentGatewayError(
                exc.user_message or str(exc), status_code=exc.http_status,
            ) from exc

        logger.info("Created checkout session for booking %s", booking.id)
        return checkout.url

    def _verify(self, payload: bytes, signature: str | None) -> str:
        if not signature or not self._webhook_secret:
            raise WebhookError("Missing Stripe signature or webhook secret")
        try:
            text = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                text, signature, self._webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except UnicodeDecodeError as exc:
            raise WebhookError("Webhook Error: payload is not UTF-8") from exc
        except stripe.SignatureVerificationError as exc:
            raise WebhookError(f"Webhook Error: {exc.user_message or exc}") from exc
        return text

    async def handle_webhook(self, payload: bytes, signature: str | None) -> None:
        """Verify and apply one Stripe event. Safe to call again with the same event."""
        text = self._verify(payload, signature)
        try:
            event = StripeEvent.model_validate_json(text)
        except ValidationError as exc:
            raise WebhookError("Webhook Error: invalid payload") from exc

        if event.type != CHECKOUT_SESSION_COMPLETED:
            logger.info("Unhandled event type %s (%s)", event.type, event.id)
            return

        metadata = event.data.object.metadata or {}
        booking_id = metadata.get(BOOKING_ID_METADATA_KEY)
        if not booking_id:
            raise WebhookError("Booking ID not found in metadata")

        await self.mark_paid(booking_id)

    async def mark_paid(self, booking_id: str) -> bool:
        """Set the booking paid. Returns False when nothing changed."""
        async with self._sessions() as session:
            result = await session.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.is_paid.is_(False))
                .values(is_paid=True, payment_method=STRIPE_PAYMENT_METHOD)
            )
            await session.commit()

        if result.rowcount == 0:
            logger.info("Booking %s already paid or unknown, nothing to update", booking_id)
            return False
        logger.info("Booking %s marked as paid", booking_id)
        return True
