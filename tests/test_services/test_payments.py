import json
from datetime import date
from types import SimpleNamespace

import pytest
import stripe

from quickstay.exceptions.custom import NotFoundError, PaymentGatewayError, WebhookError
from quickstay.models import PAY_AT_HOTEL, UserRole
from quickstay.services.payments import (
    STRIPE_PAYMENT_METHOD,
    PaymentService,
    build_checkout_params,
)

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def service(sessions):
    return PaymentService(
        sessions, "sk_test_123", WEBHOOK_SECRET, default_origin="http://frontend.test",
    )


@pytest.fixture
async def booking(seed):
    guest = await seed.user()
    owner = await seed.user("user_owner", role=UserRole.hotel_owner, email="owner@example.com")
    hotel = await seed.hotel(owner, name="Seaside Inn")
    room = await seed.room(hotel, price_per_night=100.0)
    return await seed.booking(guest, room, date(2025, 1, 1), date(2025, 1, 3))


@pytest.fixture
def fake_checkout(monkeypatch):
    calls = []

    def create(**params):
        calls.append(params)
        return SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.test/cs_test_1")

    monkeypatch.setattr(stripe.checkout.Session, "create", create)
    return calls


# --- build_checkout_params ---


def test_checkout_params_shape():
    params = build_checkout_params(
        booking_id="b1",
        hotel_name="Seaside Inn",
        total_price=200.0,
        currency="usd",
        origin="http://frontend.test/",
    )

    assert params["mode"] == "payment"
    (item,) = params["line_items"]
    assert item["quantity"] == 1
    assert item["price_data"]["currency"] == "usd"
    assert item["price_data"]["unit_amount"] == 20000
    assert item["price_data"]["product_data"]["name"] == "Seaside Inn"
    assert params["success_url"] == "http://frontend.test/loader/my-bookings"
    assert params["cancel_url"] == "http://frontend.test/my-bookings"
    assert params["metadata"] == {"bookingId": "b1"}


# --- create_checkout_session ---


@pytest.mark.asyncio
async def test_create_checkout_session(service, booking, fake_checkout):
    url = await service.create_checkout_session(booking.id, origin="http://shop.test")

    assert url == "https://checkout.stripe.test/cs_test_1"
    (params,) = fake_checkout
    assert params["api_key"] == "sk_test_123"
    assert params["metadata"] == {"bookingId": booking.id}
    assert params["line_items"][0]["price_data"]["unit_amount"] == 20000
    assert params["success_url"] == "http://shop.test/loader/my-bookings"


@pytest.mark.asyncio
async def test_create_checkout_session_default_origin(service, booking, fake_checkout):
    await service.create_checkout_session(booking.id)

    assert fake_checkout[0]["cancel_url"] == "http://frontend.test/my-bookings"


@pytest.mark.asyncio
async def test_create_checkout_session_unknown_booking(service, fake_checkout):
    with pytest.raises(NotFoundError):
        await service.create_checkout_session("missing")
    assert fake_checkout == []


@pytest.mark.asyncio
async def test_create_checkout_session_gateway_error(service, booking, monkeypatch):
    def create(**params):
        raise stripe.APIConnectionError("Network error")

    monkeypatch.setattr(stripe.checkout.Session, "create", create)

    with pytest.raises(PaymentGatewayError) as exc_info:
        await service.create_checkout_session(booking.id)
    assert "Network error" in exc_info.value.message


# --- handle_webhook ---


@pytest.mark.asyncio
async def test_webhook_marks_booking_paid(service, booking, seed, sign_payload, checkout_payload):
    payload = checkout_payload(booking.id)

    await service.handle_webhook(payload.encode(), sign_payload(payload))

    stored = await seed.get_booking(booking.id)
    assert stored.is_paid is True
    assert stored.payment_method == STRIPE_PAYMENT_METHOD


@pytest.mark.asyncio
async def test_webhook_replay_is_idempotent(service, booking, seed, sign_payload, checkout_payload):
    payload = checkout_payload(booking.id)

    await service.handle_webhook(payload.encode(), sign_payload(payload))
    await service.handle_webhook(payload.encode(), sign_payload(payload))

    stored = await seed.get_booking(booking.id)
    assert stored.is_paid is True
    assert stored.payment_method == STRIPE_PAYMENT_METHOD
    assert await service.mark_paid(booking.id) is False


@pytest.mark.asyncio
async def test_webhook_bad_signature_leaves_booking_unpaid(
    service, booking, seed, sign_payload, checkout_payload
):
    payload = checkout_payload(booking.id)
    signature = sign_payload(payload, secret="whsec_wrong")

    with pytest.raises(WebhookError):
        await service.handle_webhook(payload.encode(), signature)

    stored = await seed.get_booking(booking.id)
    assert stored.is_paid is False
    assert stored.payment_method == PAY_AT_HOTEL


@pytest.mark.asyncio
async def test_webhook_tampered_payload_is_rejected(service, booking, sign_payload, checkout_payload):
    signature = sign_payload(checkout_payload("someone-else"))

    with pytest.raises(WebhookError):
        await service.handle_webhook(checkout_payload(booking.id).encode(), signature)


@pytest.mark.asyncio
async def test_webhook_missing_signature(service, checkout_payload):
    with pytest.raises(WebhookError, match="Missing Stripe signature"):
        await service.handle_webhook(checkout_payload("b1").encode(), None)


@pytest.mark.asyncio
async def test_webhook_without_secret_configured(sessions, sign_payload, checkout_payload):
    service = PaymentService(sessions, "sk_test_123", "")
    payload = checkout_payload("b1")

    with pytest.raises(WebhookError):
        await service.handle_webhook(payload.encode(), sign_payload(payload))


@pytest.mark.asyncio
async def test_webhook_missing_booking_id(service, sign_payload, checkout_payload):
    payload = checkout_payload(None)

    with pytest.raises(WebhookError, match="Booking ID not found"):
        await service.handle_webhook(payload.encode(), sign_payload(payload))


@pytest.mark.asyncio
async def test_webhook_ignores_other_event_types(service, booking, seed, sign_payload):
    payload = json.dumps({
        "id": "evt_2",
        "type": "payment_intent.created",
        "data": {"object": {"id": "pi_1", "metadata": {"bookingId": booking.id}}},
    })

    await service.handle_webhook(payload.encode(), sign_payload(payload))

    stored = await seed.get_booking(booking.id)
    assert stored.is_paid is False


@pytest.mark.asyncio
async def test_webhook_invalid_payload(service, sign_payload):
    payload = json.dumps({"unexpected": True})

    with pytest.raises(WebhookError, match="invalid payload"):
        await service.handle_webhook(payload.encode(), sign_payload(payload))


@pytest.mark.asyncio
async def test_mark_paid_unknown_booking(service):
    assert await service.mark_paid("missing") is False
