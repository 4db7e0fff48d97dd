from typing import Annotated

from fastapi import APIRouter, Header, Request

from quickstay.dependencies import PaymentServiceDep
from quickstay.schemas.responses import WebhookAck

router = APIRouter(tags=["payments"])


async def stripe_webhook(
    request: Request,
    service: PaymentServiceDep,
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
) -> WebhookAck:
    # Signature verification needs the exact bytes Stripe signed
    payload = await request.body()
    await service.handle_webhook(payload, stripe_signature)
    return WebhookAck()


router.add_api_route("/api/stripe", stripe_webhook, methods=["POST"], response_model=WebhookAck)
