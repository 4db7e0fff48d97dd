from pydantic import BaseModel

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class StripeEventObject(BaseModel):
    id: str | None = None
    metadata: dict[str, str] | None = None


class StripeEventData(BaseModel):
    object: StripeEventObject


class StripeEvent(BaseModel):
    id: str
    type: str
    data: StripeEventData
