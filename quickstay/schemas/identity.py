from pydantic import BaseModel


class ClerkEmailAddress(BaseModel):
    id: str | None = None
    email_address: str


class ClerkUser(BaseModel):
    id: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    primary_email_address_id: str | None = None
    email_addresses: list[ClerkEmailAddress] = []


class IdentityProfile(BaseModel):
    id: str
    username: str
    email: str
    image: str | None = None
