import logging
import time

import httpx
from jose import JWTError, jwt

from quickstay.exceptions.custom import AuthenticationError, IdentityProviderError
from quickstay.schemas.identity import ClerkUser, IdentityProfile

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.clerk.com/v1"
DEFAULT_JWKS_REFRESH_INTERVAL = 60.0


class IdentityService:
    """Verifies Clerk session tokens and reads user profiles from Clerk."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        jwks_url: str,
        secret_key: str,
        *,
        api_url: str = DEFAULT_API_URL,
        issuer: str = "",
        algorithms: list[str] | None = None,
        jwks_refresh_interval: float = DEFAULT_JWKS_REFRESH_INTERVAL,
    ):
        self._client = client
        self._jwks_url = jwks_url
        self._api_url = api_url.rstrip("/")
        self._issuer = issuer or None
        self._algorithms = algorithms or ["RS256"]
        self._headers = {"Authorization": f"Bearer {secret_key}"}
        self._keys: dict[str, dict] = {}
        self._jwks_refresh_interval = jwks_refresh_interval
        self._jwks_fetched_at: float | None = None

    async def _fetch_jwks(self) -> None:
        try:
            resp = await self._client.get(self._jwks_url)
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"JWKS fetch failed: {exc}") from exc
        if resp.status_code >= 400:
            raise IdentityProviderError(resp.text, status_code=resp.status_code)

        keys = resp.json().get("keys", [])
        self._keys = {key["kid"]: key for key in keys if "kid" in key}
        self._jwks_fetched_at = time.monotonic()
        logger.info("Loaded %d signing keys", len(self._keys))

    def _jwks_stale(self) -> bool:
        if self._jwks_fetched_at is None:
            return True
        return time.monotonic() - self._jwks_fetched_at >= self._jwks_refresh_interval

    async def _signing_key(self, kid: str | None) -> dict | None:
        if not kid:
            return None
        if kid not in self._keys and self._jwks_stale():
            # Unknown kid: the provider may have rotated its keys
            await self._fetch_jwks()
        return self._keys.get(kid)

    async def verify_token(self, token: str) -> str:
        """Validate a bearer token and return its subject (the user id)."""
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise AuthenticationError("Invalid token") from exc

        key = await self._signing_key(header.get("kid"))
        if key is None:
            raise AuthenticationError("Unknown signing key")

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                issuer=self._issuer,
                options={"verify_aud": False},
            )
        except JWTError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Token has no subject")
        return subject

    async def get_user_profile(self, user_id: str) -> IdentityProfile:
        url = f"{self._api_url}/users/{user_id}"
        try:
            resp = await self._client.get(url, headers=self._headers)
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"Profile fetch failed: {exc}") from exc

        if resp.status_code >= 400:
            raise IdentityProviderError(resp.text, status_code=resp.status_code)

        user = ClerkUser(**resp.json())
        logger.info("Fetched identity profile for %s", user_id)
        return _to_profile(user)


def _to_profile(user: ClerkUser) -> IdentityProfile:
    email = ""
    for address in user.email_addresses:
        if not email or address.id == user.primary_email_address_id:
            email = address.email_address

    full_name = " ".join(p for p in (user.first_name, user.last_name) if p)
    username = user.username or full_name or email.split("@")[0] or user.id
    return IdentityProfile(id=user.id, username=username, email=email, image=user.image_url)
