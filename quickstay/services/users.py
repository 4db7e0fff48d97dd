import asyncio
import logging

from sqlalchemy.exc import IntegrityError

from quickstay.database import SessionFactory
from quickstay.exceptions.custom import AuthenticationError, IdentityProviderError, NotFoundError
from quickstay.mappers.recent_searches import push_recent_city
from quickstay.models import User, UserRole
from quickstay.schemas.identity import IdentityProfile
from quickstay.services.identity import IdentityService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        sessions: SessionFactory,
        identity: IdentityService,
        profile_retry_delay: float = 5.0,
    ) -> None:
        self._sessions = sessions
        self._identity = identity
        self._profile_retry_delay = profile_retry_delay

    async def get_or_provision(self, user_id: str) -> User:
        """Return the local user record, creating it from the identity provider."""
        async with self._sessions() as session:
            user = await session.get(User, user_id)
        if user is not None:
            return user

        profile = await self._fetch_profile(user_id)
        async with self._sessions() as session:
            user = User(
                id=profile.id,
                username=profile.username,
                email=profile.email,
                image=profile.image,
                role=UserRole.user,
                recent_searched_cities=[],
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                # A concurrent request provisioned the same user first
                await session.rollback()
                user = await session.get(User, user_id)
                if user is None:
                    raise

        logger.info("Provisioned user %s (%s)", user.id, user.email)
        return user

    async def _fetch_profile(self, user_id: str) -> IdentityProfile:
        try:
            return await self._identity.get_user_profile(user_id)
        except IdentityProviderError as exc:
            logger.warning(
                "Profile fetch for %s failed (%s), retrying in %.1fs",
                user_id, exc.message, self._profile_retry_delay,
            )

        await asyncio.sleep(self._profile_retry_delay)
        try:
            return await self._identity.get_user_profile(user_id)
        except IdentityProviderError as exc:
            logger.error("Profile fetch for %s failed again: %s", user_id, exc.message)
            raise AuthenticationError("Unable to load user profile") from exc

    async def store_recent_search(self, user_id: str, city: str) -> list[str]:
        async with self._sessions() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            # Reassign so the JSON column is flagged dirty
            user.recent_searched_cities = push_recent_city(user.recent_searched_cities or [], city)
            await session.commit()
            return user.recent_searched_cities
