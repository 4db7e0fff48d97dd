from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quickstay.exceptions.custom import AuthenticationError, PermissionDeniedError
from quickstay.models import User, UserRole
from quickstay.services.bookings import BookingService
from quickstay.services.identity import IdentityService
from quickstay.services.inventory import InventoryService
from quickstay.services.payments import PaymentService
from quickstay.services.users import UserService

_bearer = HTTPBearer(auto_error=False)


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_inventory_service(request: Request) -> InventoryService:
    return request.app.state.inventory_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
InventoryServiceDep = Annotated[InventoryService, Depends(get_inventory_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]


async def get_current_user(
    identity: IdentityServiceDep,
    users: UserServiceDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> User:
    if credentials is None:
        raise AuthenticationError()
    user_id = await identity.verify_token(credentials.credentials)
    return await users.get_or_provision(user_id)


CurrentUserDep = Annotated[User, Depends(get_current_user)]


async def get_current_owner(user: CurrentUserDep) -> User:
    if user.role != UserRole.hotel_owner:
        raise PermissionDeniedError("Hotel owner access required")
    return user


CurrentOwnerDep = Annotated[User, Depends(get_current_owner)]
