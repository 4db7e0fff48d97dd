import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from quickstay.dependencies import (
    BookingServiceDep,
    CurrentOwnerDep,
    CurrentUserDep,
    PaymentServiceDep,
)
from quickstay.routers.stripe_webhook import stripe_webhook
from quickstay.schemas.requests import AvailabilityRequest, CreateBookingRequest, PaymentRequest
from quickstay.schemas.responses import (
    ApiResponse,
    AvailabilityResponse,
    BookingListResponse,
    BookingOut,
    DashboardResponse,
    PaymentSessionResponse,
    WebhookAck,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post(
    "/check-availability",
    response_model=AvailabilityResponse,
    response_model_exclude_none=True,
)
async def check_availability(
    body: AvailabilityRequest, service: BookingServiceDep,
) -> AvailabilityResponse:
    available = await service.check_availability(
        body.room, body.check_in_date, body.check_out_date,
    )
    if not available:
        return AvailabilityResponse(
            success=False, is_available=False, message="Room not available",
        )
    return AvailabilityResponse(is_available=True)


@router.post("/create", response_model=ApiResponse, response_model_exclude_none=True)
async def create_booking(
    body: CreateBookingRequest, user: CurrentUserDep, service: BookingServiceDep,
) -> ApiResponse:
    await service.create_booking(
        user, body.room, body.check_in_date, body.check_out_date, body.guests,
    )
    return ApiResponse(message="Booking created successfully!")


@router.get("/user", response_model=BookingListResponse, response_model_exclude_none=True)
async def get_user_bookings(
    user: CurrentUserDep, service: BookingServiceDep,
) -> BookingListResponse:
    bookings = await service.list_user_bookings(user.id)
    return BookingListResponse(bookings=[BookingOut.model_validate(b) for b in bookings])


@router.get("/hotel", response_model=DashboardResponse, response_model_exclude_none=True)
async def get_hotel_bookings(
    owner: CurrentOwnerDep, service: BookingServiceDep,
) -> DashboardResponse:
    dashboard = await service.hotel_dashboard(owner.id)
    return DashboardResponse(dashboard_data=dashboard)


@router.post(
    "/stripe-payment",
    response_model=PaymentSessionResponse,
    response_model_exclude_none=True,
)
async def stripe_payment(
    body: PaymentRequest, request: Request, service: PaymentServiceDep,
) -> PaymentSessionResponse:
    if not body.booking_id:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Booking ID is required"},
        )
    url = await service.create_checkout_session(
        body.booking_id, origin=request.headers.get("origin"),
    )
    return PaymentSessionResponse(url=url)


router.add_api_route(
    "/stripe-webhook", stripe_webhook, methods=["POST"], response_model=WebhookAck,
)
