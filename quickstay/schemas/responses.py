from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


class UserOut(ApiModel):
    id: str = Field(alias="_id")
    username: str
    email: str
    image: str | None = None
    role: str


class HotelOut(ApiModel):
    id: str = Field(alias="_id")
    name: str
    address: str
    contact: str
    city: str
    owner_id: str


class RoomOut(ApiModel):
    id: str = Field(alias="_id")
    hotel_id: str
    room_type: str
    price_per_night: float
    amenities: list[str]
    images: list[str]
    is_available: bool
    created_at: datetime


class HotelOwnerOut(ApiModel):
    id: str = Field(alias="_id")
    image: str | None = None


class HotelWithOwnerOut(HotelOut):
    owner: HotelOwnerOut


class RoomWithHotelOut(RoomOut):
    hotel: HotelWithOwnerOut


class BookingOut(ApiModel):
    id: str = Field(alias="_id")
    user_id: str
    room_id: str
    hotel_id: str
    check_in_date: date
    check_out_date: date
    guests: int
    total_price: float
    payment_method: str
    is_paid: bool
    created_at: datetime
    room: RoomOut
    hotel: HotelOut


class OwnerBookingOut(BookingOut):
    user: UserOut


class DashboardData(ApiModel):
    total_bookings: int
    total_revenue: float
    bookings: list[OwnerBookingOut]


class ApiResponse(ApiModel):
    success: bool = True
    message: str | None = None


class AvailabilityResponse(ApiResponse):
    is_available: bool


class BookingListResponse(ApiResponse):
    bookings: list[BookingOut]


class DashboardResponse(ApiResponse):
    dashboard_data: DashboardData


class PaymentSessionResponse(ApiResponse):
    url: str


class RoomListResponse(ApiResponse):
    rooms: list[RoomWithHotelOut]


class UserDataResponse(ApiResponse):
    role: str
    recent_searched_cities: list[str]


class WebhookAck(BaseModel):
    received: bool = True
