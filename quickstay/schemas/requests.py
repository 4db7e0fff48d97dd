from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailabilityRequest(ApiRequest):
    room: str
    check_in_date: date
    check_out_date: date


class CreateBookingRequest(AvailabilityRequest):
    guests: int = Field(default=1, ge=1)


class PaymentRequest(ApiRequest):
    booking_id: str | None = None


class RegisterHotelRequest(ApiRequest):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    contact: str = Field(min_length=1)
    city: str = Field(min_length=1)


class CreateRoomRequest(ApiRequest):
    room_type: str = Field(min_length=1)
    price_per_night: float = Field(gt=0)
    amenities: list[str] = []
    images: list[str] = []


class ToggleAvailabilityRequest(ApiRequest):
    room_id: str


class RecentSearchRequest(ApiRequest):
    recent_searched_city: str = Field(min_length=1)
