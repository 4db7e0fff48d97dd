from fastapi import APIRouter

from quickstay.dependencies import CurrentOwnerDep, CurrentUserDep, InventoryServiceDep
from quickstay.schemas.requests import (
    CreateRoomRequest,
    RegisterHotelRequest,
    ToggleAvailabilityRequest,
)
from quickstay.schemas.responses import ApiResponse, RoomListResponse, RoomWithHotelOut

hotels_router = APIRouter(prefix="/api/hotels", tags=["hotels"])
rooms_router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@hotels_router.post("", response_model=ApiResponse, response_model_exclude_none=True)
async def register_hotel(
    body: RegisterHotelRequest, user: CurrentUserDep, service: InventoryServiceDep,
) -> ApiResponse:
    await service.register_hotel(user.id, body)
    return ApiResponse(message="Hotel Registered Successfully")


@rooms_router.post("", response_model=ApiResponse, response_model_exclude_none=True)
async def create_room(
    body: CreateRoomRequest, owner: CurrentOwnerDep, service: InventoryServiceDep,
) -> ApiResponse:
    await service.create_room(owner.id, body)
    return ApiResponse(message="Room created successfully")


@rooms_router.get("", response_model=RoomListResponse, response_model_exclude_none=True)
async def list_rooms(service: InventoryServiceDep) -> RoomListResponse:
    rooms = await service.list_rooms()
    return RoomListResponse(rooms=[RoomWithHotelOut.model_validate(r) for r in rooms])


@rooms_router.get("/owner", response_model=RoomListResponse, response_model_exclude_none=True)
async def list_owner_rooms(
    owner: CurrentOwnerDep, service: InventoryServiceDep,
) -> RoomListResponse:
    rooms = await service.list_owner_rooms(owner.id)
    return RoomListResponse(rooms=[RoomWithHotelOut.model_validate(r) for r in rooms])


@rooms_router.post(
    "/toggle-availability", response_model=ApiResponse, response_model_exclude_none=True,
)
async def toggle_room_availability(
    body: ToggleAvailabilityRequest, owner: CurrentOwnerDep, service: InventoryServiceDep,
) -> ApiResponse:
    await service.toggle_room_availability(owner.id, body.room_id)
    return ApiResponse(message="Room availability Updated")
