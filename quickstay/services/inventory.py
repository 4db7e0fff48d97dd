import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from quickstay.database import SessionFactory
from quickstay.exceptions.custom import ConflictError, NotFoundError
from quickstay.models import Hotel, Room, User, UserRole
from quickstay.schemas.requests import CreateRoomRequest, RegisterHotelRequest

logger = logging.getLogger(__name__)


class InventoryService:
    """Hotels and rooms managed by hotel owners."""

    def __init__(self, sessions: SessionFactory) -> None:
        self._sessions = sessions

    async def register_hotel(self, user_id: str, request: RegisterHotelRequest) -> Hotel:
        async with self._sessions() as session:
            existing = await session.scalar(select(Hotel.id).where(Hotel.owner_id == user_id))
            if existing is not None:
                raise ConflictError("Hotel Already Registered")

            user = await session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")

            hotel = Hotel(
                name=request.name,
                address=request.address,
                contact=request.contact,
                city=request.city,
                owner_id=user_id,
            )
            session.add(hotel)
            user.role = UserRole.hotel_owner
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise ConflictError("Hotel Already Registered") from None

        logger.info("Registered hotel %s for owner %s", hotel.id, user_id)
        return hotel

    async def _owner_hotel(self, session, owner_id: str) -> Hotel:
        hotel = await session.scalar(select(Hotel).where(Hotel.owner_id == owner_id))
        if hotel is None:
            raise NotFoundError("No Hotel found")
        return hotel

    async def create_room(self, owner_id: str, request: CreateRoomRequest) -> Room:
        async with self._sessions() as session:
            hotel = await self._owner_hotel(session, owner_id)
            room = Room(
                hotel_id=hotel.id,
                room_type=request.room_type,
                price_per_night=request.price_per_night,
                amenities=list(request.amenities),
                images=list(request.images),
                is_available=True,
            )
            session.add(room)
            await session.commit()

        logger.info("Created room %s in hotel %s", room.id, room.hotel_id)
        return room

    async def list_rooms(self) -> list[Room]:
        async with self._sessions() as session:
            result = await session.scalars(
                select(Room)
                .where(Room.is_available.is_(True))
                .options(selectinload(Room.hotel).selectinload(Hotel.owner))
                .order_by(Room.created_at.desc())
            )
            return list(result)

    async def list_owner_rooms(self, owner_id: str) -> list[Room]:
        async with self._sessions() as session:
            hotel = await self._owner_hotel(session, owner_id)
            result = await session.scalars(
                select(Room)
                .where(Room.hotel_id == hotel.id)
                .options(selectinload(Room.hotel).selectinload(Hotel.owner))
                .order_by(Room.created_at.desc())
            )
            return list(result)

    async def toggle_room_availability(self, owner_id: str, room_id: str) -> bool:
        async with self._sessions() as session:
            room = await session.scalar(
                select(Room)
                .join(Hotel, Room.hotel_id == Hotel.id)
                .where(Room.id == room_id, Hotel.owner_id == owner_id)
            )
            if room is None:
                raise NotFoundError("Room not found")
            room.is_available = not room.is_available
            await session.commit()
            logger.info("Room %s availability set to %s", room.id, room.is_available)
            return room.is_available
