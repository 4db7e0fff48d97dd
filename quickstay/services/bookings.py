import logging
import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from quickstay.database import SessionFactory
from quickstay.exceptions.custom import InvalidRequestError, NotFoundError, RoomUnavailableError
from quickstay.mappers.booking_email import build_confirmation_email
from quickstay.mappers.stay import count_nights, is_valid_stay, occupied_nights, total_price
from quickstay.models import Booking, Hotel, Room, RoomNight, User
from quickstay.notifications import NotificationQueue
from quickstay.schemas.responses import DashboardData, OwnerBookingOut

logger = logging.getLogger(__name__)


def _require_valid_stay(check_in: date, check_out: date) -> None:
    if not is_valid_stay(check_in, check_out):
        raise InvalidRequestError("Check-out date must be after check-in date")


class BookingService:
    def __init__(
        self,
        sessions: SessionFactory,
        notifications: NotificationQueue,
        currency_symbol: str = "$",
    ) -> None:
        self._sessions = sessions
        self._notifications = notifications
        self._currency_symbol = currency_symbol

    async def is_available(self, room_id: str, check_in: date, check_out: date) -> bool:
        """True iff no booking of the room overlaps [check_in, check_out).

        The query is the SQL form of `quickstay.mappers.stay.overlaps`.
        Fails closed: a storage error answers "not available".
        """
        try:
            async with self._sessions() as session:
                conflict = await session.scalar(
                    select(Booking.id)
                    .where(
                        Booking.room_id == room_id,
                        Booking.check_in_date < check_out,
                        Booking.check_out_date > check_in,
                    )
                    .limit(1)
                )
        except SQLAlchemyError:
            logger.exception("Availability check failed for room %s", room_id)
            return False
        return conflict is None

    async def check_availability(self, room_id: str, check_in: date, check_out: date) -> bool:
        _require_valid_stay(check_in, check_out)
        return await self.is_available(room_id, check_in, check_out)

    async def create_booking(
        self,
        user: User,
        room_id: str,
        check_in: date,
        check_out: date,
        guests: int,
    ) -> Booking:
        _require_valid_stay(check_in, check_out)
        if not await self.is_available(room_id, check_in, check_out):
            raise RoomUnavailableError(room_id)

        async with self._sessions() as session:
            room = await session.get(Room, room_id, options=[selectinload(Room.hotel)])
        if room is None or room.hotel is None:
            raise NotFoundError("Room not found!")

        nights = count_nights(check_in, check_out)
        booking_id = uuid.uuid4().hex
        booking = Booking(
            id=booking_id,
            user_id=user.id,
            room_id=room.id,
            hotel_id=room.hotel_id,
            check_in_date=check_in,
            check_out_date=check_out,
            guests=guests,
            total_price=total_price(room.price_per_night, nights),
            is_paid=False,
        )
        booking.nights = [
            RoomNight(room_id=room.id, night=night, booking_id=booking_id)
            for night in occupied_nights(check_in, check_out)
        ]

        async with self._sessions() as session:
            session.add(booking)
            try:
                await session.commit()
            except IntegrityError:
                # Another booking claimed one of these nights after our check
                await session.rollback()
                logger.info(
                    "Booking race lost for room %s (%s -> %s)", room_id, check_in, check_out,
                )
                raise RoomUnavailableError(room_id) from None

        logger.info(
            "Created booking %s: room %s, %d nights, total %.2f",
            booking.id, room.id, nights, booking.total_price,
        )
        self._queue_confirmation(user, booking, room.hotel)
        return booking

    def _queue_confirmation(self, user: User, booking: Booking, hotel: Hotel) -> None:
        if not user.email:
            logger.warning("User %s has no email, skipping confirmation", user.id)
            return
        email = build_confirmation_email(
            to=user.email,
            username=user.username,
            booking_id=booking.id,
            hotel_name=hotel.name,
            hotel_address=hotel.address,
            check_in=booking.check_in_date,
            total_price=booking.total_price,
            currency_symbol=self._currency_symbol,
        )
        self._notifications.enqueue(email)

    async def list_user_bookings(self, user_id: str) -> list[Booking]:
        async with self._sessions() as session:
            result = await session.scalars(
                select(Booking)
                .where(Booking.user_id == user_id)
                .options(selectinload(Booking.room), selectinload(Booking.hotel))
                .order_by(Booking.created_at.desc())
            )
            return list(result)

    async def hotel_dashboard(self, owner_id: str) -> DashboardData:
        async with self._sessions() as session:
            hotel = await session.scalar(select(Hotel).where(Hotel.owner_id == owner_id))
            if hotel is None:
                raise NotFoundError("No hotel found")
            result = await session.scalars(
                select(Booking)
                .where(Booking.hotel_id == hotel.id)
                .options(
                    selectinload(Booking.room),
                    selectinload(Booking.hotel),
                    selectinload(Booking.user),
                )
                .order_by(Booking.created_at.desc())
            )
            bookings = list(result)

        return DashboardData(
            total_bookings=len(bookings),
            total_revenue=sum(b.total_price for b in bookings),
            bookings=[OwnerBookingOut.model_validate(b) for b in bookings],
        )
