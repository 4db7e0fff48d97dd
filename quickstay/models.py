from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

PAY_AT_HOTEL = "Pay At Hotel"


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(StrEnum):
    user = "user"
    hotel_owner = "hotelOwner"


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    # Subject of the identity provider's tokens
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(120))
    email: Mapped[str] = mapped_column(String(255))
    image: Mapped[str | None] = mapped_column(String(1024), default=None)
    role: Mapped[str] = mapped_column(String(16), default=UserRole.user)
    recent_searched_cities: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Hotel(Base):
    __tablename__ = "hotels"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200))
    address: Mapped[str] = mapped_column(String(255))
    contact: Mapped[str] = mapped_column(String(64))
    city: Mapped[str] = mapped_column(String(64), index=True)
    # One hotel per owner
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    owner: Mapped[User] = relationship()


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    hotel_id: Mapped[str] = mapped_column(ForeignKey("hotels.id"), index=True)
    room_type: Mapped[str] = mapped_column(String(64))
    price_per_night: Mapped[float] = mapped_column(Float)
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    hotel: Mapped[Hotel] = relationship()


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    room_id: Mapped[str] = mapped_column(ForeignKey("rooms.id"), index=True)
    hotel_id: Mapped[str] = mapped_column(ForeignKey("hotels.id"), index=True)
    check_in_date: Mapped[date] = mapped_column(Date)
    check_out_date: Mapped[date] = mapped_column(Date)
    guests: Mapped[int] = mapped_column(Integer, default=1)
    total_price: Mapped[float] = mapped_column(Float)
    payment_method: Mapped[str] = mapped_column(String(32), default=PAY_AT_HOTEL)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    user: Mapped[User] = relationship()
    room: Mapped[Room] = relationship()
    hotel: Mapped[Hotel] = relationship()
    nights: Mapped[list[RoomNight]] = relationship(cascade="all, delete-orphan")


class RoomNight(Base):
    """One occupied night of a room.

    The (room, night) uniqueness constraint is what prevents two concurrent
    bookings from both committing an overlapping stay.
    """

    __tablename__ = "room_nights"
    __table_args__ = (UniqueConstraint("room_id", "night", name="uq_room_night"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(ForeignKey("rooms.id"))
    night: Mapped[date] = mapped_column(Date)
    booking_id: Mapped[str] = mapped_column(ForeignKey("bookings.id"), index=True)
