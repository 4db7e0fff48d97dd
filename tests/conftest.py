import hashlib
import hmac
import json
import time
from datetime import date, datetime, timezone

import httpx
import pytest
from httpx import ASGITransport

from quickstay.database import SessionFactory, create_engine, create_session_factory, init_models
from quickstay.mappers.stay import count_nights, occupied_nights
from quickstay.models import Booking, Hotel, Room, RoomNight, User, UserRole

WEBHOOK_SECRET = "whsec_test_secret"


def sign_stripe_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a ``stripe-signature`` header the way Stripe signs webhook bodies."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def checkout_completed_payload(booking_id: str | None, event_id: str = "evt_1") -> str:
    metadata = {"bookingId": booking_id} if booking_id else {}
    return json.dumps({
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_test_1", "object": "checkout.session", "metadata": metadata}},
    })


class Seeder:
    """Inserts fixture rows straight into the database."""

    def __init__(self, sessions: SessionFactory):
        self._sessions = sessions

    async def _add(self, obj):
        async with self._sessions() as session:
            session.add(obj)
            await session.commit()
        return obj

    async def user(
        self,
        user_id: str = "user_guest",
        *,
        role: str = UserRole.user,
        username: str = "guest",
        email: str = "guest@example.com",
    ) -> User:
        return await self._add(User(
            id=user_id, username=username, email=email, role=role, recent_searched_cities=[],
        ))

    async def hotel(self, owner: User, *, name: str = "Grand Hotel", city: str = "Lisbon") -> Hotel:
        return await self._add(Hotel(
            name=name, address="1 Main Street", contact="+1 555 0100", city=city, owner_id=owner.id,
        ))

    async def room(
        self,
        hotel: Hotel,
        *,
        price_per_night: float = 100.0,
        room_type: str = "Double Bed",
        is_available: bool = True,
        created_at: datetime | None = None,
    ) -> Room:
        return await self._add(Room(
            hotel_id=hotel.id,
            room_type=room_type,
            price_per_night=price_per_night,
            amenities=["Free WiFi"],
            images=[],
            is_available=is_available,
            created_at=created_at or datetime.now(timezone.utc),
        ))

    async def booking(
        self,
        user: User,
        room: Room,
        check_in: date,
        check_out: date,
        *,
        is_paid: bool = False,
        created_at: datetime | None = None,
    ) -> Booking:
        booking = Booking(
            user_id=user.id,
            room_id=room.id,
            hotel_id=room.hotel_id,
            check_in_date=check_in,
            check_out_date=check_out,
            guests=2,
            total_price=room.price_per_night * count_nights(check_in, check_out),
            is_paid=is_paid,
            created_at=created_at or datetime.now(timezone.utc),
        )
        booking.nights = [
            RoomNight(room_id=room.id, night=night) for night in occupied_nights(check_in, check_out)
        ]
        return await self._add(booking)

    async def get_booking(self, booking_id: str) -> Booking | None:
        async with self._sessions() as session:
            return await session.get(Booking, booking_id)

    async def get_user(self, user_id: str) -> User | None:
        async with self._sessions() as session:
            return await session.get(User, user_id)


@pytest.fixture
def mock_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("CLERK_JWKS_URL", "https://clerk.test/.well-known/jwks.json")
    monkeypatch.setenv("CLERK_SECRET_KEY", "sk_clerk_test")
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setenv("FRONTEND_URL", "http://frontend.test")
    monkeypatch.setenv("PROFILE_RETRY_DELAY", "0")
    monkeypatch.setenv("SMTP_HOST", "")


@pytest.fixture
async def sessions(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def seed(sessions):
    return Seeder(sessions)


@pytest.fixture
async def client(mock_env):
    from quickstay.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def app_seed(client):
    from quickstay.main import app

    return Seeder(app.state.sessions)


@pytest.fixture
def login_as(client):
    """Authenticate every request as the given user, bypassing token checks."""
    from quickstay.dependencies import get_current_user
    from quickstay.main import app

    def _login(user: User) -> None:
        app.dependency_overrides[get_current_user] = lambda: user

    yield _login
    app.dependency_overrides.clear()


@pytest.fixture
def sign_payload():
    return sign_stripe_payload


@pytest.fixture
def checkout_payload():
    return checkout_completed_payload
