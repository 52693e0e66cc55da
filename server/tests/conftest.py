"""Test configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vip_transfer.core.cache import MemoryCache, OutputCache
from vip_transfer.core.clock import FrozenClock
from vip_transfer.core.config import settings
from vip_transfer.core.database import Base, build_engine
from vip_transfer.core.dependencies import (
    get_cache,
    get_clock,
    get_db,
    get_dispatcher,
    get_output_cache,
)
from vip_transfer.models import *  # noqa: F403 - Import all models
from vip_transfer.models import Region, Vehicle, VehicleImage
from vip_transfer.notifications.base import Channel, ChannelResult, Outcome
from vip_transfer.schemas.reservation import Reservation as ReservationSchema

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# 09:00 UTC is 12:00 in Europe/Istanbul
NOW_UTC = datetime(2026, 6, 1, 9, 0, 0)
TODAY = date(2026, 6, 1)


class RecordingDispatcher:
    """Stands in for the notification fan-out and remembers what it was asked to send."""

    def __init__(self):
        self.created: list[ReservationSchema] = []
        self.confirmed: list[ReservationSchema] = []

    async def notify_created(self, reservation):
        self.created.append(reservation)
        return [
            ChannelResult(Channel.CUSTOMER_EMAIL, Outcome.SENT),
            ChannelResult(Channel.ADMIN_EMAIL, Outcome.SENT),
            ChannelResult(Channel.WHATSAPP, Outcome.SKIPPED),
        ]

    async def notify_confirmed(self, reservation):
        self.confirmed.append(reservation)
        return ChannelResult(Channel.CUSTOMER_EMAIL, Outcome.SENT)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with foreign keys enforced."""
    engine = build_engine(TEST_DATABASE_URL)

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def clock():
    return FrozenClock(NOW_UTC, "Europe/Istanbul")


@pytest.fixture
def cache(clock):
    return MemoryCache(clock)


@pytest.fixture
def output_cache(clock):
    return OutputCache(clock)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest_asyncio.fixture
async def vehicle(test_session):
    """Active vehicle with one gallery image and a 45 EUR flat fee."""
    vehicle = Vehicle(
        name="Mercedes Vito VIP",
        type="Minivan",
        brand="Mercedes-Benz",
        model="Vito",
        passenger_capacity=6,
        luggage_capacity=6,
        image_url="/images/vehicles/vito.jpg",
        minimum_price=Decimal("45.00"),
        price_per_km=Decimal("2.50"),
        currency="EUR",
        is_active=1,
        sort_order=1,
        created_at=NOW_UTC,
        images=[VehicleImage(image_url="/images/vehicles/vito-2.jpg", sort_order=0, created_at=NOW_UTC)],
    )
    test_session.add(vehicle)
    await test_session.commit()
    return vehicle


@pytest_asyncio.fixture
async def region(test_session):
    region = Region(
        name="Kemer",
        name_en="Kemer",
        price=Decimal("45.00"),
        currency="EUR",
        distance_km=45.0,
        estimated_duration_minutes=50,
        sort_order=1,
        is_active=1,
        created_at=NOW_UTC,
    )
    test_session.add(region)
    await test_session.commit()
    return region


@pytest.fixture
def sample_reservation_data(vehicle):
    """Booking form payload for the vehicle fixture, two hours ahead of the frozen clock."""
    return {
        "customer_name": "Anna Schmidt",
        "customer_phone": "+49 170 1234567",
        "customer_email": "anna@example.com",
        "pickup_location_type": "Airport",
        "pickup_location": "Antalya Airport",
        "dropoff_location_type": "Hotel",
        "dropoff_location": "Rixos Premium Tekirova",
        "transfer_date": TODAY.isoformat(),
        "transfer_time": "14:00",
        "flight_number": "XQ 123",
        "number_of_adults": 2,
        "number_of_children": 1,
        "luggage_count": 3,
        "language": "DE",
        "vehicle_id": vehicle.id,
        "estimated_price": 45,
        "currency": "eur",
    }


@pytest.fixture
def admin_headers():
    token = jwt.encode({"sub": "admin-1", "username": "admin"}, settings.bearer_token_secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, cache, output_cache, clock, dispatcher):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from vip_transfer.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from vip_transfer.core.middleware import setup_middleware
    from vip_transfer.routers import (
        admin_catalog,
        admin_reservations,
        admin_settings,
        catalog,
        health,
        metrics,
        reservation,
    )

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="VIP Transfer API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    setup_middleware(app, enable_logging=False)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register API routers
    app.include_router(health.router)
    app.include_router(catalog.router)
    app.include_router(reservation.router)
    app.include_router(admin_reservations.router)
    app.include_router(admin_catalog.router)
    app.include_router(admin_settings.router)
    app.include_router(metrics.router)

    # Override dependencies
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_output_cache] = lambda: output_cache
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
