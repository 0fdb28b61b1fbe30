"""Concurrency tests for booking operations."""

import asyncio

import pytest
import pytest_asyncio
from factories import Factory
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from hotel_booking.core.database import Base
from hotel_booking.core.exceptions import ForbiddenError, ForbiddenReason
from hotel_booking.models import Booking
from hotel_booking.services.booking_service import BookingService


@pytest_asyncio.fixture(scope="function")
async def sessions(tmp_path):
    """Session factory over a database file, one connection per session."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    await engine.dispose()


async def _occupancy(sessions, room_id: int) -> int:
    async with sessions() as db:
        stmt = select(func.count()).select_from(Booking).where(Booking.room_id == room_id)
        return (await db.execute(stmt)).scalar_one()


def _split(results):
    booked = [r for r in results if isinstance(r, Booking)]
    refused = [r for r in results if not isinstance(r, Booking)]
    return booked, refused


@pytest.mark.asyncio
async def test_concurrent_creates_no_overbooking(sessions):
    """Parallel requests for a room never book more places than it has."""
    capacity = 2
    async with sessions() as setup:
        factory = Factory(setup)
        room = await factory.room(await factory.hotel(), capacity=capacity)
        users = [await factory.eligible_user() for _ in range(6)]

    async def book(user_id: int):
        async with sessions() as db:
            return await BookingService.from_session(db).create_booking(room.id, user_id)

    results = await asyncio.gather(*(book(user.id) for user in users), return_exceptions=True)
    booked, refused = _split(results)

    assert len(booked) == capacity
    assert all(isinstance(e, ForbiddenError) for e in refused), refused
    assert {e.reason for e in refused} == {ForbiddenReason.ROOM_FULL}
    assert await _occupancy(sessions, room.id) == capacity


@pytest.mark.asyncio
async def test_concurrent_creates_for_last_place(sessions):
    async with sessions() as setup:
        factory = Factory(setup)
        room = await factory.room(await factory.hotel(), capacity=1)
        first = await factory.eligible_user()
        second = await factory.eligible_user()

    async def book(user_id: int):
        async with sessions() as db:
            return await BookingService.from_session(db).create_booking(room.id, user_id)

    results = await asyncio.gather(book(first.id), book(second.id), return_exceptions=True)
    booked, refused = _split(results)

    assert len(booked) <= 1
    assert await _occupancy(sessions, room.id) == len(booked)
    assert all(isinstance(e, ForbiddenError) and e.reason is ForbiddenReason.ROOM_FULL for e in refused)


@pytest.mark.asyncio
async def test_concurrent_moves_into_last_place(sessions):
    """Two guests moving into the same single room: only one gets in."""
    async with sessions() as setup:
        factory = Factory(setup)
        hotel = await factory.hotel()
        origin = await factory.room(hotel, capacity=3)
        target = await factory.room(hotel, capacity=1)
        guests = []
        for _ in range(2):
            user = await factory.eligible_user()
            guests.append((user, await factory.booking(user, origin)))

    async def move(user_id: int, booking_id: int):
        async with sessions() as db:
            return await BookingService.from_session(db).update_booking(booking_id, target.id, user_id)

    results = await asyncio.gather(
        *(move(user.id, booking.id) for user, booking in guests), return_exceptions=True
    )
    moved, refused = _split(results)

    assert len(moved) <= 1
    assert await _occupancy(sessions, target.id) == len(moved)
    assert await _occupancy(sessions, origin.id) == 2 - len(moved)
    assert all(isinstance(e, ForbiddenError) and e.reason is ForbiddenReason.ROOM_FULL for e in refused)
