"""Booking store: persists user-to-room assignments."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import func, insert, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import NotFoundError
from ..models.booking import Booking
from ..models.hotel import Room

logger = logging.getLogger(__name__)


class BookingRepository(ABC):
    """Read and write access to bookings."""

    @abstractmethod
    async def find_booking_by_user(self, user_id: int) -> Optional[Booking]:
        """Return the user's booking with ``room`` loaded, or None."""
        raise NotImplementedError

    @abstractmethod
    async def create_booking_record(self, room_id: int, user_id: int) -> Optional[Booking]:
        """
        Persist a new booking linking the user to the room.

        Returns None, writing nothing, if the room has no free place at the
        moment of the write.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_booking_room(self, booking_id: int, room_id: int) -> Optional[Booking]:
        """
        Point an existing booking at another room; id and owner are unchanged.

        Returns None, writing nothing, if the room has no free place at the
        moment of the write.

        Raises:
            NotFoundError: If the booking does not exist
        """
        raise NotImplementedError


def _room_has_vacancy(room_id: int):
    """SQL condition true while the room's bookings are below its capacity."""
    # Aliased so it is not correlated to the bookings row being updated
    room_bookings = Booking.__table__.alias("room_bookings")
    occupancy = (
        select(func.count(room_bookings.c.id))
        .where(room_bookings.c.room_id == room_id)
        .scalar_subquery()
    )
    capacity = select(Room.capacity).where(Room.id == room_id).scalar_subquery()
    return occupancy < capacity


class SqlAlchemyBookingRepository(BookingRepository):
    """
    Booking store backed by the relational store; writes commit the session.

    Each write re-checks capacity inside the same statement, so it stays
    within capacity even where the database ignores the room row lock.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_with_room(self, booking_id: int) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.room))
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_booking_by_user(self, user_id: int) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.room))
            .where(Booking.user_id == user_id)
            .order_by(Booking.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_booking_record(self, room_id: int, user_id: int) -> Optional[Booking]:
        stmt = (
            insert(Booking.__table__)
            .from_select(
                ["user_id", "room_id"],
                select(literal(user_id), literal(room_id)).where(_room_has_vacancy(room_id)),
            )
            .returning(Booking.__table__.c.id)
        )
        booking_id = (await self.db.execute(stmt)).scalar_one_or_none()
        await self.db.commit()

        if booking_id is None:
            logger.info("Booking insert skipped, room at capacity", extra={"room_id": room_id, "user_id": user_id})
            return None
        return await self._get_with_room(booking_id)

    async def update_booking_room(self, booking_id: int, room_id: int) -> Optional[Booking]:
        exists = await self.db.execute(select(Booking.id).where(Booking.id == booking_id))
        if exists.scalar_one_or_none() is None:
            logger.warning("Booking not found for room change", extra={"booking_id": booking_id})
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))

        stmt = (
            update(Booking.__table__)
            .where(Booking.__table__.c.id == booking_id, _room_has_vacancy(room_id))
            .values(room_id=room_id)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        if result.rowcount == 0:
            logger.info("Booking move skipped, room at capacity", extra={"booking_id": booking_id, "room_id": room_id})
            return None
        return await self._get_with_room(booking_id)
