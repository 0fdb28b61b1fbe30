"""Room directory: resolves a room with its current occupants."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.hotel import Room

logger = logging.getLogger(__name__)


class RoomRepository(ABC):
    """Read access to rooms and their occupancy."""

    @abstractmethod
    async def find_room_by_id(self, room_id: int, lock: bool = False) -> Optional[Room]:
        """
        Return the room with ``bookings`` loaded, or None.

        Args:
            room_id: Room to look up
            lock: Hold the room exclusively until the caller's transaction
                ends, so a capacity check and the booking write that follows
                it cannot interleave with another request for the same room
        """
        raise NotImplementedError


class SqlAlchemyRoomRepository(RoomRepository):
    """Room directory backed by the relational store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_room_by_id(self, room_id: int, lock: bool = False) -> Optional[Room]:
        stmt = (
            select(Room)
            .options(selectinload(Room.bookings))
            .where(Room.id == room_id)
            .execution_options(populate_existing=True)
        )
        if lock:
            # Row lock released at commit/rollback; dialects without
            # FOR UPDATE support (SQLite) render the plain SELECT
            stmt = stmt.with_for_update(of=Room)

        result = await self.db.execute(stmt)
        room = result.scalar_one_or_none()

        if room is not None and lock:
            logger.debug(
                "Acquired row lock for room",
                extra={"room_id": room_id, "occupancy": room.occupancy, "capacity": room.capacity}
            )

        return room
