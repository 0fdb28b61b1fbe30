"""Ticket directory: resolves an enrollment to its ticket and ticket type."""

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.ticket import Ticket


class TicketRepository(ABC):
    """Read access to tickets."""

    @abstractmethod
    async def find_ticket_by_enrollment(self, enrollment_id: int) -> Optional[Ticket]:
        """Return the enrollment's ticket with ``ticket_type`` loaded, or None."""
        raise NotImplementedError


class SqlAlchemyTicketRepository(TicketRepository):
    """Ticket directory backed by the relational store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_ticket_by_enrollment(self, enrollment_id: int) -> Optional[Ticket]:
        stmt = (
            select(Ticket)
            .options(selectinload(Ticket.ticket_type))
            .where(Ticket.enrollment_id == enrollment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
