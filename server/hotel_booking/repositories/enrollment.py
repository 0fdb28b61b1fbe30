"""Enrollment directory: resolves a user to their event enrollment."""

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.enrollment import Enrollment


class EnrollmentRepository(ABC):
    """Read access to enrollments."""

    @abstractmethod
    async def find_enrollment_by_user(self, user_id: int) -> Optional[Enrollment]:
        """Return the user's enrollment, or None when they never enrolled."""
        raise NotImplementedError


class SqlAlchemyEnrollmentRepository(EnrollmentRepository):
    """Enrollment directory backed by the relational store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_enrollment_by_user(self, user_id: int) -> Optional[Enrollment]:
        stmt = select(Enrollment).where(Enrollment.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
