"""Collaborator interfaces consulted by the booking service, with SQLAlchemy implementations."""

from .booking import BookingRepository, SqlAlchemyBookingRepository
from .enrollment import EnrollmentRepository, SqlAlchemyEnrollmentRepository
from .room import RoomRepository, SqlAlchemyRoomRepository
from .ticket import SqlAlchemyTicketRepository, TicketRepository

__all__ = [
    "BookingRepository",
    "EnrollmentRepository",
    "RoomRepository",
    "TicketRepository",
    "SqlAlchemyBookingRepository",
    "SqlAlchemyEnrollmentRepository",
    "SqlAlchemyRoomRepository",
    "SqlAlchemyTicketRepository",
]
