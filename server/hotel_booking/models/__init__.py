"""Models module exporting all database models."""

from .booking import Booking
from .enrollment import Enrollment
from .hotel import Hotel, Room
from .ticket import Ticket, TicketStatus, TicketType
from .user import Session, User

__all__ = [
    # Accounts
    "User",
    "Session",

    # Event registration
    "Enrollment",
    "Ticket",
    "TicketStatus",
    "TicketType",

    # Lodging
    "Hotel",
    "Room",
    "Booking",
]
