"""Booking service: eligibility checks gating every room booking."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ForbiddenError, ForbiddenReason, NotFoundError
from ..models.booking import Booking
from ..models.hotel import Room
from ..models.ticket import TicketStatus
from ..repositories import (
    BookingRepository,
    EnrollmentRepository,
    RoomRepository,
    SqlAlchemyBookingRepository,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyRoomRepository,
    SqlAlchemyTicketRepository,
    TicketRepository,
)

logger = structlog.get_logger(__name__)


class BookingService:
    """
    Decides whether a user may book or change a hotel room and performs the write.

    Every check re-reads its collaborator, one at a time and in a fixed
    order, and the first failing check raises. Nothing is written until all
    checks have passed. The service keeps no state between calls.
    """

    def __init__(
        self,
        enrollments: EnrollmentRepository,
        tickets: TicketRepository,
        rooms: RoomRepository,
        bookings: BookingRepository,
    ):
        self.enrollments = enrollments
        self.tickets = tickets
        self.rooms = rooms
        self.bookings = bookings

    @classmethod
    def from_session(cls, db: AsyncSession) -> "BookingService":
        """Build a service whose collaborators share one database session."""
        return cls(
            enrollments=SqlAlchemyEnrollmentRepository(db),
            tickets=SqlAlchemyTicketRepository(db),
            rooms=SqlAlchemyRoomRepository(db),
            bookings=SqlAlchemyBookingRepository(db),
        )

    async def _ensure_ticket_allows_hotel(self, user_id: int) -> None:
        """
        Check that the user holds a paid, in-person ticket that includes a hotel.

        Raises:
            ForbiddenError: On the first missing enrollment, missing ticket,
                unpaid ticket, remote ticket type or ticket type without hotel
        """
        enrollment = await self.enrollments.find_enrollment_by_user(user_id)
        if enrollment is None:
            raise ForbiddenError(ForbiddenReason.ENROLLMENT_NOT_FOUND)

        ticket = await self.tickets.find_ticket_by_enrollment(enrollment.id)
        if ticket is None:
            raise ForbiddenError(ForbiddenReason.TICKET_NOT_FOUND)
        if ticket.status != TicketStatus.PAID:
            raise ForbiddenError(ForbiddenReason.TICKET_NOT_PAID)
        if ticket.ticket_type.is_remote:
            raise ForbiddenError(ForbiddenReason.TICKET_IS_REMOTE)
        if not ticket.ticket_type.includes_hotel:
            raise ForbiddenError(ForbiddenReason.TICKET_WITHOUT_HOTEL)

    async def _ensure_room_has_vacancy(self, room_id: int) -> Room:
        """
        Load the target room, locked for the rest of the transaction, and check it has a free place.

        Raises:
            NotFoundError: If the room does not exist
            ForbiddenError: If the room is already at capacity
        """
        room = await self.rooms.find_room_by_id(room_id, lock=True)
        if room is None:
            raise NotFoundError(resource_type="room", resource_id=str(room_id))
        if not room.has_vacancy:
            raise ForbiddenError(ForbiddenReason.ROOM_FULL)
        return room

    async def get_booking_for_user(self, user_id: int) -> Booking:
        """
        Get the user's booking together with its room.

        Raises:
            NotFoundError: If the user has no booking
        """
        booking = await self.bookings.find_booking_by_user(user_id)
        if booking is None:
            raise NotFoundError(resource_type="booking", detail="The user has no booking")
        return booking

    async def create_booking(self, room_id: int, user_id: int) -> Booking:
        """
        Book a room for the user.

        Args:
            room_id: Room to book
            user_id: Authenticated user making the request

        Returns:
            The created booking

        Raises:
            ForbiddenError: If the user's enrollment or ticket does not allow
                a hotel booking, or the room is full
            NotFoundError: If the room does not exist
        """
        await self._ensure_ticket_allows_hotel(user_id)
        room = await self._ensure_room_has_vacancy(room_id)
        occupancy_before = room.occupancy

        booking = await self.bookings.create_booking_record(room_id, user_id)
        if booking is None:
            # Another request took the last place between the check and the write
            raise ForbiddenError(ForbiddenReason.ROOM_FULL)

        logger.info(
            "booking_created",
            booking_id=booking.id,
            user_id=user_id,
            room_id=room_id,
            occupancy_before=occupancy_before,
            capacity=room.capacity,
        )
        return booking

    async def update_booking(self, booking_id: int, room_id: int, user_id: int) -> Booking:
        """
        Move the user's booking to another room.

        The same ticket and capacity checks as for a new booking apply to the
        target room. The booking to change is found through the user, never
        through ``booking_id`` alone, so a caller can only change their own.

        Args:
            booking_id: Booking the caller wants to change
            room_id: New room
            user_id: Authenticated user making the request

        Returns:
            The updated booking

        Raises:
            ForbiddenError: If any eligibility check fails, the user has no
                booking, or ``booking_id`` is not the user's booking
            NotFoundError: If the room does not exist
        """
        await self._ensure_ticket_allows_hotel(user_id)
        await self._ensure_room_has_vacancy(room_id)

        current = await self.bookings.find_booking_by_user(user_id)
        if current is None:
            raise ForbiddenError(ForbiddenReason.BOOKING_NOT_FOUND)
        if current.id != booking_id:
            raise ForbiddenError(ForbiddenReason.BOOKING_NOT_OWNED)

        previous_room_id = current.room_id
        booking = await self.bookings.update_booking_room(booking_id, room_id)
        if booking is None:
            raise ForbiddenError(ForbiddenReason.ROOM_FULL)

        logger.info(
            "booking_room_changed",
            booking_id=booking.id,
            user_id=user_id,
            from_room_id=previous_room_id,
            to_room_id=room_id,
        )
        return booking
