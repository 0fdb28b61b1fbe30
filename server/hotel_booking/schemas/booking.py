"""Booking-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .hotel import Room


class BookingRequest(BaseModel):
    """Request body for creating a booking or moving it to another room."""

    model_config = ConfigDict(populate_by_name=True)

    room_id: int = Field(..., alias="roomId", description="Room to book")


class BookingIdResponse(BaseModel):
    """Response returned after a booking is created or changed."""

    model_config = ConfigDict(populate_by_name=True)

    booking_id: int = Field(..., alias="bookingId", gt=0, description="Booking ID")


class BookingWithRoom(BaseModel):
    """The user's booking together with the booked room."""

    model_config = ConfigDict(populate_by_name=True)

    booking_id: int = Field(..., alias="bookingId", description="Booking ID")
    room: Room = Field(..., alias="Room", description="Booked room")
