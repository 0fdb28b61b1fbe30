"""Hotel-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Room(BaseModel):
    """Room response schema."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., description="Unique room ID")
    name: str = Field(..., description="Room name")
    capacity: int = Field(..., ge=1, description="Number of guests the room holds")
    hotel_id: int = Field(..., alias="hotelId", description="Hotel the room belongs to")
    created_at: datetime = Field(..., alias="createdAt", description="Creation time (ISO 8601)")
    updated_at: datetime = Field(..., alias="updatedAt", description="Last update time (ISO 8601)")
