"""Ticket and TicketType model definitions."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .enrollment import Enrollment


class TicketStatus(str, Enum):
    """Ticket payment status enumeration."""
    RESERVED = "RESERVED"
    PAID = "PAID"


class TicketType(Base):
    """Class of ticket: in-person or remote, with or without hotel."""

    __tablename__ = "ticket_types"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Stored as minor units, e.g. cents
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    is_remote: Mapped[bool] = mapped_column(nullable=False, default=False)
    includes_hotel: Mapped[bool] = mapped_column(nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_ticket_type_price_non_negative"),
    )

    tickets: Mapped[list["Ticket"]] = relationship("Ticket", back_populates="ticket_type")

    def __repr__(self) -> str:
        return (
            f"<TicketType(id={self.id}, name='{self.name}', "
            f"is_remote={self.is_remote}, includes_hotel={self.includes_hotel})>"
        )


class Ticket(Base):
    """Proof of admission held by an enrollment."""

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(primary_key=True)
    enrollment_id: Mapped[int] = mapped_column(
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )
    ticket_type_id: Mapped[int] = mapped_column(
        ForeignKey("ticket_types.id"),
        nullable=False,
        index=True
    )
    status: Mapped[TicketStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TicketStatus.RESERVED
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    enrollment: Mapped["Enrollment"] = relationship("Enrollment", back_populates="ticket")
    ticket_type: Mapped["TicketType"] = relationship("TicketType", back_populates="tickets")

    def __repr__(self) -> str:
        return (
            f"<Ticket(id={self.id}, enrollment_id={self.enrollment_id}, "
            f"ticket_type_id={self.ticket_type_id}, status={self.status})>"
        )
