#!/usr/bin/env python3
"""Apply migrations and seed a demo attendee, hotel and rooms for the booking API."""

import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

import jwt
from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from hotel_booking.core.config import settings
from hotel_booking.core.database import async_session_factory, close_db
from hotel_booking.core.security import hash_password
from hotel_booking.models import Enrollment, Hotel, Room, Session, Ticket, TicketStatus, TicketType, User

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_EMAIL = "attendee@example.com"
DEMO_PASSWORD = "demo-password"


def run_migrations() -> None:
    """Upgrade the database schema to the latest revision."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Create one attendee with a paid hotel ticket, a hotel and three rooms."""
    async with async_session_factory() as db:
        existing_users = await db.execute(select(func.count()).select_from(User))
        if existing_users.scalar_one() > 0:
            logger.info("Sample data already exists, skipping...")
            return

        try:
            user = User(
                email=DEMO_EMAIL,
                password=hash_password(DEMO_PASSWORD),
            )
            db.add(user)
            await db.flush()

            enrollment = Enrollment(
                user_id=user.id,
                name="Demo Attendee",
                cpf="00000000000",
                birthday=date(1990, 1, 1),
                phone="5511999999999",
            )
            with_hotel = TicketType(name="In person + hotel", price=60000, is_remote=False, includes_hotel=True)
            db.add_all([
                enrollment,
                with_hotel,
                TicketType(name="In person", price=25000, is_remote=False, includes_hotel=False),
                TicketType(name="Online", price=10000, is_remote=True, includes_hotel=False),
            ])
            await db.flush()

            db.add(Ticket(enrollment_id=enrollment.id, ticket_type_id=with_hotel.id, status=TicketStatus.PAID))

            hotel = Hotel(name="Driven Resort", image="https://example.com/hotel.jpg")
            hotel.rooms = [
                Room(name="101", capacity=1),
                Room(name="102", capacity=2),
                Room(name="103", capacity=3),
            ]
            db.add(hotel)

            token = jwt.encode({"sub": str(user.id)}, settings.jwt_secret, algorithm="HS256")
            db.add(Session(user_id=user.id, token=token))

            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise

    logger.info("Sample data created successfully!")
    logger.info(f"Bearer token for {DEMO_EMAIL}: {token}")


async def main() -> None:
    logger.info("Starting hotel booking API setup...")

    # Alembic's env.py drives its own event loop
    await asyncio.to_thread(run_migrations)
    await create_sample_data()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("Start the API server with: cd server && uvicorn hotel_booking.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
