"""Booking router: view, create and change the caller's room booking."""

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DatabaseSession, RequiredAuth
from ..core.exceptions import ForbiddenError, ProblemDetailsException
from ..core.observability import metrics_collector
from ..schemas.booking import BookingIdResponse, BookingRequest, BookingWithRoom
from ..schemas.common import Problem
from ..schemas.hotel import Room
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": Problem, "description": "Malformed request body"},
    401: {"model": Problem, "description": "Missing or invalid bearer token"},
    403: {"model": Problem, "description": "Booking not allowed for this user or room"},
    404: {"model": Problem, "description": "Room or booking not found"},
}


def _json(model) -> JSONResponse:
    return JSONResponse(status_code=200, content=model.model_dump(mode="json", by_alias=True))


async def _run_guarded(operation: str, log_context: dict[str, Any], coro):
    """Await a service call, logging and counting refusals before re-raising them."""
    try:
        return await coro

    except ForbiddenError as e:
        metrics_collector.record_rejection(e.reason.name)
        logger.warning(
            f"{operation} refused",
            extra={**log_context, "reason": e.reason.value}
        )
        raise

    except ProblemDetailsException as e:
        logger.info(
            f"{operation} failed",
            extra={**log_context, "status_code": e.status_code, "title": e.title}
        )
        raise

    except Exception as e:
        logger.error(
            f"Unexpected error in {operation}",
            extra={**log_context, "error": str(e)},
            exc_info=True
        )
        raise


@router.get("", response_model=BookingWithRoom, responses=ERROR_RESPONSES)
async def get_booking(
    user_id: int = RequiredAuth,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Return the caller's booking and the room it is for."""
    booking_service = BookingService.from_session(db)

    booking = await _run_guarded(
        "booking retrieval",
        {"user_id": user_id},
        booking_service.get_booking_for_user(user_id),
    )

    return _json(BookingWithRoom(booking_id=booking.id, room=Room.model_validate(booking.room)))


@router.post("", response_model=BookingIdResponse, responses=ERROR_RESPONSES)
async def create_booking(
    request: BookingRequest,
    user_id: int = RequiredAuth,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """
    Book a room for the caller.

    The caller needs an enrollment with a paid, in-person ticket that
    includes a hotel, and the room must have a free place.
    """
    booking_service = BookingService.from_session(db)

    booking = await _run_guarded(
        "booking creation",
        {"user_id": user_id, "room_id": request.room_id},
        booking_service.create_booking(request.room_id, user_id),
    )
    metrics_collector.record_booking_created()

    logger.info(
        "Booking created",
        extra={"booking_id": booking.id, "user_id": user_id, "room_id": request.room_id}
    )
    return _json(BookingIdResponse(booking_id=booking.id))


@router.put("/{booking_id}", response_model=BookingIdResponse, responses=ERROR_RESPONSES)
async def update_booking(
    booking_id: int,
    request: BookingRequest,
    user_id: int = RequiredAuth,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """
    Move the caller's booking to another room.

    ``booking_id`` must be the caller's own booking.
    """
    booking_service = BookingService.from_session(db)

    booking = await _run_guarded(
        "booking update",
        {"user_id": user_id, "booking_id": booking_id, "room_id": request.room_id},
        booking_service.update_booking(booking_id, request.room_id, user_id),
    )
    metrics_collector.record_booking_updated()

    logger.info(
        "Booking moved to another room",
        extra={"booking_id": booking.id, "user_id": user_id, "room_id": request.room_id}
    )
    return _json(BookingIdResponse(booking_id=booking.id))
