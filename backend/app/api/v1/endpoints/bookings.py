"""
Booking API Endpoints.

Bookings are created from a tour and mutated by partial updates. Every
update recalculates the derived financials; a status change also moves
the booked vehicle and driver between available / on booking.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.booking import Booking
from backend.app.schemas.booking import BookingCreate, BookingUpdate, BookingResponse, BookingListResponse
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.booking.booking_service import BookingService
from backend.app.domain.booking.repository import BookingRepository
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/bookings", tags=["Bookings"])


async def _get_booking_or_404(db: AsyncSession, booking_id: int) -> Booking:
    booking = await BookingRepository.get(db, booking_id)
    if booking is None:
        raise ResourceNotFoundError("Booking", booking_id)
    return booking


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by booking status"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List bookings, newest first."""
    count_query = select(func.count(Booking.id))
    query = select(Booking)
    if status_filter:
        count_query = count_query.where(Booking.status == status_filter)
        query = query.where(Booking.status == status_filter)

    total = (await db.execute(count_query)).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(query.order_by(Booking.id.desc()).offset(offset).limit(page_size))

    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    booking = await _get_booking_or_404(db, booking_id)
    return BookingResponse.model_validate(booking)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a booking from a tour.

    Schedule, booked distance, totals and tour type come from the tour.
    The booking is labelled "B NO -0001" style from its id.
    """
    booking = await BookingService.create_booking_from_tour(
        db, booking_data.model_dump(exclude_unset=True)
    )

    await log_event(
        db=db,
        action=AuditAction.BOOKING_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity="booking",
        entity_id=booking.id,
        metadata={"booking_name": booking.name, "tour_id": booking.tour_id}
    )

    return BookingResponse.model_validate(booking)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_data: BookingUpdate,
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Partially update a booking.

    Only fields actually sent are applied. Returns 409 if the booking
    changed concurrently; the client should reload and retry.
    """
    fields = await BookingService.apply_booking_update(
        db, booking_id, booking_data.model_dump(exclude_unset=True)
    )

    await log_event(
        db=db,
        action=AuditAction.BOOKING_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity="booking",
        entity_id=booking_id,
        metadata={"updated_fields": sorted(fields), "version": fields["version"]}
    )

    booking = await _get_booking_or_404(db, booking_id)
    return BookingResponse.model_validate(booking)


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: int = Path(..., description="Booking ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    booking = await _get_booking_or_404(db, booking_id)
    booking_name = booking.name
    await BookingRepository.delete(db, booking)

    await log_event(
        db=db,
        action=AuditAction.BOOKING_DELETED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity="booking",
        entity_id=booking_id,
        metadata={"booking_name": booking_name}
    )

    return {"message": "Booking deleted successfully", "id": booking_id}
