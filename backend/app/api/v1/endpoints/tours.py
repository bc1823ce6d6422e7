"""
Tour API Endpoints.

Tour price and total are always derived server-side from the company's
per-km charge for the tour type.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.tour import Tour
from backend.app.schemas.tour import TourCreate, TourUpdate, TourResponse, TourListResponse
from backend.app.core.dependencies import get_current_user
from backend.app.domain.booking.tour_service import TourService
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/tours", tags=["Tours"])


@router.get("", response_model=TourListResponse)
async def list_tours(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    company_id: Optional[int] = Query(None, description="Filter by company"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List tours, newest first."""
    count_query = select(func.count(Tour.id))
    query = select(Tour)
    if company_id is not None:
        count_query = count_query.where(Tour.company_id == company_id)
        query = query.where(Tour.company_id == company_id)

    total = (await db.execute(count_query)).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(query.order_by(Tour.id.desc()).offset(offset).limit(page_size))

    return TourListResponse(
        items=[TourResponse.model_validate(t) for t in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{tour_id}", response_model=TourResponse)
async def get_tour(
    tour_id: int = Path(..., description="Tour ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tour = await TourService.get(db, tour_id)
    return TourResponse.model_validate(tour)


@router.post("", response_model=TourResponse, status_code=status.HTTP_201_CREATED)
async def create_tour(
    tour_data: TourCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a tour.

    `price` is the company charge for the tour type, `total_amount` is
    distance_km * 2 * price + premium, `driver_id` follows the vehicle.
    """
    tour = await TourService.create_tour(db, tour_data.model_dump(exclude_unset=True))

    await log_event(
        db=db,
        action=AuditAction.TOUR_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity="tour",
        entity_id=tour.id,
        metadata={"tour_name": tour.name, "type_of_tour": tour.type_of_tour}
    )

    return TourResponse.model_validate(tour)


@router.patch("/{tour_id}", response_model=TourResponse)
async def update_tour(
    tour_data: TourUpdate,
    tour_id: int = Path(..., description="Tour ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Partially update a tour; price and total are re-derived as needed."""
    update_data = tour_data.model_dump(exclude_unset=True)
    tour = await TourService.update_tour(db, tour_id, update_data)

    await log_event(
        db=db,
        action=AuditAction.TOUR_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity="tour",
        entity_id=tour_id,
        metadata={"updated_fields": sorted(update_data)}
    )

    return TourResponse.model_validate(tour)


@router.delete("/{tour_id}")
async def delete_tour(
    tour_id: int = Path(..., description="Tour ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await TourService.delete_tour(db, tour_id)

    await log_event(
        db=db,
        action=AuditAction.TOUR_DELETED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity="tour",
        entity_id=tour_id,
    )

    return {"message": "Tour deleted successfully", "id": tour_id}
