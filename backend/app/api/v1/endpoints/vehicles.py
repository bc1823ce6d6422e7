"""
Vehicle API Endpoints.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from backend.app.db.session import get_db
from backend.app.models.vehicle import Vehicle
from backend.app.models.driver import Driver
from backend.app.models.fleet_enums import VehicleAvailability
from backend.app.schemas.vehicle import (
    VehicleCreate, VehicleUpdate, VehicleResponse, VehicleListResponse, VehiclePicklistItem
)
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import (
    ResourceNotFoundError, NoFieldsToUpdateError, DuplicateResourceError
)

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


async def _get_vehicle_or_404(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = result.scalar_one_or_none()
    if not vehicle:
        raise ResourceNotFoundError("Vehicle", vehicle_id)
    return vehicle


async def _ensure_registration_free(db: AsyncSession, registration_number: str, exclude_id: Optional[int] = None):
    query = select(Vehicle.id).where(Vehicle.registration_number == registration_number)
    if exclude_id is not None:
        query = query.where(Vehicle.id != exclude_id)
    if (await db.execute(query)).first():
        raise DuplicateResourceError("Vehicle", "registration_number", registration_number)


@router.get("/picklist", response_model=List[VehiclePicklistItem])
async def vehicle_picklist(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Vehicles with their assigned driver's name and availability."""
    result = await db.execute(
        select(
            Vehicle.id,
            Vehicle.name,
            Vehicle.registration_number,
            Vehicle.available_status,
            Vehicle.assigned_driver_id,
            Driver.name.label("driver_name"),
            Driver.status.label("driver_status"),
        )
        .outerjoin(Driver, Vehicle.assigned_driver_id == Driver.id)
        .order_by(Vehicle.id)
    )
    return [VehiclePicklistItem(**row) for row in result.mappings().all()]


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    total = (await db.execute(select(func.count(Vehicle.id)))).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(select(Vehicle).order_by(Vehicle.id).offset(offset).limit(page_size))

    return VehicleListResponse(
        items=[VehicleResponse.model_validate(v) for v in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await _get_vehicle_or_404(db, vehicle_id)
    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Register a vehicle. A registration number already in use yields 409."""
    await _ensure_registration_free(db, vehicle_data.registration_number)

    data = vehicle_data.model_dump()
    data["available_status"] = data.get("available_status") or VehicleAvailability.AVAILABLE.value
    vehicle = Vehicle(**data)

    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)
    return VehicleResponse.model_validate(vehicle)


@router.patch("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_data: VehicleUpdate,
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update vehicle details.

    Reassigning the driver here does not touch existing bookings; they pick
    up the new driver on their next vehicle change.
    """
    update_data = vehicle_data.model_dump(exclude_unset=True)
    if not update_data:
        raise NoFieldsToUpdateError("vehicle")

    vehicle = await _get_vehicle_or_404(db, vehicle_id)
    if update_data.get("registration_number"):
        await _ensure_registration_free(db, update_data["registration_number"], exclude_id=vehicle_id)

    for field, value in update_data.items():
        setattr(vehicle, field, value)

    await db.commit()
    await db.refresh(vehicle)
    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int = Path(..., description="Vehicle ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    vehicle = await _get_vehicle_or_404(db, vehicle_id)
    await db.delete(vehicle)
    await db.commit()
    return {"message": "Vehicle deleted successfully", "id": vehicle_id}
