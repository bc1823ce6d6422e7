"""
Driver API Endpoints.

Driver availability is normally driven by booking status changes; it can
still be corrected by hand here.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from backend.app.db.session import get_db
from backend.app.models.driver import Driver
from backend.app.models.fleet_enums import DriverStatus
from backend.app.schemas.driver import (
    DriverCreate, DriverUpdate, DriverResponse, DriverListResponse, DriverPicklistItem
)
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import (
    ResourceNotFoundError, NoFieldsToUpdateError, DuplicateResourceError
)

router = APIRouter(prefix="/drivers", tags=["Drivers"])


async def _get_driver_or_404(db: AsyncSession, driver_id: int) -> Driver:
    result = await db.execute(select(Driver).where(Driver.id == driver_id))
    driver = result.scalar_one_or_none()
    if not driver:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


async def _ensure_phone_free(db: AsyncSession, phone: str, exclude_id: Optional[int] = None):
    query = select(Driver.id).where(Driver.phone == phone)
    if exclude_id is not None:
        query = query.where(Driver.id != exclude_id)
    if (await db.execute(query)).first():
        raise DuplicateResourceError("Driver", "phone", phone)


@router.get("/picklist", response_model=List[DriverPicklistItem])
async def driver_picklist(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(Driver.id, Driver.name, Driver.status).order_by(Driver.name))
    return [DriverPicklistItem(id=row.id, name=row.name, status=row.status) for row in result.all()]


@router.get("", response_model=DriverListResponse)
async def list_drivers(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    total = (await db.execute(select(func.count(Driver.id)))).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(select(Driver).order_by(Driver.id).offset(offset).limit(page_size))

    return DriverListResponse(
        items=[DriverResponse.model_validate(d) for d in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver_or_404(db, driver_id)
    return DriverResponse.model_validate(driver)


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    driver_data: DriverCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Register a driver. A phone number already in use yields 409."""
    await _ensure_phone_free(db, driver_data.phone)

    data = driver_data.model_dump()
    data["status"] = data.get("status") or DriverStatus.AVAILABLE.value
    driver = Driver(**data)

    db.add(driver)
    await db.commit()
    await db.refresh(driver)
    return DriverResponse.model_validate(driver)


@router.patch("/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_data: DriverUpdate,
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    update_data = driver_data.model_dump(exclude_unset=True)
    if not update_data:
        raise NoFieldsToUpdateError("driver")

    driver = await _get_driver_or_404(db, driver_id)
    if update_data.get("phone"):
        await _ensure_phone_free(db, update_data["phone"], exclude_id=driver_id)

    for field, value in update_data.items():
        setattr(driver, field, value)

    await db.commit()
    await db.refresh(driver)
    return DriverResponse.model_validate(driver)


@router.delete("/{driver_id}")
async def delete_driver(
    driver_id: int = Path(..., description="Driver ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver_or_404(db, driver_id)
    await db.delete(driver)
    await db.commit()
    return {"message": "Driver deleted successfully", "id": driver_id}
