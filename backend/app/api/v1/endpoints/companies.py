"""
Company API Endpoints.

Companies own the per-km charges tours are priced from.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List
from backend.app.db.session import get_db
from backend.app.models.company import Company
from backend.app.schemas.company import (
    CompanyCreate, CompanyUpdate, CompanyResponse, CompanyListResponse, CompanyPicklistItem
)
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import ResourceNotFoundError, NoFieldsToUpdateError

router = APIRouter(prefix="/companies", tags=["Companies"])


async def _get_company_or_404(db: AsyncSession, company_id: int) -> Company:
    result = await db.execute(select(Company).where(Company.id == company_id))
    company = result.scalar_one_or_none()
    if not company:
        raise ResourceNotFoundError("Company", company_id)
    return company


@router.get("/picklist", response_model=List[CompanyPicklistItem])
async def company_picklist(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Id / name pairs for selection lists."""
    result = await db.execute(select(Company.id, Company.name).order_by(Company.name))
    return [CompanyPicklistItem(id=row.id, name=row.name) for row in result.all()]


@router.get("", response_model=CompanyListResponse)
async def list_companies(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    total = (await db.execute(select(func.count(Company.id)))).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(select(Company).order_by(Company.id).offset(offset).limit(page_size))

    return CompanyListResponse(
        items=[CompanyResponse.model_validate(c) for c in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int = Path(..., description="Company ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    company = await _get_company_or_404(db, company_id)
    return CompanyResponse.model_validate(company)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    company = Company(**company_data.model_dump())
    db.add(company)
    await db.commit()
    await db.refresh(company)
    return CompanyResponse.model_validate(company)


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_data: CompanyUpdate,
    company_id: int = Path(..., description="Company ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update company details.

    Changing a charge does not re-price existing tours or bookings.
    """
    update_data = company_data.model_dump(exclude_unset=True)
    if not update_data:
        raise NoFieldsToUpdateError("company")

    company = await _get_company_or_404(db, company_id)
    for field, value in update_data.items():
        setattr(company, field, value)

    await db.commit()
    await db.refresh(company)
    return CompanyResponse.model_validate(company)


@router.delete("/{company_id}")
async def delete_company(
    company_id: int = Path(..., description="Company ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    company = await _get_company_or_404(db, company_id)
    await db.delete(company)
    await db.commit()
    return {"message": "Company deleted successfully", "id": company_id}
