"""
Lead API Endpoints.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from backend.app.db.session import get_db
from backend.app.models.lead import Lead
from backend.app.schemas.lead import (
    LeadCreate, LeadUpdate, LeadResponse, LeadListResponse, LeadPicklistItem
)
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import (
    ResourceNotFoundError, NoFieldsToUpdateError, DuplicateResourceError
)

router = APIRouter(prefix="/leads", tags=["Leads"])


async def _get_lead_or_404(db: AsyncSession, lead_id: int) -> Lead:
    result = await db.execute(select(Lead).where(Lead.id == lead_id))
    lead = result.scalar_one_or_none()
    if not lead:
        raise ResourceNotFoundError("Lead", lead_id)
    return lead


async def _ensure_phone_free(db: AsyncSession, phone: str, exclude_id: Optional[int] = None):
    query = select(Lead.id).where(Lead.phone == phone)
    if exclude_id is not None:
        query = query.where(Lead.id != exclude_id)
    if (await db.execute(query)).first():
        raise DuplicateResourceError("Lead", "phone", phone)


@router.get("/picklist", response_model=List[LeadPicklistItem])
async def lead_picklist(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(Lead.id, Lead.name, Lead.phone).order_by(Lead.name))
    return [LeadPicklistItem(id=row.id, name=row.name, phone=row.phone) for row in result.all()]


@router.get("", response_model=LeadListResponse)
async def list_leads(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    total = (await db.execute(select(func.count(Lead.id)))).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(select(Lead).order_by(Lead.id.desc()).offset(offset).limit(page_size))

    return LeadListResponse(
        items=[LeadResponse.model_validate(l) for l in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: int = Path(..., description="Lead ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    lead = await _get_lead_or_404(db, lead_id)
    return LeadResponse.model_validate(lead)


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    lead_data: LeadCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a lead. A phone number already in use yields 409."""
    await _ensure_phone_free(db, lead_data.phone)

    data = lead_data.model_dump()
    data["status"] = data.get("status") or "New"
    lead = Lead(**data)

    db.add(lead)
    await db.commit()
    await db.refresh(lead)
    return LeadResponse.model_validate(lead)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_data: LeadUpdate,
    lead_id: int = Path(..., description="Lead ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    update_data = lead_data.model_dump(exclude_unset=True)
    if not update_data:
        raise NoFieldsToUpdateError("lead")

    lead = await _get_lead_or_404(db, lead_id)
    if update_data.get("phone"):
        await _ensure_phone_free(db, update_data["phone"], exclude_id=lead_id)

    for field, value in update_data.items():
        setattr(lead, field, value)

    await db.commit()
    await db.refresh(lead)
    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: int = Path(..., description="Lead ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    lead = await _get_lead_or_404(db, lead_id)
    await db.delete(lead)
    await db.commit()
    return {"message": "Lead deleted successfully", "id": lead_id}
