"""
Company Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List


class CompanyCreate(BaseModel):
    """Schema for creating a company with its per-km charges."""
    name: str = Field(..., min_length=1, max_length=150)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    localcharge: Optional[Decimal] = Field(None, ge=0, description="Per-km rate for Local tours")
    outstationcharge: Optional[Decimal] = Field(None, ge=0, description="Per-km rate for Outstation tours")
    lumpsumcharge: Optional[Decimal] = Field(None, ge=0, description="Per-km rate for Lumpsum tours")
    localdist: Optional[Decimal] = Field(None, ge=0)
    outstationdistance: Optional[Decimal] = Field(None, ge=0)


class CompanyUpdate(BaseModel):
    """Schema for updating a company."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    localcharge: Optional[Decimal] = Field(None, ge=0)
    outstationcharge: Optional[Decimal] = Field(None, ge=0)
    lumpsumcharge: Optional[Decimal] = Field(None, ge=0)
    localdist: Optional[Decimal] = Field(None, ge=0)
    outstationdistance: Optional[Decimal] = Field(None, ge=0)


class CompanyResponse(BaseModel):
    """Schema for company response."""
    id: int
    name: str
    address: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    localcharge: Optional[Decimal]
    outstationcharge: Optional[Decimal]
    lumpsumcharge: Optional[Decimal]
    localdist: Optional[Decimal]
    outstationdistance: Optional[Decimal]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyPicklistItem(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CompanyListResponse(BaseModel):
    items: List[CompanyResponse]
    total: int
    page: int
    page_size: int
