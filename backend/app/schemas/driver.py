"""
Driver Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class DriverCreate(BaseModel):
    """Schema for registering a driver. Phone numbers are unique."""
    name: str = Field(..., min_length=1, max_length=150)
    phone: str = Field(..., min_length=5, max_length=20)
    company_id: Optional[int] = None
    license_number: Optional[str] = Field(None, max_length=50)
    aadhar_card: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    status: Optional[str] = Field(None, max_length=50, description="Defaults to Available")


class DriverUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    phone: Optional[str] = Field(None, min_length=5, max_length=20)
    company_id: Optional[int] = None
    license_number: Optional[str] = Field(None, max_length=50)
    aadhar_card: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    status: Optional[str] = Field(None, max_length=50)


class DriverResponse(BaseModel):
    """Schema for driver response."""
    id: int
    company_id: Optional[int]
    name: str
    phone: str
    license_number: Optional[str]
    aadhar_card: Optional[str]
    email: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DriverPicklistItem(BaseModel):
    id: int
    name: str
    status: str

    class Config:
        from_attributes = True


class DriverListResponse(BaseModel):
    items: List[DriverResponse]
    total: int
    page: int
    page_size: int
