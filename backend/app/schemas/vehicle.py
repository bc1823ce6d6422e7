"""
Vehicle Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle. Registration numbers are unique."""
    registration_number: str = Field(..., min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=150)
    make: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, gt=0)
    company_id: Optional[int] = None
    owner_driver_id: Optional[int] = None
    assigned_driver_id: Optional[int] = None
    available_status: Optional[str] = Field(None, max_length=50, description="Defaults to Available")


class VehicleUpdate(BaseModel):
    registration_number: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=150)
    make: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, gt=0)
    company_id: Optional[int] = None
    owner_driver_id: Optional[int] = None
    assigned_driver_id: Optional[int] = None
    available_status: Optional[str] = Field(None, max_length=50)


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    company_id: Optional[int]
    registration_number: str
    name: Optional[str]
    make: Optional[str]
    capacity: Optional[int]
    owner_driver_id: Optional[int]
    assigned_driver_id: Optional[int]
    available_status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehiclePicklistItem(BaseModel):
    """Vehicle with its assigned driver, for booking forms."""
    id: int
    name: Optional[str]
    registration_number: str
    available_status: str
    assigned_driver_id: Optional[int] = None
    driver_name: Optional[str] = None
    driver_status: Optional[str] = None


class VehicleListResponse(BaseModel):
    items: List[VehicleResponse]
    total: int
    page: int
    page_size: int
