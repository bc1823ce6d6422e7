"""
Tour Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, List

from backend.app.models.booking_enums import TourType


class TourBase(BaseModel):
    company_id: Optional[int] = None
    lead_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    description: Optional[str] = None
    start_state: Optional[str] = Field(None, max_length=100)
    end_state: Optional[str] = Field(None, max_length=100)
    start_city: Optional[str] = Field(None, max_length=100)
    end_city: Optional[str] = Field(None, max_length=100)
    pickup_location: Optional[str] = Field(None, max_length=255)
    drop_location: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration_days: Optional[int] = Field(None, ge=0)
    type_of_tour: Optional[TourType] = Field(None, description="Local, Outstation or Lumpsum")
    distance_km: Optional[Any] = Field(None, description="One-way distance in km")
    premium: Optional[Any] = Field(None, description="Flat amount added to the distance price")

    class Config:
        use_enum_values = True


class TourCreate(TourBase):
    """
    Schema for creating a tour.

    `price`, `total_amount` and `driver_id` are derived server-side.
    """
    pass


class TourUpdate(TourBase):
    """Schema for partially updating a tour."""
    pass


class TourResponse(BaseModel):
    """Schema for tour response."""
    id: int
    name: Optional[str]
    company_id: Optional[int]
    lead_id: Optional[int]
    vehicle_id: Optional[int]
    driver_id: Optional[int]
    description: Optional[str]
    start_state: Optional[str]
    end_state: Optional[str]
    start_city: Optional[str]
    end_city: Optional[str]
    pickup_location: Optional[str]
    drop_location: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]
    duration_days: Optional[int]
    type_of_tour: Optional[str]
    distance_km: Optional[Decimal]
    premium: Optional[Decimal]
    price: Optional[Decimal]
    total_amount: Optional[Decimal]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TourListResponse(BaseModel):
    """Schema for paginated tour list."""
    items: List[TourResponse]
    total: int
    page: int
    page_size: int
