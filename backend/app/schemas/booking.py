"""
Booking Pydantic schemas.

Amount and distance inputs are accepted as sent and validated by the
booking service, so a malformed amount surfaces as ERR_VALIDATION_002.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, List


class BookingCreate(BaseModel):
    """
    Schema for creating a booking from a tour.

    Schedule, booked distance, totals and tour type are copied from the tour.
    Company, lead and vehicle default to the tour's.
    """
    tour_id: Optional[int] = Field(None, description="Tour the booking is created from")
    company_id: Optional[int] = None
    lead_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    actual_distance_km: Optional[Any] = None
    amount_paid: Optional[Any] = Field(None, description="Upfront payment (defaults to 0)")
    actual_duration: Optional[int] = Field(None, ge=0)
    expenses: Optional[Any] = None
    toll_tax: Optional[Any] = None


class BookingUpdate(BaseModel):
    """
    Schema for partially updating a booking.

    Only fields actually sent are applied. `driver_id` and `type_of_tour`
    are accepted but ignored: the driver follows the vehicle and the tour
    type is fixed at creation.
    """
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    type_of_tour: Optional[str] = None
    company_id: Optional[int] = None
    lead_id: Optional[int] = None
    tour_id: Optional[int] = None
    status: Optional[str] = Field(None, max_length=50)
    booking_date: Optional[date] = None
    booking_end_date: Optional[date] = None
    booked_distance_km: Optional[Any] = None
    total_amount: Optional[Any] = None
    actual_distance_km: Optional[Any] = None
    amount_paid: Optional[Any] = None
    expenses: Optional[Any] = None
    toll_tax: Optional[Any] = None


class BookingResponse(BaseModel):
    """Schema for booking response."""
    id: int
    name: Optional[str]
    company_id: Optional[int]
    lead_id: Optional[int]
    tour_id: Optional[int]
    vehicle_id: Optional[int]
    driver_id: Optional[int]
    type_of_tour: Optional[str]
    status: str
    booking_date: Optional[date]
    booking_end_date: Optional[date]
    duration: Optional[int]
    actual_duration: Optional[int]
    booked_distance_km: Optional[Decimal]
    total_amount: Optional[Decimal]
    actual_distance_km: Optional[Decimal]
    actual_total_amount: Optional[Decimal]
    amount_paid: Optional[Decimal]
    outstanding_amount: Optional[Decimal]
    expenses: Optional[Decimal]
    toll_tax: Optional[Decimal]
    profit: Optional[Decimal]
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""
    items: List[BookingResponse]
    total: int
    page: int
    page_size: int
