"""
Lead Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class LeadCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=5, max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    source: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, max_length=50, description="Defaults to New")


class LeadUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=5, max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    source: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, max_length=50)


class LeadResponse(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str]
    source: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadPicklistItem(BaseModel):
    id: int
    name: str
    phone: str

    class Config:
        from_attributes = True


class LeadListResponse(BaseModel):
    items: List[LeadResponse]
    total: int
    page: int
    page_size: int
