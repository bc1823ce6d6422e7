"""
Company database model.

A company owns the per-km charges that tours and bookings are priced from.
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Company(Base):
    """
    Company model.

    The three charge columns are the per-km rates for Local, Outstation and
    Lumpsum tours respectively.
    """
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    address = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(150), nullable=True)

    # Per-km rates
    localcharge = Column(Numeric(12, 2), nullable=True)
    outstationcharge = Column(Numeric(12, 2), nullable=True)
    lumpsumcharge = Column(Numeric(12, 2), nullable=True)

    # Default distances offered per tour type
    localdist = Column(Numeric(10, 2), nullable=True)
    outstationdistance = Column(Numeric(10, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"
