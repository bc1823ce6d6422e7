"""
Vehicle database model.

Vehicles carry the driver currently assigned to them; tours and bookings
copy that driver instead of accepting one from the client.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.fleet_enums import VehicleAvailability


class Vehicle(Base):
    """
    Vehicle model.

    `available_status` is flipped by booking status transitions.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id', ondelete="SET NULL"), nullable=True, index=True)

    # Vehicle identification
    name = Column(String(150), nullable=True)
    registration_number = Column(String(50), unique=True, nullable=False, index=True)
    make = Column(String(100), nullable=True)
    capacity = Column(Integer, nullable=True)

    # Drivers
    owner_driver_id = Column(Integer, ForeignKey('drivers.id', ondelete="SET NULL"), nullable=True, index=True)
    assigned_driver_id = Column(Integer, ForeignKey('drivers.id', ondelete="SET NULL"), nullable=True, index=True)

    available_status = Column(String(50), default=VehicleAvailability.AVAILABLE.value, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, registration='{self.registration_number}', status='{self.available_status}')>"
