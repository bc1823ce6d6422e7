"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.fleet_enums import DriverStatus


class Driver(Base):
    """
    Driver model.

    `status` is flipped by booking status transitions (see fleet sync).
    """
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id', ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String(150), nullable=False)
    license_number = Column(String(50), nullable=True)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    aadhar_card = Column(String(20), nullable=True)
    email = Column(String(150), nullable=True)

    status = Column(String(50), default=DriverStatus.AVAILABLE.value, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}', status='{self.status}')>"
