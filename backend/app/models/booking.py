"""
Booking database model.

A booking is an accepted engagement created from a tour. Its financial
columns are derived and only ever written by the booking services.
"""

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.booking_enums import BookingStatus


class Booking(Base):
    """
    Booking model.

    Derived columns:
        actual_total_amount = total_amount (+ excess km * rate)
        outstanding_amount = actual_total_amount - amount_paid
        profit = actual_total_amount - (expenses + toll_tax)

    `version` is bumped on every update and checked on write.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=True, index=True)

    company_id = Column(Integer, ForeignKey('companies.id', ondelete="SET NULL"), nullable=True, index=True)
    lead_id = Column(Integer, ForeignKey('leads.id', ondelete="SET NULL"), nullable=True, index=True)
    tour_id = Column(Integer, ForeignKey('tours.id', ondelete="SET NULL"), nullable=True, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="SET NULL"), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id', ondelete="SET NULL"), nullable=True, index=True)

    # Copied from the tour at creation, never changed afterwards
    type_of_tour = Column(String(20), nullable=True)

    status = Column(String(50), default=BookingStatus.IN_PROCESS.value, nullable=False, index=True)

    # Schedule
    booking_date = Column(Date, nullable=True)
    booking_end_date = Column(Date, nullable=True)
    duration = Column(Integer, nullable=True)
    actual_duration = Column(Integer, nullable=True)

    # Baseline (from tour)
    booked_distance_km = Column(Numeric(10, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=True)

    # Actuals and derived financials
    actual_distance_km = Column(Numeric(10, 2), nullable=True)
    actual_total_amount = Column(Numeric(12, 2), nullable=True)
    amount_paid = Column(Numeric(12, 2), nullable=True)
    outstanding_amount = Column(Numeric(12, 2), nullable=True)
    expenses = Column(Numeric(12, 2), nullable=True)
    toll_tax = Column(Numeric(12, 2), nullable=True)
    profit = Column(Numeric(12, 2), nullable=True)

    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Booking(id={self.id}, name='{self.name}', status='{self.status}')>"
