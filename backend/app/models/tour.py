"""
Tour database model.

A tour is the priced trip offer a booking is created from.
"""

from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Tour(Base):
    """
    Tour model.

    `price` and `total_amount` are derived server-side:
        price = company charge for type_of_tour
        total_amount = distance_km * 2 * price + premium
    """
    __tablename__ = "tours"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=True, index=True)

    company_id = Column(Integer, ForeignKey('companies.id', ondelete="SET NULL"), nullable=True, index=True)
    lead_id = Column(Integer, ForeignKey('leads.id', ondelete="SET NULL"), nullable=True, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete="SET NULL"), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id', ondelete="SET NULL"), nullable=True, index=True)

    # Itinerary
    description = Column(Text, nullable=True)
    start_state = Column(String(100), nullable=True)
    end_state = Column(String(100), nullable=True)
    start_city = Column(String(100), nullable=True)
    end_city = Column(String(100), nullable=True)
    pickup_location = Column(String(255), nullable=True)
    drop_location = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    duration_days = Column(Integer, nullable=True)

    # Pricing
    type_of_tour = Column(String(20), nullable=True)
    distance_km = Column(Numeric(10, 2), nullable=True)
    premium = Column(Numeric(12, 2), nullable=True)
    price = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Tour(id={self.id}, name='{self.name}', type='{self.type_of_tour}', total={self.total_amount})>"
