"""
Booking Repository.

Store access for the booking engine:
- the joined prior snapshot (booking + company rates + vehicle driver)
- the vehicle -> assigned driver lookup
- the version-checked single-row update
- insert followed by the sequence label write
- the independent vehicle / driver status writes
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import (
    ConcurrentUpdateError,
    ResourceNotFoundError,
    VehicleLookupFailedError,
)
from backend.app.domain.labels import sequence_label
from backend.app.models.booking import Booking
from backend.app.models.company import Company
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle

logger = logging.getLogger("tours_booking.bookings")


@dataclass(frozen=True)
class BookingSnapshot:
    """Booking row as persisted, joined with its company rates and vehicle driver."""
    id: int
    version: int = 1
    type_of_tour: Optional[str] = None
    status: Optional[str] = None
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    total_amount: Optional[Decimal] = None
    actual_total_amount: Optional[Decimal] = None
    booked_distance_km: Optional[Decimal] = None
    actual_distance_km: Optional[Decimal] = None
    amount_paid: Optional[Decimal] = None
    outstanding_amount: Optional[Decimal] = None
    expenses: Optional[Decimal] = None
    toll_tax: Optional[Decimal] = None
    profit: Optional[Decimal] = None
    localcharge: Optional[Decimal] = None
    outstationcharge: Optional[Decimal] = None
    lumpsumcharge: Optional[Decimal] = None
    vehicle_assigned_driver_id: Optional[int] = None


class BookingRepository:

    @staticmethod
    async def load_snapshot(db: AsyncSession, booking_id: int) -> Optional[BookingSnapshot]:
        """
        Fetch the prior snapshot for a booking.

        Returns:
            The snapshot, or None if no booking has this id.
        """
        query = (
            select(
                Booking.id,
                Booking.version,
                Booking.type_of_tour,
                Booking.status,
                Booking.vehicle_id,
                Booking.driver_id,
                Booking.total_amount,
                Booking.actual_total_amount,
                Booking.booked_distance_km,
                Booking.actual_distance_km,
                Booking.amount_paid,
                Booking.outstanding_amount,
                Booking.expenses,
                Booking.toll_tax,
                Booking.profit,
                Company.localcharge,
                Company.outstationcharge,
                Company.lumpsumcharge,
                Vehicle.assigned_driver_id.label("vehicle_assigned_driver_id"),
            )
            .outerjoin(Company, Booking.company_id == Company.id)
            .outerjoin(Vehicle, Booking.vehicle_id == Vehicle.id)
            .where(Booking.id == booking_id)
        )
        result = await db.execute(query)
        row = result.mappings().first()
        if row is None:
            return None
        return BookingSnapshot(**dict(row))

    @staticmethod
    async def get(db: AsyncSession, booking_id: int) -> Optional[Booking]:
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def fetch_assigned_driver(db: AsyncSession, vehicle_id: int) -> Optional[int]:
        """
        Return the driver currently assigned to a vehicle.

        Raises:
            ResourceNotFoundError: No vehicle with this id.
            VehicleLookupFailedError: The lookup itself failed.
        """
        try:
            result = await db.execute(
                select(Vehicle.id, Vehicle.assigned_driver_id).where(Vehicle.id == vehicle_id)
            )
            row = result.first()
        except SQLAlchemyError as exc:
            logger.error(
                "Error fetching assigned driver",
                extra={"vehicle_id": vehicle_id, "error": str(exc)}
            )
            raise VehicleLookupFailedError(vehicle_id)

        if row is None:
            raise ResourceNotFoundError("Vehicle", vehicle_id)
        return row.assigned_driver_id

    @staticmethod
    async def apply_update(
        db: AsyncSession,
        booking_id: int,
        expected_version: int,
        fields: Dict[str, Any],
    ) -> int:
        """
        Write the merged field set in one statement, guarded by version.

        Returns:
            The new version.

        Raises:
            ConcurrentUpdateError: The row's version moved since the snapshot.
        """
        new_version = expected_version + 1
        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.version == expected_version)
            .values(**fields, version=new_version)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise ConcurrentUpdateError("Booking", booking_id)

        await db.commit()
        return new_version

    @staticmethod
    async def insert(db: AsyncSession, fields: Dict[str, Any]) -> Booking:
        """Insert a booking, then label it from its new id in the same transaction."""
        booking = Booking(**fields)
        db.add(booking)
        await db.flush()

        booking.name = sequence_label(settings.booking_name_prefix, booking.id)

        await db.commit()
        await db.refresh(booking)
        return booking

    @staticmethod
    async def delete(db: AsyncSession, booking: Booking) -> None:
        await db.delete(booking)
        await db.commit()

    @staticmethod
    async def set_vehicle_status(db: AsyncSession, vehicle_id: int, available_status: str) -> int:
        result = await db.execute(
            update(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .values(available_status=available_status)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount

    @staticmethod
    async def set_driver_status(db: AsyncSession, driver_id: int, driver_status: str) -> int:
        result = await db.execute(
            update(Driver)
            .where(Driver.id == driver_id)
            .values(status=driver_status)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount
