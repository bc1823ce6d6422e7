"""
Fleet Status Synchronizer.

Mirrors a booking status change onto the booked vehicle and its driver:

    In Process -> vehicle "On Booking", driver "Not Available"
    Completed  -> vehicle "Available",  driver "Available"
    other      -> untouched

The two writes are independent and best-effort. A failed write is logged
and never fails or rolls back the booking update that triggered it.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.domain.booking.repository import BookingRepository, BookingSnapshot
from backend.app.models.booking_enums import BookingStatus
from backend.app.models.fleet_enums import DriverStatus, VehicleAvailability

logger = logging.getLogger("tours_booking.fleet")

FLEET_TARGETS = {
    BookingStatus.IN_PROCESS.value: (VehicleAvailability.ON_BOOKING.value, DriverStatus.NOT_AVAILABLE.value),
    BookingStatus.COMPLETED.value: (VehicleAvailability.AVAILABLE.value, DriverStatus.AVAILABLE.value),
}


class FleetStatusSynchronizer:

    @staticmethod
    def target_states(booking_status: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """(vehicle available_status, driver status) for a booking status, or (None, None)."""
        return FLEET_TARGETS.get(booking_status, (None, None))

    @staticmethod
    def resolve_targets(
        prior: BookingSnapshot,
        fields: Mapping[str, Any],
    ) -> Tuple[Optional[int], Optional[int]]:
        """
        Pick the vehicle and driver a status change applies to.

        A vehicle changed in the same update wins, together with the driver
        looked up for it. Otherwise the booking's current vehicle is used
        with its assigned driver, falling back to the booking's driver.
        """
        if "vehicle_id" in fields:
            return fields["vehicle_id"], fields.get("driver_id")
        return prior.vehicle_id, prior.vehicle_assigned_driver_id or prior.driver_id

    @staticmethod
    async def sync(
        db: AsyncSession,
        booking_id: int,
        booking_status: str,
        vehicle_id: Optional[int],
        driver_id: Optional[int],
    ) -> Dict[str, bool]:
        """
        Apply the target states.

        Returns:
            {"vehicle_updated": bool, "driver_updated": bool}
        """
        vehicle_status, driver_status = FleetStatusSynchronizer.target_states(booking_status)
        outcome = {"vehicle_updated": False, "driver_updated": False}

        if vehicle_id and vehicle_status:
            try:
                await BookingRepository.set_vehicle_status(db, vehicle_id, vehicle_status)
                outcome["vehicle_updated"] = True
                logger.info(
                    "Updated vehicle status",
                    extra={"booking_id": booking_id, "vehicle_id": vehicle_id, "available_status": vehicle_status}
                )
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.error(
                    "Error updating vehicle status",
                    extra={"booking_id": booking_id, "vehicle_id": vehicle_id, "error": str(exc)}
                )

        if driver_id and driver_status:
            try:
                await BookingRepository.set_driver_status(db, driver_id, driver_status)
                outcome["driver_updated"] = True
                logger.info(
                    "Updated driver status",
                    extra={"booking_id": booking_id, "driver_id": driver_id, "status": driver_status}
                )
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.error(
                    "Error updating driver status",
                    extra={"booking_id": booking_id, "driver_id": driver_id, "error": str(exc)}
                )

        return outcome
