"""
Booking Service (Domain Logic).

Orchestrates the two booking write paths:
- creating a booking seeded from its tour
- applying a partial update with full financial recalculation and
  the follow-up fleet status sync
"""

import logging
from typing import Any, Dict, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import (
    BadRequestError,
    DependencyLookupError,
    NoFieldsToUpdateError,
    ResourceNotFoundError,
)
from backend.app.domain.billing.money import Money, optional_money
from backend.app.domain.booking.fleet_sync import FleetStatusSynchronizer
from backend.app.domain.booking.recalculator import BookingRecalculator
from backend.app.domain.booking.repository import BookingRepository
from backend.app.models.booking import Booking
from backend.app.models.booking_enums import BookingStatus
from backend.app.models.tour import Tour

logger = logging.getLogger("tours_booking.bookings")

# Fields a client may set when creating a booking
CREATABLE_FIELDS = (
    "company_id",
    "lead_id",
    "vehicle_id",
    "tour_id",
    "actual_distance_km",
    "amount_paid",
    "actual_duration",
    "expenses",
    "toll_tax",
)

# Defaulted from the tour when the client leaves them out
TOUR_DEFAULTED_FIELDS = ("company_id", "lead_id", "vehicle_id")


class BookingService:

    @staticmethod
    async def apply_booking_update(
        db: AsyncSession,
        booking_id: int,
        changes: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """
        Apply a partial update to a booking.

        Flow:
        1. Normalize the update (amount validation, dropped fields)
        2. Load the prior snapshot
        3. Look up the driver of a newly assigned vehicle
        4. Recalculate derived financials
        5. Persist everything in one version-checked write
        6. Sync vehicle / driver status if `status` was sent

        Args:
            db: Database session
            booking_id: Booking to update
            changes: Fields the client sent (`model_dump(exclude_unset=True)`)

        Returns:
            The fields written, including the new `version`

        Raises:
            InvalidAmountError, NoFieldsToUpdateError, BadRequestError,
            ResourceNotFoundError, VehicleLookupFailedError, ConcurrentUpdateError
        """
        update = BookingRecalculator.normalize(changes)

        prior = await BookingRepository.load_snapshot(db, booking_id)
        if prior is None:
            raise ResourceNotFoundError("Booking", booking_id)

        vehicle_driver_id = None
        if update.get("vehicle_id") is not None:
            vehicle_driver_id = await BookingRepository.fetch_assigned_driver(db, update["vehicle_id"])

        fields = BookingRecalculator.recalculate(prior, update, vehicle_driver_id)

        version = await BookingRepository.apply_update(db, booking_id, prior.version, fields)
        fields["version"] = version

        logger.info(
            "Booking updated",
            extra={"booking_id": booking_id, "version": version, "updated_fields": sorted(fields)}
        )

        if "status" in fields:
            vehicle_id, driver_id = FleetStatusSynchronizer.resolve_targets(prior, fields)
            await FleetStatusSynchronizer.sync(db, booking_id, fields["status"], vehicle_id, driver_id)

        return fields

    @staticmethod
    async def create_booking_from_tour(db: AsyncSession, initial: Mapping[str, Any]) -> Booking:
        """
        Create a booking seeded from its tour.

        The tour supplies the schedule, the booked distance, the baseline
        total and the tour type. Company, lead and vehicle default to the
        tour's when not given. The driver always follows the vehicle.

        Raises:
            NoFieldsToUpdateError: Nothing recognized was sent.
            BadRequestError: `tour_id` is missing.
            InvalidAmountError: An amount or distance is non-numeric or negative.
            ResourceNotFoundError: The tour or the vehicle does not exist.
        """
        fields: Dict[str, Any] = {
            field: initial[field] for field in CREATABLE_FIELDS if field in initial
        }
        if not fields:
            raise NoFieldsToUpdateError("booking")

        tour_id = fields.get("tour_id")
        if tour_id is None:
            raise BadRequestError("tour_id is required", details={"field": "tour_id"})

        actual_distance = optional_money(fields.get("actual_distance_km"), "actual_distance_km", non_negative=True)
        paid = optional_money(fields.get("amount_paid"), "amount_paid", non_negative=True)
        expenses = optional_money(fields.get("expenses"), "expenses", non_negative=True)
        toll_tax = optional_money(fields.get("toll_tax"), "toll_tax", non_negative=True)

        tour = await BookingService._load_tour(db, tour_id)

        for field in TOUR_DEFAULTED_FIELDS:
            if fields.get(field) is None:
                fields[field] = getattr(tour, field)

        fields["driver_id"] = None
        if fields["vehicle_id"] is not None:
            fields["driver_id"] = await BookingRepository.fetch_assigned_driver(db, fields["vehicle_id"])

        fields.update(
            booking_date=tour.start_date,
            booking_end_date=tour.end_date,
            booked_distance_km=tour.distance_km,
            total_amount=tour.total_amount,
            actual_total_amount=tour.total_amount,
            duration=tour.duration_days,
            type_of_tour=tour.type_of_tour,
            status=BookingStatus.IN_PROCESS.value,
        )

        amount = Money.of_optional(tour.total_amount, "total_amount")
        fields["outstanding_amount"] = (amount - (paid or Money.zero())).to_storage()

        # Profit is only seeded when a cost was given
        if expenses is not None or toll_tax is not None:
            costs = (expenses or Money.zero()) + (toll_tax or Money.zero())
            fields["profit"] = (amount - costs).to_storage()

        for field, value in (
            ("actual_distance_km", actual_distance),
            ("amount_paid", paid),
            ("expenses", expenses),
            ("toll_tax", toll_tax),
        ):
            if field in fields:
                fields[field] = value.to_storage() if value is not None else None

        booking = await BookingRepository.insert(db, fields)

        logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "booking_name": booking.name, "tour_id": tour_id}
        )
        return booking

    @staticmethod
    async def _load_tour(db: AsyncSession, tour_id: int) -> Tour:
        try:
            result = await db.execute(select(Tour).where(Tour.id == tour_id))
            tour = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error(
                "Error fetching tour details",
                extra={"tour_id": tour_id, "error": str(exc)}
            )
            raise DependencyLookupError("Error fetching tour details", details={"tour_id": tour_id})

        if tour is None:
            raise ResourceNotFoundError("Tour", tour_id)
        return tour
