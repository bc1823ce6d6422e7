"""
Tour Service (Domain Logic).

Tours carry server-side pricing:
    price        = company charge for type_of_tour (0 when unresolvable)
    total_amount = distance_km * 2 * price + premium (only when both are known)

Clients never set `price`, `total_amount` or `driver_id` directly.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import NoFieldsToUpdateError, ResourceNotFoundError
from backend.app.domain.billing.money import Money
from backend.app.domain.billing.pricing_resolver import PricingResolver
from backend.app.domain.booking.repository import BookingRepository
from backend.app.domain.labels import sequence_label
from backend.app.models.tour import Tour

logger = logging.getLogger("tours_booking.tours")

TOUR_FIELDS = (
    "company_id",
    "lead_id",
    "vehicle_id",
    "description",
    "start_state",
    "end_state",
    "start_city",
    "end_city",
    "pickup_location",
    "drop_location",
    "start_date",
    "end_date",
    "duration_days",
    "distance_km",
    "type_of_tour",
    "premium",
)

PRICE_INPUTS = ("company_id", "type_of_tour")
TOTAL_INPUTS = PRICE_INPUTS + ("distance_km", "premium")


def _tour_total(distance_km: Any, rate: Optional[Money], premium: Any):
    if distance_km is None or premium is None:
        return None
    return PricingResolver.compute_total(distance_km, rate, premium).to_storage()


class TourService:

    @staticmethod
    async def get(db: AsyncSession, tour_id: int) -> Tour:
        result = await db.execute(
            select(Tour)
            .where(Tour.id == tour_id)
            .execution_options(populate_existing=True)
        )
        tour = result.scalar_one_or_none()
        if tour is None:
            raise ResourceNotFoundError("Tour", tour_id)
        return tour

    @staticmethod
    async def create_tour(db: AsyncSession, data: Mapping[str, Any]) -> Tour:
        """
        Create a priced tour.

        Flow:
        1. Derive driver from vehicle
        2. Resolve price from the company charge
        3. Compute total when distance and premium are known
        4. Insert and label
        """
        fields: Dict[str, Any] = {field: data[field] for field in TOUR_FIELDS if field in data}

        if fields.get("distance_km") is not None:
            fields["distance_km"] = Money.of(fields["distance_km"], "distance_km", non_negative=True).to_storage()
        if fields.get("premium") is not None:
            fields["premium"] = Money.of(fields["premium"], "premium").to_storage()

        fields["driver_id"] = None
        if fields.get("vehicle_id") is not None:
            fields["driver_id"] = await BookingRepository.fetch_assigned_driver(db, fields["vehicle_id"])

        rate = await PricingResolver.resolve_rate(db, fields.get("company_id"), fields.get("type_of_tour"))
        fields["price"] = PricingResolver.effective_price(rate)
        fields["total_amount"] = _tour_total(fields.get("distance_km"), rate, fields.get("premium"))

        tour = Tour(**fields)
        db.add(tour)
        await db.flush()
        tour.name = sequence_label(settings.tour_name_prefix, tour.id)
        await db.commit()
        await db.refresh(tour)

        logger.info(
            "Tour created",
            extra={"tour_id": tour.id, "tour_name": tour.name, "total_amount": str(tour.total_amount)}
        )
        return tour

    @staticmethod
    async def update_tour(db: AsyncSession, tour_id: int, changes: Mapping[str, Any]) -> Tour:
        """
        Apply a partial update, re-pricing as needed.

        Raises:
            NoFieldsToUpdateError: Nothing recognized was sent.
            ResourceNotFoundError: Tour or newly assigned vehicle is missing.
        """
        update: Dict[str, Any] = {field: changes[field] for field in TOUR_FIELDS if field in changes}
        if not update:
            raise NoFieldsToUpdateError("tour")

        if update.get("distance_km") is not None:
            update["distance_km"] = Money.of(update["distance_km"], "distance_km", non_negative=True).to_storage()
        if update.get("premium") is not None:
            update["premium"] = Money.of(update["premium"], "premium").to_storage()

        tour = await TourService.get(db, tour_id)

        if "vehicle_id" in update:
            update["driver_id"] = None
            if update["vehicle_id"] is not None:
                update["driver_id"] = await BookingRepository.fetch_assigned_driver(db, update["vehicle_id"])

        if any(field in update for field in TOTAL_INPUTS):
            company_id = update.get("company_id", tour.company_id)
            tour_type = update.get("type_of_tour", tour.type_of_tour)
            if any(field in update for field in PRICE_INPUTS):
                rate = await PricingResolver.resolve_rate(db, company_id, tour_type)
                update["price"] = PricingResolver.effective_price(rate)
                logger.info(
                    "Recalculated price for tour update",
                    extra={"tour_id": tour_id, "price": str(update["price"])}
                )
            else:
                rate = Money.of_optional(tour.price, "price")

            update["total_amount"] = _tour_total(
                update.get("distance_km", tour.distance_km),
                rate,
                update.get("premium", tour.premium),
            )

        for field, value in update.items():
            setattr(tour, field, value)

        await db.commit()
        await db.refresh(tour)

        logger.info(
            "Tour updated",
            extra={"tour_id": tour_id, "updated_fields": sorted(update)}
        )
        return tour

    @staticmethod
    async def delete_tour(db: AsyncSession, tour_id: int) -> None:
        tour = await TourService.get(db, tour_id)
        await db.delete(tour)
        await db.commit()
