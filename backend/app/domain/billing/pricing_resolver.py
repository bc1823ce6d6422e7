"""
Tour Pricing Resolver.

Responsible for determining the per-km rate that applies to a tour and the
tour's baseline total.

Rate selection by tour type:
1. Local      -> company.localcharge
2. Outstation -> company.outstationcharge
3. Lumpsum    -> company.lumpsumcharge
Anything else resolves to no rate.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import DependencyLookupError
from backend.app.domain.billing.money import Money
from backend.app.models.booking_enums import TourType
from backend.app.models.company import Company

logger = logging.getLogger("tours_booking.pricing")

# Tours are priced on the round trip
ROUND_TRIP_FACTOR = 2

RATE_FIELDS = {
    TourType.LOCAL.value: "localcharge",
    TourType.OUTSTATION.value: "outstationcharge",
    TourType.LUMPSUM.value: "lumpsumcharge",
}


class PricingResolver:

    @staticmethod
    def rate_field(tour_type: Optional[str]) -> Optional[str]:
        """Company column holding the charge for `tour_type`, if any."""
        if tour_type is None:
            return None
        return RATE_FIELDS.get(tour_type)

    @staticmethod
    def rate_for(
        tour_type: Optional[str],
        localcharge: Any = None,
        outstationcharge: Any = None,
        lumpsumcharge: Any = None,
    ) -> Optional[Money]:
        """
        Pick the charge matching `tour_type` from already-loaded company rates.

        Returns None for an unrecognized type or a NULL charge column.
        """
        field = PricingResolver.rate_field(tour_type)
        if field is None:
            return None
        charges = {
            "localcharge": localcharge,
            "outstationcharge": outstationcharge,
            "lumpsumcharge": lumpsumcharge,
        }
        value = charges[field]
        if value is None:
            return None
        return Money.of(value, field=field)

    @staticmethod
    async def resolve_rate(
        db: AsyncSession,
        company_id: Optional[int],
        tour_type: Optional[str],
    ) -> Optional[Money]:
        """
        Look up the company's charge for `tour_type`.

        Returns:
            The rate, or None when the type is unrecognized or the company
            does not exist. Callers treat None as zero.

        Raises:
            DependencyLookupError: If the company lookup itself fails.
        """
        field = PricingResolver.rate_field(tour_type)
        if field is None or company_id is None:
            return None

        try:
            result = await db.execute(
                select(getattr(Company, field)).where(Company.id == company_id)
            )
            row = result.first()
        except SQLAlchemyError as exc:
            logger.error(
                "Error fetching company price",
                extra={"company_id": company_id, "tour_type": tour_type, "error": str(exc)}
            )
            raise DependencyLookupError(
                "Error fetching company price",
                details={"company_id": company_id}
            )

        if row is None or row[0] is None:
            return None
        return Money.of(row[0], field=field)

    @staticmethod
    def compute_total(distance_km: Any, rate: Optional[Any], premium: Any) -> Money:
        """
        Baseline tour total: distance_km * 2 * rate + premium.

        A missing rate counts as zero.
        """
        distance = Money.of(distance_km, field="distance_km", non_negative=True)
        extra = Money.of(premium, field="premium")
        per_km = Money.of(rate, field="price") if rate is not None else Money.zero()
        return distance.times(ROUND_TRIP_FACTOR).times(per_km) + extra

    @staticmethod
    def effective_price(rate: Optional[Money]) -> Decimal:
        """Value stored in tours.price; unresolved rates are stored as 0."""
        return (rate or Money.zero()).to_storage()
