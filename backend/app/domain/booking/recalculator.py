"""
Booking Financial Recalculator.

Turns a prior booking snapshot plus a partial update into the complete set
of columns to persist, keeping the derived financials consistent:

    actual_total_amount = total_amount                                   (distance <= booked, or no rate)
                        = total_amount + (distance - booked) * rate      (distance > booked, rate known)
    outstanding_amount  = actual_total_amount - amount_paid
    profit              = actual_total_amount - (expenses + toll_tax)

A partial update is a mapping holding only the fields the client sent
(`model_dump(exclude_unset=True)`), so "absent" and "sent as null" differ.
The baseline is the booking's stored `total_amount` and `booked_distance_km`;
an update that leaves `actual_distance_km` out carries `actual_total_amount`
forward untouched.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from backend.app.core.exceptions import BadRequestError, NoFieldsToUpdateError
from backend.app.domain.billing.money import Money
from backend.app.domain.billing.pricing_resolver import PricingResolver
from backend.app.domain.booking.repository import BookingSnapshot

logger = logging.getLogger("tours_booking.bookings")

# Amount/distance inputs, all must be numeric and >= 0 when present
NUMERIC_FIELDS = (
    "actual_distance_km",
    "amount_paid",
    "expenses",
    "toll_tax",
    "booked_distance_km",
    "total_amount",
)

# Copied verbatim when present
PASSTHROUGH_FIELDS = (
    "company_id",
    "lead_id",
    "booking_date",
    "booking_end_date",
    "booked_distance_km",
    "total_amount",
    "status",
    "tour_id",
)

# Everything an update may carry; type_of_tour and driver_id are dropped
UPDATABLE_FIELDS = ("vehicle_id", "actual_distance_km", "amount_paid", "expenses", "toll_tax") + PASSTHROUGH_FIELDS


class BookingRecalculator:

    @staticmethod
    def normalize(changes: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Reduce a raw partial update to the recognized fields.

        Drops immutable / derived fields and coerces amounts to `Money`.

        Raises:
            InvalidAmountError: An amount or distance is non-numeric or negative.
            NoFieldsToUpdateError: Nothing recognized is left.
        """
        normalized: Dict[str, Any] = {}
        for field in UPDATABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if field == "status" and value is None:
                raise BadRequestError("status cannot be null", details={"field": "status"})
            if field in NUMERIC_FIELDS:
                value = Money.of(value, field=field, non_negative=True)
            normalized[field] = value

        if not normalized:
            raise NoFieldsToUpdateError("booking")
        return normalized

    @staticmethod
    def recalculate(
        prior: BookingSnapshot,
        update: Mapping[str, Any],
        vehicle_driver_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Compute every column to write for this update.

        Args:
            prior: Snapshot as persisted before the update
            update: Output of `normalize`
            vehicle_driver_id: Assigned driver of `update["vehicle_id"]`,
                looked up by the caller

        Returns:
            Column -> value mapping, amounts as Decimal
        """
        fields: Dict[str, Any] = {}

        # 1. Per-km rate from the booking's own tour type
        rate = PricingResolver.rate_for(
            prior.type_of_tour,
            prior.localcharge,
            prior.outstationcharge,
            prior.lumpsumcharge,
        )

        paid = _latest(update, prior, "amount_paid")
        expenses = _latest(update, prior, "expenses")
        toll_tax = _latest(update, prior, "toll_tax")

        # 2. Distance changed: rebuild the actual total from the stored baseline
        if "actual_distance_km" in update:
            distance = update["actual_distance_km"]
            total = Money.of_optional(prior.total_amount, "total_amount")
            booked = Money.of_optional(prior.booked_distance_km, "booked_distance_km")

            if distance > booked and rate is not None:
                actual_total = total + (distance - booked).times(rate)
            else:
                # Equal or under the booked distance always resets to baseline
                actual_total = total

            fields["actual_distance_km"] = distance.to_storage()
            fields["actual_total_amount"] = actual_total.to_storage()
            fields["outstanding_amount"] = (actual_total - paid).to_storage()
            fields["profit"] = (actual_total - (expenses + toll_tax)).to_storage()
        else:
            # 3. Carried forward
            actual_total = Money.of_optional(prior.actual_total_amount, "actual_total_amount")

        # 4. Payment
        if "amount_paid" in update:
            fields["amount_paid"] = paid.to_storage()
            fields["outstanding_amount"] = (actual_total - paid).to_storage()

        # 5. Costs
        if "expenses" in update or "toll_tax" in update:
            if "expenses" in update:
                fields["expenses"] = expenses.to_storage()
            if "toll_tax" in update:
                fields["toll_tax"] = toll_tax.to_storage()
            fields["profit"] = (actual_total - (expenses + toll_tax)).to_storage()

        # 6. Driver always follows the vehicle
        if "vehicle_id" in update:
            fields["vehicle_id"] = update["vehicle_id"]
            fields["driver_id"] = vehicle_driver_id if update["vehicle_id"] is not None else None

        # 7. Manual passthrough
        for field in PASSTHROUGH_FIELDS:
            if field in update:
                value = update[field]
                fields[field] = value.to_storage() if isinstance(value, Money) else value

        logger.debug(
            "Booking recalculated",
            extra={
                "booking_id": prior.id,
                "actual_total_amount": str(actual_total),
                "updated_fields": sorted(fields),
            }
        )
        return fields


def _latest(update: Mapping[str, Any], prior: BookingSnapshot, field: str) -> Money:
    """Value after this update: the sent one, else the stored one (NULL as 0)."""
    if field in update:
        return update[field]
    return Money.of_optional(getattr(prior, field), field)
