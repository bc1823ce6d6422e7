"""
Unit tests for the booking financial recalculator.

Walks a Local booking (5000 for 100 km, 50/km) through the usual
lifecycle and checks the derived columns after every step.
"""

import dataclasses
import pytest
from decimal import Decimal

from backend.app.core.exceptions import BadRequestError, InvalidAmountError, NoFieldsToUpdateError
from backend.app.domain.booking.recalculator import BookingRecalculator
from backend.app.domain.booking.repository import BookingSnapshot


SNAPSHOT_FIELDS = {f.name for f in dataclasses.fields(BookingSnapshot)}


def make_prior(**overrides) -> BookingSnapshot:
    values = dict(
        id=1,
        type_of_tour="Local",
        status="In Process",
        vehicle_id=3,
        driver_id=7,
        total_amount=Decimal("5000"),
        actual_total_amount=Decimal("5000"),
        booked_distance_km=Decimal("100"),
        actual_distance_km=None,
        amount_paid=Decimal("0"),
        outstanding_amount=Decimal("5000"),
        expenses=Decimal("0"),
        toll_tax=Decimal("0"),
        profit=None,
        localcharge=Decimal("50"),
        outstationcharge=Decimal("40"),
        lumpsumcharge=Decimal("30"),
        vehicle_assigned_driver_id=7,
    )
    values.update(overrides)
    return BookingSnapshot(**values)


def recalc(prior: BookingSnapshot, changes: dict, vehicle_driver_id=None) -> dict:
    return BookingRecalculator.recalculate(
        prior, BookingRecalculator.normalize(changes), vehicle_driver_id
    )


def persist(prior: BookingSnapshot, fields: dict) -> BookingSnapshot:
    """What the next update would read back after writing `fields`."""
    return dataclasses.replace(prior, **{k: v for k, v in fields.items() if k in SNAPSHOT_FIELDS})


def assert_consistent(snapshot: BookingSnapshot):
    zero = Decimal("0")
    actual = snapshot.actual_total_amount
    assert snapshot.outstanding_amount == actual - (snapshot.amount_paid or zero)
    if snapshot.profit is not None:
        assert snapshot.profit == actual - ((snapshot.expenses or zero) + (snapshot.toll_tax or zero))


def test_lifecycle_scenario():
    prior = make_prior()

    # Ran 20 km over the booking
    fields = recalc(prior, {"actual_distance_km": 120})
    assert fields["actual_distance_km"] == Decimal("120")
    assert fields["actual_total_amount"] == Decimal("6000")
    assert fields["outstanding_amount"] == Decimal("6000")
    prior = persist(prior, fields)
    assert_consistent(prior)

    # Customer pays 2000
    fields = recalc(prior, {"amount_paid": 2000})
    assert fields == {"amount_paid": Decimal("2000"), "outstanding_amount": Decimal("4000")}
    prior = persist(prior, fields)

    # Trip costs come in
    fields = recalc(prior, {"expenses": 500, "toll_tax": 100})
    assert fields["profit"] == Decimal("5400")
    assert "actual_total_amount" not in fields
    prior = persist(prior, fields)
    assert_consistent(prior)

    # Distance corrected below the booking: back to the baseline
    fields = recalc(prior, {"actual_distance_km": 80})
    assert fields["actual_total_amount"] == Decimal("5000")
    assert fields["outstanding_amount"] == Decimal("3000")
    assert fields["profit"] == Decimal("4400")
    prior = persist(prior, fields)
    assert_consistent(prior)


def test_distance_equal_to_booked_keeps_baseline():
    fields = recalc(make_prior(), {"actual_distance_km": "100"})
    assert fields["actual_total_amount"] == Decimal("5000")


def test_fractional_excess_is_exact():
    fields = recalc(make_prior(), {"actual_distance_km": "100.1"})
    assert fields["actual_total_amount"] == Decimal("5005.0")


def test_unknown_rate_keeps_baseline():
    no_charge = make_prior(localcharge=None)
    fields = recalc(no_charge, {"actual_distance_km": 150})
    assert fields["actual_total_amount"] == Decimal("5000")

    unknown_type = make_prior(type_of_tour="Airport")
    fields = recalc(unknown_type, {"actual_distance_km": 150})
    assert fields["actual_total_amount"] == Decimal("5000")


def test_rate_follows_booking_tour_type():
    prior = make_prior(type_of_tour="Outstation")
    fields = recalc(prior, {"actual_distance_km": 110})
    assert fields["actual_total_amount"] == Decimal("5400")


def test_same_update_twice_is_idempotent():
    update = {"actual_distance_km": 130, "amount_paid": 1000, "expenses": 200}
    first = recalc(make_prior(), update)
    second = recalc(persist(make_prior(), first), update)
    assert first == second


def test_baseline_change_carries_actual_total_forward():
    prior = make_prior(actual_distance_km=Decimal("120"), actual_total_amount=Decimal("6000"),
                       outstanding_amount=Decimal("6000"))
    fields = recalc(prior, {"total_amount": 7000})
    assert fields == {"total_amount": Decimal("7000")}

    fields = recalc(prior, {"booked_distance_km": 130})
    assert fields == {"booked_distance_km": Decimal("130")}


def test_distance_is_priced_against_stored_baseline():
    prior = make_prior(actual_distance_km=Decimal("120"), actual_total_amount=Decimal("6000"))
    fields = recalc(prior, {"actual_distance_km": 120, "total_amount": 7000})
    assert fields["actual_total_amount"] == Decimal("6000")
    assert fields["total_amount"] == Decimal("7000")

    fields = recalc(prior, {"actual_distance_km": 120, "booked_distance_km": 130})
    assert fields["actual_total_amount"] == Decimal("6000")


def test_sub_cent_inputs_are_rounded_before_pricing():
    prior = make_prior()
    fields = recalc(prior, {"actual_distance_km": "100.00012", "amount_paid": "0.004"})
    assert fields["actual_distance_km"] == Decimal("100.00")
    assert fields["amount_paid"] == Decimal("0.00")
    assert fields["actual_total_amount"] == Decimal("5000.00")
    assert fields["outstanding_amount"] == Decimal("5000.00")
    assert_consistent(persist(prior, fields))

    fields = recalc(prior, {"actual_distance_km": "100.015"})
    assert fields["actual_distance_km"] == Decimal("100.02")
    assert fields["actual_total_amount"] == Decimal("5001.00")
    assert_consistent(persist(prior, fields))


def test_null_priors_read_as_zero():
    prior = make_prior(amount_paid=None, expenses=None, toll_tax=None, actual_total_amount=None)
    fields = recalc(prior, {"toll_tax": 50})
    assert fields["profit"] == Decimal("-50")
    fields = recalc(prior, {"actual_distance_km": 100})
    assert fields["outstanding_amount"] == Decimal("5000")
    assert fields["profit"] == Decimal("5000")


def test_driver_follows_vehicle():
    fields = recalc(
        make_prior(), {"vehicle_id": 4, "driver_id": 99}, vehicle_driver_id=11
    )
    assert fields["vehicle_id"] == 4
    assert fields["driver_id"] == 11

    fields = recalc(make_prior(), {"vehicle_id": None})
    assert fields == {"vehicle_id": None, "driver_id": None}


def test_tour_type_and_driver_are_dropped():
    with pytest.raises(NoFieldsToUpdateError):
        recalc(make_prior(), {"type_of_tour": "Outstation", "driver_id": 5})

    fields = recalc(make_prior(), {"type_of_tour": "Outstation", "status": "Completed"})
    assert fields == {"status": "Completed"}


def test_passthrough_fields_are_copied():
    fields = recalc(
        make_prior(), {"lead_id": 2, "tour_id": 9, "company_id": 1, "status": "Completed"}
    )
    assert fields == {"lead_id": 2, "tour_id": 9, "company_id": 1, "status": "Completed"}


def test_empty_update_rejected():
    with pytest.raises(NoFieldsToUpdateError):
        recalc(make_prior(), {})
    with pytest.raises(NoFieldsToUpdateError):
        recalc(make_prior(), {"price": 10})


@pytest.mark.parametrize("field,value", [
    ("actual_distance_km", "abc"),
    ("amount_paid", -1),
    ("expenses", True),
    ("toll_tax", None),
    ("total_amount", "NaN"),
])
def test_invalid_amounts_rejected(field, value):
    with pytest.raises(InvalidAmountError) as exc_info:
        BookingRecalculator.normalize({field: value})
    assert exc_info.value.field == field


def test_null_status_rejected():
    with pytest.raises(BadRequestError):
        BookingRecalculator.normalize({"status": None})
