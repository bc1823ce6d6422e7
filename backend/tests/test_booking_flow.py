"""
Integration tests for the booking lifecycle over HTTP.

Create from tour -> distance / payment / cost updates -> status changes
driving vehicle and driver availability.
"""

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import select, update

from backend.app.core.exceptions import VehicleLookupFailedError
from backend.app.domain.booking.repository import BookingRepository
from backend.app.models.audit_log import AuditLog
from backend.app.models.booking import Booking
from backend.app.models.driver import Driver
from backend.app.models.tour import Tour
from backend.app.models.vehicle import Vehicle


@pytest.fixture
async def tour(db_session, company, vehicle, driver, lead):
    tour = Tour(
        name="T NO -0001",
        company_id=company.id,
        lead_id=lead.id,
        vehicle_id=vehicle.id,
        driver_id=driver.id,
        type_of_tour="Local",
        start_date=date(2026, 11, 2),
        end_date=date(2026, 11, 4),
        duration_days=3,
        distance_km=Decimal("100"),
        premium=Decimal("0"),
        price=Decimal("50"),
        total_amount=Decimal("5000"),
    )
    db_session.add(tour)
    await db_session.commit()
    await db_session.refresh(tour)
    return tour


@pytest.fixture
async def booking_id(client, auth_headers, tour):
    response = await client.post("/v1/bookings", json={"tour_id": tour.id}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _fleet_statuses(db, vehicle_id, driver_id):
    vehicle_status = (await db.execute(
        select(Vehicle.available_status).where(Vehicle.id == vehicle_id)
    )).scalar_one()
    driver_status = (await db.execute(
        select(Driver.status).where(Driver.id == driver_id)
    )).scalar_one()
    return vehicle_status, driver_status


@pytest.mark.asyncio
async def test_create_booking_from_tour(client, auth_headers, tour, vehicle, driver, company, lead):
    response = await client.post("/v1/bookings", json={"tour_id": tour.id}, headers=auth_headers)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["name"] == "B NO -0001"
    assert data["status"] == "In Process"
    assert data["type_of_tour"] == "Local"
    assert data["company_id"] == company.id
    assert data["lead_id"] == lead.id
    assert data["vehicle_id"] == vehicle.id
    assert data["driver_id"] == driver.id
    assert data["booking_date"] == "2026-11-02"
    assert data["booking_end_date"] == "2026-11-04"
    assert data["duration"] == 3
    assert data["version"] == 1
    assert Decimal(data["booked_distance_km"]) == Decimal("100")
    assert Decimal(data["total_amount"]) == Decimal("5000")
    assert Decimal(data["actual_total_amount"]) == Decimal("5000")
    assert Decimal(data["outstanding_amount"]) == Decimal("5000")
    assert data["profit"] is None


@pytest.mark.asyncio
async def test_create_booking_with_payment_and_costs(client, auth_headers, tour):
    response = await client.post(
        "/v1/bookings",
        json={"tour_id": tour.id, "amount_paid": "1000", "expenses": 300},
        headers=auth_headers
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert Decimal(data["amount_paid"]) == Decimal("1000")
    assert Decimal(data["outstanding_amount"]) == Decimal("4000")
    assert Decimal(data["profit"]) == Decimal("4700")


@pytest.mark.asyncio
async def test_booking_labels_follow_ids(client, auth_headers, tour):
    names = []
    for _ in range(2):
        response = await client.post("/v1/bookings", json={"tour_id": tour.id}, headers=auth_headers)
        names.append(response.json()["name"])
    assert names == ["B NO -0001", "B NO -0002"]


@pytest.mark.asyncio
async def test_create_booking_requires_tour(client, auth_headers, tour):
    response = await client.post("/v1/bookings", json={"lead_id": tour.lead_id}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "tour_id"

    response = await client.post("/v1/bookings", json={"tour_id": 9999}, headers=auth_headers)
    assert response.status_code == 404

    response = await client.post("/v1/bookings", json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION_003"


@pytest.mark.asyncio
async def test_update_lifecycle(client, auth_headers, booking_id):
    url = f"/v1/bookings/{booking_id}"

    response = await client.patch(url, json={"actual_distance_km": 120}, headers=auth_headers)
    assert response.status_code == 200, response.text
    data = response.json()
    assert Decimal(data["actual_total_amount"]) == Decimal("6000")
    assert data["version"] == 2

    response = await client.patch(url, json={"amount_paid": 2000}, headers=auth_headers)
    assert Decimal(response.json()["outstanding_amount"]) == Decimal("4000")

    response = await client.patch(url, json={"expenses": 500, "toll_tax": 100}, headers=auth_headers)
    assert Decimal(response.json()["profit"]) == Decimal("5400")

    response = await client.patch(url, json={"actual_distance_km": 80}, headers=auth_headers)
    data = response.json()
    assert Decimal(data["actual_total_amount"]) == Decimal("5000")
    assert Decimal(data["outstanding_amount"]) == Decimal("3000")
    assert Decimal(data["profit"]) == Decimal("4400")
    assert data["version"] == 5


@pytest.mark.asyncio
async def test_sub_cent_update_stays_consistent(client, auth_headers, booking_id):
    response = await client.patch(
        f"/v1/bookings/{booking_id}",
        json={"actual_distance_km": "100.00012", "amount_paid": "0.004"},
        headers=auth_headers
    )

    assert response.status_code == 200, response.text
    data = response.json()
    actual_total = Decimal(data["actual_total_amount"])
    assert Decimal(data["actual_distance_km"]) == Decimal("100.00")
    assert actual_total == Decimal("5000.00")
    assert Decimal(data["outstanding_amount"]) == actual_total - Decimal(data["amount_paid"])


@pytest.mark.asyncio
async def test_status_change_moves_fleet(client, auth_headers, booking_id, db_session, vehicle, driver):
    url = f"/v1/bookings/{booking_id}"

    response = await client.patch(url, json={"status": "In Process"}, headers=auth_headers)
    assert response.status_code == 200
    assert await _fleet_statuses(db_session, vehicle.id, driver.id) == ("On Booking", "Not Available")

    response = await client.patch(url, json={"status": "Completed"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "Completed"
    assert await _fleet_statuses(db_session, vehicle.id, driver.id) == ("Available", "Available")


@pytest.mark.asyncio
async def test_vehicle_change_reassigns_driver(client, auth_headers, booking_id, db_session, company):
    other_driver = Driver(name="Sunil", phone="9000000002")
    db_session.add(other_driver)
    await db_session.commit()
    other_vehicle = Vehicle(
        company_id=company.id, registration_number="MH14CD5678", assigned_driver_id=other_driver.id
    )
    db_session.add(other_vehicle)
    await db_session.commit()

    response = await client.patch(
        f"/v1/bookings/{booking_id}",
        json={"vehicle_id": other_vehicle.id, "driver_id": 12345, "status": "In Process"},
        headers=auth_headers
    )

    assert response.status_code == 200, response.text
    assert response.json()["driver_id"] == other_driver.id
    assert await _fleet_statuses(db_session, other_vehicle.id, other_driver.id) == ("On Booking", "Not Available")


@pytest.mark.asyncio
async def test_fleet_failure_does_not_fail_update(client, auth_headers, booking_id, db_session, vehicle, driver, mocker):
    from sqlalchemy.exc import OperationalError
    mocker.patch.object(
        BookingRepository, "set_driver_status",
        side_effect=OperationalError("UPDATE drivers", {}, Exception("deadlock"))
    )

    response = await client.patch(
        f"/v1/bookings/{booking_id}", json={"status": "In Process"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert await _fleet_statuses(db_session, vehicle.id, driver.id) == ("On Booking", "Available")


@pytest.mark.asyncio
async def test_invalid_amount_rejected_before_write(client, auth_headers, booking_id, db_session):
    response = await client.patch(
        f"/v1/bookings/{booking_id}",
        json={"actual_distance_km": "abc", "status": "Completed"},
        headers=auth_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION_002"
    assert body["details"]["field"] == "actual_distance_km"

    row = (await db_session.execute(
        select(Booking.status, Booking.version).where(Booking.id == booking_id)
    )).one()
    assert (row.status, row.version) == ("In Process", 1)


@pytest.mark.asyncio
async def test_update_without_recognized_fields(client, auth_headers, booking_id):
    for payload in ({}, {"type_of_tour": "Outstation"}, {"driver_id": 3}):
        response = await client.patch(f"/v1/bookings/{booking_id}", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_VALIDATION_003"


@pytest.mark.asyncio
async def test_unknown_booking_or_vehicle(client, auth_headers, booking_id):
    response = await client.patch("/v1/bookings/9999", json={"status": "Completed"}, headers=auth_headers)
    assert response.status_code == 404

    response = await client.patch(
        f"/v1/bookings/{booking_id}", json={"vehicle_id": 9999}, headers=auth_headers
    )
    assert response.status_code == 404
    assert response.json()["details"]["resource"] == "Vehicle"


@pytest.mark.asyncio
async def test_vehicle_lookup_failure_persists_nothing(client, auth_headers, booking_id, db_session, vehicle, mocker):
    mocker.patch.object(
        BookingRepository, "fetch_assigned_driver",
        side_effect=VehicleLookupFailedError(vehicle.id)
    )

    response = await client.patch(
        f"/v1/bookings/{booking_id}",
        json={"vehicle_id": vehicle.id, "amount_paid": 100},
        headers=auth_headers
    )

    assert response.status_code == 503
    assert response.json()["error_code"] == "ERR_DEPENDENCY_002"
    row = (await db_session.execute(
        select(Booking.amount_paid, Booking.version).where(Booking.id == booking_id)
    )).one()
    assert row.amount_paid is None
    assert row.version == 1


@pytest.mark.asyncio
async def test_stale_snapshot_is_rejected(client, auth_headers, booking_id, db_session, mocker):
    original = BookingRepository.load_snapshot

    async def stale_snapshot(db, bid):
        snapshot = await original(db, bid)
        # Another writer got in between the read and the write
        await db.execute(update(Booking).where(Booking.id == bid).values(version=snapshot.version + 1))
        await db.commit()
        return snapshot

    mocker.patch.object(BookingRepository, "load_snapshot", side_effect=stale_snapshot)

    response = await client.patch(
        f"/v1/bookings/{booking_id}", json={"amount_paid": 500}, headers=auth_headers
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT_002"
    row = (await db_session.execute(
        select(Booking.amount_paid).where(Booking.id == booking_id)
    )).one()
    assert row.amount_paid is None


@pytest.mark.asyncio
async def test_update_is_audited(client, auth_headers, booking_id, db_session, staff_user):
    await client.patch(f"/v1/bookings/{booking_id}", json={"amount_paid": 500}, headers=auth_headers)

    result = await db_session.execute(
        select(AuditLog).where(AuditLog.action == "BOOKING_UPDATED", AuditLog.entity_id == booking_id)
    )
    entry = result.scalar_one()
    assert entry.actor_id == staff_user.id
    assert "amount_paid" in entry.meta_data["updated_fields"]


@pytest.mark.asyncio
async def test_list_get_delete(client, auth_headers, booking_id):
    response = await client.get("/v1/bookings", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 1

    response = await client.get("/v1/bookings", params={"status": "Completed"}, headers=auth_headers)
    assert response.json()["total"] == 0

    response = await client.get(f"/v1/bookings/{booking_id}", headers=auth_headers)
    assert response.json()["name"] == "B NO -0001"

    response = await client.delete(f"/v1/bookings/{booking_id}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get(f"/v1/bookings/{booking_id}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_bookings_require_authentication(client):
    response = await client.get("/v1/bookings")
    assert response.status_code in (401, 403)
