"""
Integration tests for companies, drivers, vehicles and leads.
"""

import pytest
from decimal import Decimal


@pytest.mark.asyncio
async def test_company_crud(client, auth_headers):
    response = await client.post(
        "/v1/companies",
        json={"name": "Konkan Cabs", "localcharge": "18.5", "outstationcharge": 14},
        headers=auth_headers
    )
    assert response.status_code == 201
    company_id = response.json()["id"]
    assert Decimal(response.json()["localcharge"]) == Decimal("18.5")

    response = await client.patch(
        f"/v1/companies/{company_id}", json={"lumpsumcharge": 11}, headers=auth_headers
    )
    assert Decimal(response.json()["lumpsumcharge"]) == Decimal("11")

    response = await client.get("/v1/companies/picklist", headers=auth_headers)
    assert response.json() == [{"id": company_id, "name": "Konkan Cabs"}]

    response = await client.patch(f"/v1/companies/{company_id}", json={}, headers=auth_headers)
    assert response.status_code == 400

    response = await client.delete(f"/v1/companies/{company_id}", headers=auth_headers)
    assert response.status_code == 200
    response = await client.get(f"/v1/companies/{company_id}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_negative_charge_rejected(client, auth_headers):
    response = await client.post(
        "/v1/companies", json={"name": "Bad Rates", "localcharge": -1}, headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_driver_phone_is_unique(client, auth_headers, driver):
    response = await client.post(
        "/v1/drivers", json={"name": "Copy", "phone": driver.phone}, headers=auth_headers
    )
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT_001"

    response = await client.post(
        "/v1/drivers", json={"name": "Imran", "phone": "9000000009"}, headers=auth_headers
    )
    assert response.status_code == 201
    new_id = response.json()["id"]
    assert response.json()["status"] == "Available"

    response = await client.patch(
        f"/v1/drivers/{new_id}", json={"phone": driver.phone}, headers=auth_headers
    )
    assert response.status_code == 409

    # Re-saving its own phone is not a conflict
    response = await client.patch(
        f"/v1/drivers/{new_id}", json={"phone": "9000000009", "license_number": "MH-01"}, headers=auth_headers
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_driver_picklist(client, auth_headers, driver):
    response = await client.get("/v1/drivers/picklist", headers=auth_headers)
    assert response.json() == [{"id": driver.id, "name": "Ravi", "status": "Available"}]


@pytest.mark.asyncio
async def test_vehicle_registration_is_unique(client, auth_headers, vehicle):
    response = await client.post(
        "/v1/vehicles", json={"registration_number": vehicle.registration_number}, headers=auth_headers
    )
    assert response.status_code == 409
    assert response.json()["details"]["field"] == "registration_number"


@pytest.mark.asyncio
async def test_vehicle_picklist_includes_driver(client, auth_headers, vehicle, driver):
    response = await client.get("/v1/vehicles/picklist", headers=auth_headers)

    assert response.status_code == 200
    item = response.json()[0]
    assert item["id"] == vehicle.id
    assert item["assigned_driver_id"] == driver.id
    assert item["driver_name"] == "Ravi"
    assert item["driver_status"] == "Available"


@pytest.mark.asyncio
async def test_vehicle_update_and_list(client, auth_headers, vehicle):
    response = await client.patch(
        f"/v1/vehicles/{vehicle.id}", json={"capacity": 7, "make": "Toyota"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["capacity"] == 7

    response = await client.get("/v1/vehicles", headers=auth_headers)
    assert response.json()["total"] == 1

    response = await client.patch("/v1/vehicles/9999", json={"capacity": 7}, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_lead_lifecycle(client, auth_headers):
    response = await client.post(
        "/v1/leads", json={"name": "Kiran", "phone": "9822000000", "source": "Website"}, headers=auth_headers
    )
    assert response.status_code == 201
    lead_id = response.json()["id"]
    assert response.json()["status"] == "New"

    response = await client.post(
        "/v1/leads", json={"name": "Kiran again", "phone": "9822000000"}, headers=auth_headers
    )
    assert response.status_code == 409

    response = await client.patch(f"/v1/leads/{lead_id}", json={"status": "Converted"}, headers=auth_headers)
    assert response.json()["status"] == "Converted"

    response = await client.get("/v1/leads/picklist", headers=auth_headers)
    assert response.json() == [{"id": lead_id, "name": "Kiran", "phone": "9822000000"}]

    response = await client.delete(f"/v1/leads/{lead_id}", headers=auth_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_endpoints(client):
    response = await client.get("/health")
    assert response.json()["status"] == "healthy"

    response = await client.get("/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "ok", "redis": "ok"}
    assert "X-Correlation-ID" in response.headers
