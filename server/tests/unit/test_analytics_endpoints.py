"""Integration tests for the statistics and monthly plan endpoints."""

import pytest

TOURS = "/api/v1/tours"


@pytest.mark.asyncio
async def test_tour_stats(test_client, seeded_db):
    response = await test_client.get(f"{TOURS}/tour-stats")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert [row["_id"] for row in body["data"]["stats"]] == ["EASY", "MEDIUM"]


@pytest.mark.asyncio
async def test_tour_stats_empty(test_client):
    response = await test_client.get(f"{TOURS}/tour-stats")

    assert response.status_code == 200
    assert response.json()["data"]["stats"] == []


@pytest.mark.asyncio
async def test_monthly_plan(test_client, seeded_db, guide_headers):
    response = await test_client.get(f"{TOURS}/monthly-plan/2022", headers=guide_headers)

    assert response.status_code == 200
    plan = response.json()["data"]["plan"]
    assert sorted(entry["month"] for entry in plan) == [1, 3]
    assert all(entry["numToursOfMonth"] == 1 for entry in plan)


@pytest.mark.asyncio
async def test_monthly_plan_non_numeric_year(test_client, seeded_db, guide_headers):
    response = await test_client.get(f"{TOURS}/monthly-plan/soon", headers=guide_headers)

    assert response.status_code == 200
    assert response.json()["data"]["plan"] == []


@pytest.mark.asyncio
async def test_monthly_plan_requires_staff(test_client, seeded_db, user_headers):
    response = await test_client.get(f"{TOURS}/monthly-plan/2021")
    assert response.status_code == 401

    response = await test_client.get(f"{TOURS}/monthly-plan/2021", headers=user_headers)
    assert response.status_code == 403
