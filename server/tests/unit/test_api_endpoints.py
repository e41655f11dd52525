"""Integration tests for the tour CRUD endpoints."""

from bson import ObjectId
import pytest

TOURS = "/api/v1/tours"


@pytest.mark.asyncio
async def test_create_tour(test_client, admin_headers, sample_tour_data):
    response = await test_client.post(TOURS, json=sample_tour_data, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    tour = body["data"]["data"]
    assert tour["name"] == sample_tour_data["name"]
    assert tour["slug"] == "the-forest-hiker"
    assert tour["ratingsAverage"] == 4.5
    assert tour["ratingsQuantity"] == 0
    assert tour["startLocation"]["coordinates"] == [-115.570154, 51.178456]
    assert ObjectId.is_valid(tour["_id"])


@pytest.mark.asyncio
async def test_create_tour_requires_manager_role(test_client, user_headers, sample_tour_data):
    response = await test_client.post(TOURS, json=sample_tour_data)
    assert response.status_code == 401
    assert response.json()["status"] == 401

    response = await test_client.post(TOURS, json=sample_tour_data, headers=user_headers)
    assert response.status_code == 403
    assert response.json()["required_roles"] == ["admin", "lead-guide"]


@pytest.mark.asyncio
async def test_create_tour_invalid_data(test_client, admin_headers, sample_tour_data):
    invalid = {**sample_tour_data, "name": "Short", "difficulty": "extreme"}

    response = await test_client.post(TOURS, json=invalid, headers=admin_headers)

    assert response.status_code == 400
    data = response.json()
    assert data["status"] == 400
    assert data["title"] == "Validation Error"
    paths = {violation["path"] for violation in data["violations"]}
    assert "body.name" in paths
    assert "body.difficulty" in paths


@pytest.mark.asyncio
async def test_create_tour_discount_above_price(test_client, admin_headers, sample_tour_data):
    response = await test_client.post(
        TOURS, json={**sample_tour_data, "priceDiscount": 500}, headers=admin_headers
    )

    assert response.status_code == 400
    assert "below regular price" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_tour_duplicate_name(test_client, test_db, admin_headers, sample_tour_data):
    await test_db["tours"].create_index("name", unique=True)
    first = await test_client.post(TOURS, json=sample_tour_data, headers=admin_headers)
    assert first.status_code == 201

    response = await test_client.post(TOURS, json=sample_tour_data, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Duplicate field value")


@pytest.mark.asyncio
async def test_get_tour_populates_reviews(test_client, seeded_db, tour_documents):
    tour_id = tour_documents[0]["_id"]
    await seeded_db["reviews"].insert_many([
        {"review": "Amazing!", "rating": 5, "tour": tour_id, "user": ObjectId()},
        {"review": "Pretty good", "rating": 4, "tour": tour_id, "user": ObjectId()},
        {"review": "Other tour", "rating": 3, "tour": tour_documents[1]["_id"], "user": ObjectId()},
    ])

    response = await test_client.get(f"{TOURS}/{tour_id}")

    assert response.status_code == 200
    tour = response.json()["data"]["data"]
    assert tour["_id"] == str(tour_id)
    assert sorted(review["review"] for review in tour["reviews"]) == ["Amazing!", "Pretty good"]
    assert all(review["tour"] == str(tour_id) for review in tour["reviews"])


@pytest.mark.asyncio
async def test_get_tour_not_found(test_client):
    response = await test_client.get(f"{TOURS}/{ObjectId()}")

    assert response.status_code == 404
    assert response.json()["detail"] == "No tour found with that ID"


@pytest.mark.asyncio
async def test_get_tour_invalid_id(test_client):
    response = await test_client.get(f"{TOURS}/not-an-id")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid _id: not-an-id"


@pytest.mark.asyncio
async def test_update_tour(test_client, seeded_db, tour_documents, admin_headers):
    tour_id = tour_documents[0]["_id"]

    response = await test_client.patch(
        f"{TOURS}/{tour_id}", json={"price": 450, "maxGroupSize": 12}, headers=admin_headers
    )

    assert response.status_code == 200
    tour = response.json()["data"]["data"]
    assert tour["price"] == 450
    assert tour["maxGroupSize"] == 12
    assert tour["name"] == "The Forest Hiker"


@pytest.mark.asyncio
async def test_update_tour_not_found(test_client, admin_headers):
    response = await test_client.patch(f"{TOURS}/{ObjectId()}", json={"price": 450}, headers=admin_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_tour_validation(test_client, seeded_db, tour_documents, admin_headers):
    response = await test_client.patch(
        f"{TOURS}/{tour_documents[0]['_id']}", json={"ratingsAverage": 7}, headers=admin_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_tour(test_client, seeded_db, tour_documents, admin_headers):
    tour_id = tour_documents[2]["_id"]

    response = await test_client.delete(f"{TOURS}/{tour_id}", headers=admin_headers)
    assert response.status_code == 204
    assert response.content == b""

    response = await test_client.get(f"{TOURS}/{tour_id}")
    assert response.status_code == 404

    response = await test_client.delete(f"{TOURS}/{tour_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_tours(test_client, seeded_db):
    response = await test_client.get(TOURS)

    assert response.status_code == 200
    body = response.json()
    assert body["results"] == 3
    # Newest first by default
    assert [tour["name"] for tour in body["data"]["data"]] == [
        "The Snow Adventurer", "The Sea Explorer", "The Forest Hiker",
    ]


@pytest.mark.asyncio
async def test_list_tours_with_filters(test_client, seeded_db):
    response = await test_client.get(TOURS, params={"duration[gte]": "5", "sort": "price", "fields": "name,price"})

    body = response.json()
    assert body["results"] == 2
    tours = body["data"]["data"]
    assert [tour["name"] for tour in tours] == ["The Forest Hiker", "The Sea Explorer"]
    assert set(tours[0]) == {"_id", "name", "price"}


@pytest.mark.asyncio
async def test_list_tours_pagination(test_client, seeded_db):
    response = await test_client.get(TOURS, params={"sort": "price", "limit": "2", "page": "2"})

    body = response.json()
    assert body["results"] == 1
    assert body["data"]["data"][0]["name"] == "The Snow Adventurer"


@pytest.mark.asyncio
async def test_top_tours_alias(test_client, seeded_db):
    response = await test_client.get(f"{TOURS}/top-5-cheap", params={"limit": "100", "sort": "name"})

    assert response.status_code == 200
    tours = response.json()["data"]["data"]
    assert [tour["name"] for tour in tours] == [
        "The Sea Explorer", "The Forest Hiker", "The Snow Adventurer",
    ]
    assert set(tours[0]) == {"_id", "name", "price", "ratingsAverage", "summary", "difficulty"}
