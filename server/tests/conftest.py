"""Test configuration and fixtures."""

import io
from datetime import datetime

import jwt
import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient
from PIL import Image

from tours_api.core.config import settings
from tours_api.core.database import get_db
from tours_api.services.image_service import TourImageProcessor


class RecordingCursor:
    """Cursor stand-in returning canned documents."""

    def __init__(self, documents):
        self.documents = documents

    async def to_list(self, length=None):
        return list(self.documents)


class RecordingCollection:
    """
    Collection stand-in that records the filters and pipelines it receives.

    Used for geo queries, which the in-memory Mongo does not evaluate.
    """

    def __init__(self, documents=()):
        self.documents = list(documents)
        self.find_calls = []
        self.aggregate_calls = []

    def find(self, filter=None, projection=None):
        self.find_calls.append(filter)
        return RecordingCursor(self.documents)

    def aggregate(self, pipeline):
        self.aggregate_calls.append(pipeline)
        return RecordingCursor(self.documents)


class RecordingDatabase:
    def __init__(self, collection: RecordingCollection):
        self.collection = collection

    def __getitem__(self, name):
        return self.collection


def make_token(roles, subject="user-1"):
    """Sign a bearer token the way the auth service would."""
    return jwt.encode(
        {"sub": subject, "roles": list(roles)},
        settings.bearer_token_secret,
        algorithm="HS256",
    )


def make_image_bytes(size=(300, 200), color="red", format="PNG"):
    """Encode a solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=format)
    return buffer.getvalue()


@pytest_asyncio.fixture(scope="function")
async def test_db():
    """In-memory MongoDB database."""
    client = AsyncMongoMockClient()
    yield client["tours_test"]


@pytest.fixture
def images_dir(tmp_path):
    return tmp_path / "img" / "tours"


@pytest.fixture
def recording_collection():
    return RecordingCollection(documents=[{"_id": ObjectId(), "name": "The Forest Hiker"}])


def build_test_app():
    """Create a simplified FastAPI application without lifespan."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError
    from pymongo.errors import DuplicateKeyError

    from tours_api.core.exceptions import (
        ProblemDetailsException,
        duplicate_key_handler,
        generic_exception_handler,
        problem_details_handler,
        validation_exception_handler,
    )
    from tours_api.core.middleware import setup_middleware
    from tours_api.routers import metrics, tour

    app = FastAPI(
        title="Tours API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    setup_middleware(app, enable_logging=True)

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "tours-api", "version": "1.0.0"}

    app.include_router(tour.router)
    app.include_router(metrics.router)
    return app


@pytest_asyncio.fixture(scope="function")
async def test_app(test_db, images_dir):
    """Test application bound to the in-memory database and a temporary image directory."""
    from tours_api.routers.tour import get_image_processor

    app = build_test_app()

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_processor] = lambda: TourImageProcessor(images_dir)

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    # Server errors come back as 500 responses instead of being re-raised
    transport = ASGITransport(app=test_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def geo_client(recording_collection):
    """Test client whose database records geo queries instead of running them."""
    app = build_test_app()

    async def override_get_db():
        yield RecordingDatabase(recording_collection)

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(['admin'])}"}


@pytest.fixture
def guide_headers():
    return {"Authorization": f"Bearer {make_token(['guide'])}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_token(['user'])}"}


@pytest.fixture
def sample_tour_data():
    """Sample tour creation payload."""
    return {
        "name": "The Forest Hiker",
        "duration": 5,
        "maxGroupSize": 25,
        "difficulty": "easy",
        "price": 397,
        "summary": "Breathtaking hike through the Canadian Banff National Park",
        "imageCover": "tour-1-cover.jpg",
        "startDates": ["2021-04-25T09:00:00", "2021-07-20T09:00:00"],
        "startLocation": {
            "type": "Point",
            "coordinates": [-115.570154, 51.178456],
            "description": "Banff, CAN",
        },
    }


@pytest.fixture
def tour_documents():
    """Stored tours: two top-rated, one below the 4.5 threshold."""
    return [
        {
            "_id": ObjectId(),
            "name": "The Forest Hiker",
            "slug": "the-forest-hiker",
            "difficulty": "easy",
            "ratingsAverage": 4.6,
            "ratingsQuantity": 37,
            "price": 397,
            "duration": 5,
            "summary": "Breathtaking hike through the Canadian Banff National Park",
            "startDates": [datetime(2021, 4, 25, 9), datetime(2021, 7, 20, 9)],
            "createdAt": datetime(2021, 1, 1),
        },
        {
            "_id": ObjectId(),
            "name": "The Sea Explorer",
            "slug": "the-sea-explorer",
            "difficulty": "medium",
            "ratingsAverage": 4.8,
            "ratingsQuantity": 23,
            "price": 497,
            "duration": 7,
            "summary": "Exploring the jaw-dropping US east coast by foot and by boat",
            "startDates": [datetime(2021, 7, 20, 9), datetime(2022, 3, 1, 9)],
            "createdAt": datetime(2021, 1, 2),
        },
        {
            "_id": ObjectId(),
            "name": "The Snow Adventurer",
            "slug": "the-snow-adventurer",
            "difficulty": "difficult",
            "ratingsAverage": 4.0,
            "ratingsQuantity": 13,
            "price": 997,
            "duration": 4,
            "summary": "Exciting adventure in the snow with snowboarding and skiing",
            "startDates": [datetime(2022, 1, 5, 10)],
            "createdAt": datetime(2021, 1, 3),
        },
    ]


@pytest_asyncio.fixture
async def seeded_db(test_db, tour_documents):
    """In-memory database holding ``tour_documents``."""
    await test_db["tours"].insert_many([dict(document) for document in tour_documents])
    return test_db


@pytest.fixture
def image_factory():
    """Callable producing encoded image bytes."""
    return make_image_bytes
