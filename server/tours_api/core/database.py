"""MongoDB client configuration and database access."""

import logging
from typing import AsyncGenerator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .config import settings

logger = logging.getLogger(__name__)


# The client does not connect until the first operation is issued
client: AsyncIOMotorClient = AsyncIOMotorClient(
    settings.mongodb_url,
    serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
)


def get_database() -> AsyncIOMotorDatabase:
    """Return the application database handle."""
    return client[settings.mongodb_database]


async def get_db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    Dependency function that yields the application database.

    Yields:
        AsyncIOMotorDatabase: Database handle
    """
    yield get_database()


async def init_db() -> None:
    """Create the indexes declared by every registered document model."""
    from ..models import ALL_MODELS

    db = get_database()
    for model in ALL_MODELS:
        for index in model.indexes:
            name = await db[model.collection].create_index(index.keys, **index.options)
            logger.debug(
                "Index ensured",
                extra={"collection": model.collection, "index": name}
            )


async def close_db() -> None:
    """Close database connections."""
    client.close()
