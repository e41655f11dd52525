"""Generic CRUD handlers bound to a document model.

Each factory takes a :class:`DocumentModel` (and, for ``get_one``, an optional
relation to populate) and returns an async handler producing the HTTP
response, so routers only bind paths and dependencies::

    get_tour = handler_factory.get_one(Tour, populate=TOUR_REVIEWS)
    ...
    return await get_tour(db, tour_id)
"""

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from fastapi import Response
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument

from ..core.exceptions import NotFoundError
from ..core.responses import success_response
from ..models.base import DocumentModel, Populate, parse_object_id
from .api_features import APIFeatures

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Response]]


async def _populate(db: AsyncIOMotorDatabase, document: dict, populate: Populate) -> dict:
    cursor = db[populate.model.collection].find(
        {populate.foreign_field: document[populate.local_field]},
        populate.projection,
    )
    document[populate.path] = await cursor.to_list(length=None)
    return document


def get_all(model: DocumentModel) -> Handler:
    """List documents, filtered/sorted/paginated from the query parameters."""

    async def handler(db: AsyncIOMotorDatabase, query: Mapping[str, str]) -> Response:
        features = APIFeatures.from_query(query)
        cursor = features.apply(
            db[model.collection].find(features.filter, features.projection)
        )
        documents = await cursor.to_list(length=None)

        logger.info(
            "Documents listed",
            extra={
                "collection": model.collection,
                "filter": features.filter,
                "count": len(documents),
            }
        )

        return success_response({"data": documents}, results=len(documents))

    return handler


def get_one(model: DocumentModel, populate: Optional[Populate] = None) -> Handler:
    """Fetch one document by id, optionally resolving a related collection."""

    async def handler(db: AsyncIOMotorDatabase, document_id: str) -> Response:
        document = await db[model.collection].find_one({"_id": parse_object_id(document_id)})
        if not document:
            raise NotFoundError(resource_type=model.name, resource_id=document_id)

        if populate:
            document = await _populate(db, document, populate)

        return success_response({"data": document})

    return handler


def create_one(model: DocumentModel) -> Handler:
    """Insert a validated document; 201 with the stored document."""

    async def handler(db: AsyncIOMotorDatabase, payload: BaseModel) -> Response:
        document: dict[str, Any] = payload.model_dump(by_alias=True, exclude_none=True)
        if model.before_insert:
            document = model.before_insert(document)

        result = await db[model.collection].insert_one(document)
        document["_id"] = result.inserted_id

        logger.info(
            "Document created",
            extra={"collection": model.collection, "id": str(result.inserted_id)}
        )

        return success_response({"data": document}, status_code=201)

    return handler


def update_one(model: DocumentModel) -> Handler:
    """Apply the fields explicitly set on ``changes`` and return the new document."""

    async def handler(db: AsyncIOMotorDatabase, document_id: str, changes: BaseModel) -> Response:
        object_id = parse_object_id(document_id)
        fields = changes.model_dump(by_alias=True, exclude_unset=True)
        collection = db[model.collection]

        if fields:
            document = await collection.find_one_and_update(
                {"_id": object_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        else:
            document = await collection.find_one({"_id": object_id})

        if not document:
            raise NotFoundError(resource_type=model.name, resource_id=document_id)

        logger.info(
            "Document updated",
            extra={"collection": model.collection, "id": document_id, "fields": sorted(fields)}
        )

        return success_response({"data": document})

    return handler


def delete_one(model: DocumentModel) -> Handler:
    """Delete by id; 204 with no body."""

    async def handler(db: AsyncIOMotorDatabase, document_id: str) -> Response:
        result = await db[model.collection].delete_one({"_id": parse_object_id(document_id)})
        if result.deleted_count == 0:
            raise NotFoundError(resource_type=model.name, resource_id=document_id)

        logger.info(
            "Document deleted",
            extra={"collection": model.collection, "id": document_id}
        )

        return success_response(status_code=204)

    return handler
