"""Document model descriptors shared by the Mongo-backed collections."""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from bson import ObjectId
from bson.errors import InvalidId

from ..core.exceptions import BadRequestError


@dataclass(frozen=True)
class Index:
    """A collection index: ``keys`` as passed to ``create_index``."""

    keys: list[tuple[str, Any]]
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentModel:
    """
    Everything the generic handlers need to know about one collection.

    Attributes:
        name: Singular resource name used in messages ("tour")
        collection: Mongo collection name
        indexes: Indexes created at startup
        before_insert: Hook run on the document dict before it is inserted
    """

    name: str
    collection: str
    indexes: tuple[Index, ...] = ()
    before_insert: Optional[Callable[[dict], dict]] = None


@dataclass(frozen=True)
class Populate:
    """A one-to-many relation resolved after a single-document read."""

    path: str
    model: DocumentModel
    foreign_field: str
    local_field: str = "_id"
    projection: Optional[dict[str, int]] = None


def parse_object_id(value: str) -> ObjectId:
    """
    Parse a path identifier into an ObjectId.

    Raises:
        BadRequestError: If the value is not a valid ObjectId
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise BadRequestError(detail=f"Invalid _id: {value}")
