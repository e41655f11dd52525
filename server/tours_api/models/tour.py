"""Tour document model."""

import re
from datetime import datetime, timezone

from pymongo import ASCENDING, DESCENDING, GEOSPHERE

from .base import DocumentModel, Index


def slugify(name: str) -> str:
    """Lowercase ``name`` and collapse every non-alphanumeric run into '-'."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def prepare_tour(document: dict) -> dict:
    """Derive the slug and stamp creation time on a new tour."""
    document["slug"] = slugify(document["name"])
    document.setdefault("createdAt", datetime.now(timezone.utc).replace(tzinfo=None))
    return document


Tour = DocumentModel(
    name="tour",
    collection="tours",
    indexes=(
        Index([("name", ASCENDING)], {"unique": True}),
        Index([("price", ASCENDING), ("ratingsAverage", DESCENDING)]),
        Index([("slug", ASCENDING)]),
        Index([("startLocation", GEOSPHERE)]),
    ),
    before_insert=prepare_tour,
)
