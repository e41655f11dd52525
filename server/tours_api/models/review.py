"""Review document model.

Reviews are written elsewhere; tours only read them back when populating.
"""

from pymongo import ASCENDING

from .base import DocumentModel, Index, Populate

Review = DocumentModel(
    name="review",
    collection="reviews",
    indexes=(Index([("tour", ASCENDING)]),),
)

TOUR_REVIEWS = Populate(
    path="reviews",
    model=Review,
    foreign_field="tour",
    projection={"review": 1, "rating": 1, "createdAt": 1, "user": 1, "tour": 1},
)
