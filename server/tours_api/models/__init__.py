"""Models module exporting all document models."""

from .base import DocumentModel, Index, Populate, parse_object_id
from .review import TOUR_REVIEWS, Review
from .tour import Tour

ALL_MODELS = (Tour, Review)

__all__ = [
    "ALL_MODELS",
    "DocumentModel",
    "Index",
    "Populate",
    "Review",
    "TOUR_REVIEWS",
    "Tour",
    "parse_object_id",
]
