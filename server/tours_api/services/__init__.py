"""Service layer package."""

from . import handler_factory
from .api_features import APIFeatures, alias_top_tours
from .image_service import TourImageProcessor, image_file_filter
from .tour_service import TourService

__all__ = [
    "APIFeatures",
    "TourImageProcessor",
    "TourService",
    "alias_top_tours",
    "handler_factory",
    "image_file_filter",
]
